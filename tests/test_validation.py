"""Tests for lifecycle precondition validation.

Critical scenarios tested:
- Join rejected for ended/unknown games and full rosters
- Start rejected twice or below the player minimum
- Submit/end rejected outside the actor's turn or for inactive games
- Rejections leave state untouched and emit no events
"""

from app.services.game import ErrorCode, GameStateMachine

from .conftest import (
    ACTION_PAYLOAD,
    PLAYER_1_ID,
    PLAYER_2_ID,
    PLAYER_3_ID,
    player_id,
)


class TestJoinValidation:
    """Test join preconditions."""

    def test_first_ten_joins_succeed_eleventh_is_full(
        self, machine: GameStateMachine, created_game: int
    ):
        for n in range(10):
            result = machine.join_game(created_game, player_id(n))
            assert result.success, f"join {n + 1} should succeed"

        result = machine.join_game(created_game, player_id(10))

        assert not result.success
        assert result.error_code == ErrorCode.GAME_FULL
        assert len(machine.get_players(created_game)) == 10

    def test_cannot_join_unknown_game(self, machine: GameStateMachine):
        result = machine.join_game(42, PLAYER_1_ID)

        assert not result.success
        assert result.error_code == ErrorCode.GAME_NOT_ACTIVE

    def test_cannot_join_ended_game(self, machine: GameStateMachine, started_game: int):
        assert machine.end_game(started_game, PLAYER_1_ID).success

        result = machine.join_game(started_game, PLAYER_3_ID)

        assert not result.success
        assert result.error_code == ErrorCode.GAME_NOT_ACTIVE

    def test_can_join_after_start(self, machine: GameStateMachine, started_game: int):
        result = machine.join_game(started_game, PLAYER_3_ID)

        assert result.success
        assert machine.get_players(started_game) == [PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID]

    def test_same_player_can_join_twice(self, machine: GameStateMachine, created_game: int):
        machine.join_game(created_game, PLAYER_1_ID)

        result = machine.join_game(created_game, PLAYER_1_ID)

        assert result.success
        assert machine.get_players(created_game) == [PLAYER_1_ID, PLAYER_1_ID]

    def test_full_check_respects_configured_capacity(self):
        machine = GameStateMachine(max_players=2)
        game_id = machine.create_game(PLAYER_1_ID).game_id
        machine.join_game(game_id, PLAYER_1_ID)
        machine.join_game(game_id, PLAYER_2_ID)

        result = machine.join_game(game_id, PLAYER_3_ID)

        assert result.error_code == ErrorCode.GAME_FULL


class TestStartValidation:
    """Test start preconditions."""

    def test_cannot_start_with_no_players(self, machine: GameStateMachine, created_game: int):
        result = machine.start_game(created_game)

        assert not result.success
        assert result.error_code == ErrorCode.NOT_ENOUGH_PLAYERS

    def test_cannot_start_with_one_player(self, machine: GameStateMachine, created_game: int):
        machine.join_game(created_game, PLAYER_1_ID)

        result = machine.start_game(created_game)

        assert result.error_code == ErrorCode.NOT_ENOUGH_PLAYERS
        assert machine.get_game_state(created_game).is_started is False

    def test_cannot_start_game_twice(self, machine: GameStateMachine, started_game: int):
        result = machine.start_game(started_game)

        assert not result.success
        assert result.error_code == ErrorCode.GAME_ALREADY_STARTED

    def test_ended_game_can_still_be_marked_started(
        self, machine: GameStateMachine, two_player_game: int
    ):
        """Start does not consult is_active; the game stays ended and unlisted."""
        assert machine.end_game(two_player_game, PLAYER_1_ID).success

        result = machine.start_game(two_player_game)

        assert result.success
        assert [e.event_type for e in result.events] == ["game_started"]
        game = machine.get_game_state(two_player_game)
        assert game.is_started is True
        assert game.is_active is False
        assert two_player_game not in machine.get_active_games()
        assert two_player_game not in machine.get_not_started_games()

    def test_already_started_checked_before_player_count(self):
        """A started game is reported as started even if the minimum is now higher."""
        machine = GameStateMachine()
        game_id = machine.create_game(PLAYER_1_ID).game_id
        machine.join_game(game_id, PLAYER_1_ID)
        machine.join_game(game_id, PLAYER_2_ID)
        machine.start_game(game_id)
        machine.min_players_to_start = 5

        result = machine.start_game(game_id)

        assert result.error_code == ErrorCode.GAME_ALREADY_STARTED


class TestTurnValidation:
    """Test turn ownership checks for submit_action and end_game."""

    def test_cannot_act_on_other_players_turn(
        self, machine: GameStateMachine, started_game: int
    ):
        result = machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_2_ID)

        assert not result.success
        assert result.error_code == ErrorCode.NOT_YOUR_TURN

    def test_outsider_cannot_act(self, machine: GameStateMachine, started_game: int):
        result = machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_3_ID)

        assert result.error_code == ErrorCode.NOT_YOUR_TURN

    def test_cannot_end_on_other_players_turn(
        self, machine: GameStateMachine, started_game: int
    ):
        result = machine.end_game(started_game, PLAYER_2_ID)

        assert not result.success
        assert result.error_code == ErrorCode.NOT_YOUR_TURN
        assert machine.get_game_state(started_game).is_active is True

    def test_empty_roster_has_no_current_player(
        self, machine: GameStateMachine, created_game: int
    ):
        result = machine.submit_action(created_game, ACTION_PAYLOAD, PLAYER_1_ID)

        assert result.error_code == ErrorCode.NOT_YOUR_TURN
        assert machine.end_game(created_game, "").error_code == ErrorCode.NOT_YOUR_TURN

    def test_cannot_act_in_unknown_game(self, machine: GameStateMachine):
        result = machine.submit_action(7, ACTION_PAYLOAD, PLAYER_1_ID)

        assert result.error_code == ErrorCode.GAME_NOT_ACTIVE

    def test_cannot_act_in_ended_game(self, machine: GameStateMachine, started_game: int):
        machine.end_game(started_game, PLAYER_1_ID)

        assert (
            machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_1_ID).error_code
            == ErrorCode.GAME_NOT_ACTIVE
        )
        assert machine.end_game(started_game, PLAYER_1_ID).error_code == ErrorCode.GAME_NOT_ACTIVE


class TestRejectionsHaveNoEffect:
    """Failed operations leave state, index, log and event sequence untouched."""

    def test_failed_submit_changes_nothing(self, machine: GameStateMachine, started_game: int):
        before = machine.get_game_state(started_game)
        seq_before = machine.event_seq

        result = machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_2_ID)

        assert result.events == []
        assert result.game is None
        assert machine.get_game_state(started_game) == before
        assert machine.get_action(started_game, 0) is None
        assert machine.event_seq == seq_before

    def test_failed_end_keeps_game_listed(self, machine: GameStateMachine, started_game: int):
        machine.end_game(started_game, PLAYER_2_ID)

        assert started_game in machine.get_active_games()

    def test_failed_join_does_not_grow_roster(self, machine: GameStateMachine, started_game: int):
        machine.end_game(started_game, PLAYER_1_ID)

        machine.join_game(started_game, PLAYER_3_ID)

        assert machine.get_players(started_game) == [PLAYER_1_ID, PLAYER_2_ID]
