"""Tests for event generation and sequencing.

Critical scenarios tested:
- Each successful operation emits exactly one typed event
- Seq numbers are strictly increasing across games
- Events round-trip through the discriminated union
"""

from pydantic import TypeAdapter

from app.services.game import (
    ActionSubmitted,
    AnyGameEvent,
    GameCreated,
    GameEnded,
    GameStarted,
    GameStateMachine,
    PlayerJoined,
)

from .conftest import ACTION_PAYLOAD, CREATOR_ID, PLAYER_1_ID, PLAYER_2_ID


class TestEventTypes:
    """Test the event emitted by each operation."""

    def test_game_created_event(self, machine: GameStateMachine):
        result = machine.create_game(CREATOR_ID)

        (event,) = result.events
        assert isinstance(event, GameCreated)
        assert event.game_id == result.game_id
        assert event.creator == CREATOR_ID

    def test_player_joined_event(self, machine: GameStateMachine, created_game: int):
        result = machine.join_game(created_game, PLAYER_1_ID)

        (event,) = result.events
        assert isinstance(event, PlayerJoined)
        assert event.game_id == created_game
        assert event.player == PLAYER_1_ID

    def test_game_started_event(self, machine: GameStateMachine, two_player_game: int):
        result = machine.start_game(two_player_game)

        (event,) = result.events
        assert isinstance(event, GameStarted)
        assert event.event_type == "game_started"

    def test_action_submitted_event(self, machine: GameStateMachine, started_game: int):
        result = machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_1_ID)

        (event,) = result.events
        assert isinstance(event, ActionSubmitted)
        assert event.player == PLAYER_1_ID
        assert event.action_payload == ACTION_PAYLOAD

    def test_game_ended_event(self, machine: GameStateMachine, started_game: int):
        result = machine.end_game(started_game, PLAYER_1_ID)

        (event,) = result.events
        assert isinstance(event, GameEnded)
        assert event.game_id == started_game


class TestEventSequencing:
    """Test that events have proper sequence numbers."""

    def test_seq_starts_at_zero(self, machine: GameStateMachine):
        result = machine.create_game(CREATOR_ID)

        assert result.events[0].seq == 0
        assert machine.event_seq == 1

    def test_seq_increases_across_games(self, machine: GameStateMachine):
        results = [
            machine.create_game(CREATOR_ID),
            machine.create_game(CREATOR_ID),
            machine.join_game(1, PLAYER_1_ID),
            machine.join_game(2, PLAYER_2_ID),
            machine.join_game(1, PLAYER_2_ID),
            machine.start_game(1),
        ]

        seqs = [event.seq for result in results for event in result.events]
        assert seqs == list(range(6))

    def test_failures_do_not_consume_seq(self, machine: GameStateMachine, created_game: int):
        next_seq = machine.event_seq
        machine.start_game(created_game)

        result = machine.join_game(created_game, PLAYER_1_ID)

        assert result.events[0].seq == next_seq


class TestEventSerialization:
    def test_events_parse_back_by_event_type(self, machine: GameStateMachine, started_game: int):
        adapter = TypeAdapter(AnyGameEvent)
        event = machine.submit_action(started_game, ACTION_PAYLOAD, PLAYER_1_ID).events[0]

        parsed = adapter.validate_python(event.model_dump(mode="json"))

        assert isinstance(parsed, ActionSubmitted)
        assert parsed == event
