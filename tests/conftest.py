"""Shared fixtures for game session tests."""

import pytest

from app.services.game import GameStateMachine

# Fixed identities for deterministic testing
PLAYER_1_ID = "0x0000000000000000000000000000000000000001"
PLAYER_2_ID = "0x0000000000000000000000000000000000000002"
PLAYER_3_ID = "0x0000000000000000000000000000000000000003"
PLAYER_4_ID = "0x0000000000000000000000000000000000000004"
CREATOR_ID = "0x00000000000000000000000000000000000000c0"

ACTION_PAYLOAD = "0x" + "ab" * 32
OTHER_PAYLOAD = "0x" + "cd" * 32

START_TIME = 1_700_000_000


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: int = START_TIME) -> None:
        self.now = start

    def __call__(self) -> int:
        value = self.now
        self.now += 1
        return value


def player_id(n: int) -> str:
    """Build a deterministic player identity for roster-filling loops."""
    return f"0x{n:040x}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def machine(clock: FakeClock) -> GameStateMachine:
    """Fresh state machine with default limits and a fake clock."""
    return GameStateMachine(clock=clock)


@pytest.fixture
def created_game(machine: GameStateMachine) -> int:
    """Game with an empty roster."""
    return machine.create_game(CREATOR_ID).game_id


@pytest.fixture
def two_player_game(machine: GameStateMachine, created_game: int) -> int:
    """Created game with players 1 and 2 joined, not started."""
    machine.join_game(created_game, PLAYER_1_ID)
    machine.join_game(created_game, PLAYER_2_ID)
    return created_game


@pytest.fixture
def started_game(machine: GameStateMachine, two_player_game: int) -> int:
    """Two-player game that has been started; player 1 to act."""
    result = machine.start_game(two_player_game)
    assert result.success
    return two_player_game


@pytest.fixture
def three_player_started_game(machine: GameStateMachine, created_game: int) -> int:
    """Three-player game that has been started; player 1 to act."""
    for pid in (PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID):
        machine.join_game(created_game, pid)
    assert machine.start_game(created_game).success
    return created_game
