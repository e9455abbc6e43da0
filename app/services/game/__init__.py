"""Game service module - turn rotation session core.

Provides:
- Lifecycle state machine (machine.py)
- Registry, roster, action log and active index components
- Event types for observers (events.py)
- ProcessResult pattern for error handling (validation.py)

Usage:
    from app.services.game import get_game_machine

    machine = get_game_machine()
    result = machine.submit_action(game_id, payload, player_id)

    if result.success:
        summary = result.game
        events = result.events  # Broadcast these via WebSocket
    else:
        print(f"Error: {result.error_code} - {result.error_message}")
"""

from .action_log import ActionLog
from .active_index import ActiveGameIndex
from .events import (
    ActionSubmitted,
    AnyGameEvent,
    GameCreated,
    GameEnded,
    GameEvent,
    GameStarted,
    PlayerJoined,
)
from .machine import GameStateMachine, get_game_machine, reset_game_machine
from .registry import GameRegistry
from .roster import PlayerRoster
from .validation import ErrorCode, ProcessResult, ValidationResult

__all__ = [
    # State machine
    "GameStateMachine",
    "get_game_machine",
    "reset_game_machine",
    # Components
    "ActionLog",
    "ActiveGameIndex",
    "GameRegistry",
    "PlayerRoster",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "GameCreated",
    "PlayerJoined",
    "GameStarted",
    "ActionSubmitted",
    "GameEnded",
    # Results
    "ErrorCode",
    "ProcessResult",
    "ValidationResult",
]
