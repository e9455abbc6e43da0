"""Validation layer for lifecycle operations and ProcessResult pattern.

Separates precondition checks from state changes:
- validate_* functions inspect current state and never mutate it
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from app.schemas.game_session import Game

from .events import AnyGameEvent

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    GAME_NOT_ACTIVE = "GAME_NOT_ACTIVE"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    GAME_FULL = "GAME_FULL"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"


@dataclass
class ProcessResult:
    """Result of a lifecycle operation.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for mapping onto HTTP statuses.
    """

    game: Game | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    success: bool = True
    error_code: ErrorCode | None = None
    error_message: str | None = None

    @property
    def game_id(self) -> int | None:
        return self.game.game_id if self.game is not None else None

    @classmethod
    def ok(
        cls,
        game: Game,
        events: list[AnyGameEvent] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with the updated game and events."""
        return cls(
            game=game,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: ErrorCode, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            game=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating an operation before applying it."""

    is_valid: bool = True
    error_code: ErrorCode | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: ErrorCode, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def validate_join(game: Game, roster_size: int, max_players: int) -> ValidationResult:
    """Check that a player may be appended to the roster.

    Neither duplicates nor games that already started are rejected.
    """
    if not game.is_active:
        logger.warning("Validation failed: GAME_NOT_ACTIVE, game=%d", game.game_id)
        return ValidationResult.error(ErrorCode.GAME_NOT_ACTIVE, "Game is not active")

    if roster_size >= max_players:
        logger.warning(
            "Validation failed: GAME_FULL, game=%d, roster_size=%d, max=%d",
            game.game_id,
            roster_size,
            max_players,
        )
        return ValidationResult.error(ErrorCode.GAME_FULL, "Game is full")

    return ValidationResult.ok()


def validate_start(game: Game, roster_size: int, min_players: int) -> ValidationResult:
    """Check that a game may be started.

    Only the started flag and roster size are consulted.
    """
    if game.is_started:
        logger.warning("Validation failed: GAME_ALREADY_STARTED, game=%d", game.game_id)
        return ValidationResult.error(
            ErrorCode.GAME_ALREADY_STARTED,
            "Game has already started",
        )

    if roster_size < min_players:
        logger.warning(
            "Validation failed: NOT_ENOUGH_PLAYERS, game=%d, roster_size=%d, min=%d",
            game.game_id,
            roster_size,
            min_players,
        )
        return ValidationResult.error(
            ErrorCode.NOT_ENOUGH_PLAYERS,
            f"At least {min_players} players are required to start",
        )

    return ValidationResult.ok()


def validate_turn(game: Game, current_player: str | None, actor: str) -> ValidationResult:
    """Check that the game is active and it is the actor's turn.

    Shared by submit_action and end_game. An empty roster has no current
    player, so every actor is rejected.
    """
    if not game.is_active:
        logger.warning("Validation failed: GAME_NOT_ACTIVE, game=%d", game.game_id)
        return ValidationResult.error(ErrorCode.GAME_NOT_ACTIVE, "Game is not active")

    if current_player is None or current_player != actor:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, game=%d, current=%s, attempted=%s",
            game.game_id,
            current_player,
            actor,
        )
        return ValidationResult.error(ErrorCode.NOT_YOUR_TURN, "It's not your turn")

    return ValidationResult.ok()
