"""Game lifecycle state machine - entry point for every operation.

This module provides the public operation surface:
- create_game / join_game / start_game / submit_action / end_game
- read-only queries over games, rosters, actions and the active index

Every call runs to completion under one re-entrant lock. Mutating calls
validate first and only then write, so a rejected call leaves no trace and
emits no events.
"""

import logging
import threading
import time
from collections.abc import Callable

from app.config import get_settings
from app.schemas.game_session import ActionRecord, Game

from .action_log import ActionLog
from .active_index import ActiveGameIndex
from .events import (
    ActionSubmitted,
    AnyGameEvent,
    GameCreated,
    GameEnded,
    GameStarted,
    PlayerJoined,
)
from .registry import GameRegistry
from .roster import PlayerRoster
from .validation import (
    ProcessResult,
    ValidationResult,
    validate_join,
    validate_start,
    validate_turn,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def unix_now() -> int:
    return int(time.time())


class GameStateMachine:
    """Multi-game turn rotation manager.

    States per game: created (active, not started), started (active,
    started) and ended (not active). Nothing leaves the ended state.
    """

    def __init__(
        self,
        max_players: int = 10,
        min_players_to_start: int = 2,
        not_started_threshold: int = 3,
        clock: Clock = unix_now,
    ) -> None:
        self.min_players_to_start = min_players_to_start
        self.not_started_threshold = not_started_threshold
        self._clock = clock

        self.registry = GameRegistry()
        self.roster = PlayerRoster(max_players=max_players)
        self.actions = ActionLog()
        self.active_index = ActiveGameIndex()

        self._event_seq = 0
        self._lock = threading.RLock()

    @property
    def max_players(self) -> int:
        return self.roster.max_players

    @property
    def event_seq(self) -> int:
        """Next sequence number to be assigned to an event."""
        return self._event_seq

    # --- Lifecycle operations ---

    def create_game(self, creator: str) -> ProcessResult:
        """Register a new game and list it as active.

        Cannot fail. The new id is available as ``result.game_id``.
        """
        with self._lock:
            game = self.registry.create(now=self._clock())
            self.active_index.add(game.game_id)
            logger.info("Game created: game=%d, creator=%s", game.game_id, creator)
            return self._ok(game, [GameCreated(game_id=game.game_id, creator=creator)])

    def join_game(self, game_id: int, player: str) -> ProcessResult:
        """Append ``player`` to the roster of an active game.

        Joining a started game, or joining twice, is accepted.
        """
        with self._lock:
            game = self.registry.get(game_id)
            validation = validate_join(game, self.roster.size(game_id), self.max_players)
            if not validation.is_valid:
                return self._reject(validation)

            slot = self.roster.append(game_id, player)
            logger.info("Player joined: game=%d, player=%s, slot=%d", game_id, player, slot)
            return self._ok(game, [PlayerJoined(game_id=game_id, player=player)])

    def start_game(self, game_id: int) -> ProcessResult:
        """Mark a game as started once enough players have joined.

        Turn order and the current player index are left untouched, so the
        player in slot 0 acts first.
        """
        with self._lock:
            game = self.registry.get(game_id)
            validation = validate_start(
                game, self.roster.size(game_id), self.min_players_to_start
            )
            if not validation.is_valid:
                return self._reject(validation)

            game = game.model_copy(
                update={"is_started": True, "last_action_timestamp": self._clock()}
            )
            self.registry.save(game)
            logger.info(
                "Game started: game=%d, players=%d", game_id, self.roster.size(game_id)
            )
            return self._ok(game, [GameStarted(game_id=game_id)])

    def submit_action(self, game_id: int, action_payload: str, actor: str) -> ProcessResult:
        """Record the current player's action and rotate the turn.

        The action is stored under the turn index it was made in; the turn
        counter then advances by one and the current player index moves
        forward modulo the roster size. Started is not required.
        """
        with self._lock:
            game = self.registry.get(game_id)
            current_player = self.roster.player_at(game_id, game.current_player_index)
            validation = validate_turn(game, current_player, actor)
            if not validation.is_valid:
                return self._reject(validation)

            now = self._clock()
            self.actions.record(
                game_id=game_id,
                turn_index=game.turn_count,
                player=actor,
                action_payload=action_payload,
                timestamp=now,
            )
            game = game.model_copy(
                update={
                    "turn_count": game.turn_count + 1,
                    "current_player_index": (game.current_player_index + 1)
                    % self.roster.size(game_id),
                    "last_action_timestamp": now,
                }
            )
            self.registry.save(game)
            logger.info(
                "Action submitted: game=%d, player=%s, turn=%d, next_index=%d",
                game_id,
                actor,
                game.turn_count - 1,
                game.current_player_index,
            )
            return self._ok(
                game,
                [ActionSubmitted(game_id=game_id, player=actor, action_payload=action_payload)],
            )

    def end_game(self, game_id: int, actor: str) -> ProcessResult:
        """Retire a game on the current player's turn.

        Turn count and current player index are kept as they were.
        """
        with self._lock:
            game = self.registry.get(game_id)
            current_player = self.roster.player_at(game_id, game.current_player_index)
            validation = validate_turn(game, current_player, actor)
            if not validation.is_valid:
                return self._reject(validation)

            game = game.model_copy(update={"is_active": False})
            self.registry.save(game)
            self.active_index.remove_by_swap(game_id)
            logger.info(
                "Game ended: game=%d, by=%s, turns=%d", game_id, actor, game.turn_count
            )
            return self._ok(game, [GameEnded(game_id=game_id)])

    # --- Queries ---

    def get_game_state(self, game_id: int) -> Game:
        """Public summary of a game; the zero record for unknown ids."""
        with self._lock:
            return self.registry.get(game_id)

    def get_active_games(self) -> list[int]:
        with self._lock:
            return self.active_index.list_active()

    def get_not_started_games(self, threshold: int | None = None) -> list[int]:
        """Active games that have not started and have fewer than
        ``threshold`` players.

        The default threshold is configured separately from the start
        minimum.
        """
        if threshold is None:
            threshold = self.not_started_threshold
        with self._lock:
            return [
                game_id
                for game_id in self.active_index.list_active()
                if not self.registry.get(game_id).is_started
                and self.roster.size(game_id) < threshold
            ]

    def get_players(self, game_id: int) -> list[str]:
        with self._lock:
            return self.roster.players(game_id)

    def get_current_player(self, game_id: int) -> str | None:
        with self._lock:
            game = self.registry.get(game_id)
            return self.roster.player_at(game_id, game.current_player_index)

    def get_action(self, game_id: int, turn_index: int) -> ActionRecord | None:
        with self._lock:
            return self.actions.get(game_id, turn_index)

    # --- Internals ---

    def _ok(self, game: Game, events: list[AnyGameEvent]) -> ProcessResult:
        return ProcessResult.ok(game.model_copy(), self._assign_event_sequences(events))

    def _reject(self, validation: ValidationResult) -> ProcessResult:
        return ProcessResult.failure(
            validation.error_code,
            validation.error_message or "Invalid operation",
        )

    def _assign_event_sequences(self, events: list[AnyGameEvent]) -> list[AnyGameEvent]:
        """Assign monotonically increasing sequence numbers across all games."""
        for event in events:
            event.seq = self._event_seq
            self._event_seq += 1
        logger.debug("Generated events: %s", [type(e).__name__ for e in events])
        return events


_game_machine: GameStateMachine | None = None
_machine_lock = threading.Lock()


def get_game_machine() -> GameStateMachine:
    """Get the process-wide state machine, built from settings on first use."""
    global _game_machine
    with _machine_lock:
        if _game_machine is None:
            settings = get_settings()
            logger.info("Initializing game state machine")
            _game_machine = GameStateMachine(
                max_players=settings.MAX_PLAYERS_PER_GAME,
                min_players_to_start=settings.MIN_PLAYERS_TO_START,
                not_started_threshold=settings.NOT_STARTED_ROSTER_THRESHOLD,
            )
        return _game_machine


def reset_game_machine() -> None:
    """Drop the process-wide state machine; the next lookup builds a new one."""
    global _game_machine
    with _machine_lock:
        _game_machine = None
        logger.debug("Game state machine reset")
