"""Game registry - owns game records and issues sequential identifiers."""

import logging

from app.schemas.game_session import Game

logger = logging.getLogger(__name__)


class GameRegistry:
    """Mapping from game id to its Game record.

    Ids are allocated as ``counter + 1`` with the counter starting at 0, so
    the first game is 1. Records are never deleted.
    """

    def __init__(self) -> None:
        self._games: dict[int, Game] = {}
        self._counter = 0

    @property
    def last_id(self) -> int:
        return self._counter

    def create(self, now: int) -> Game:
        """Allocate the next id and store a fresh active record."""
        self._counter += 1
        game = Game(
            game_id=self._counter,
            is_active=True,
            current_player_index=0,
            last_action_timestamp=now,
            turn_count=0,
            direction_clockwise=True,
            is_started=False,
        )
        self._games[game.game_id] = game
        logger.debug("Registered game %d at %d", game.game_id, now)
        return game.model_copy()

    def get(self, game_id: int) -> Game:
        """Return a copy of the stored record.

        Unknown ids yield the zero record rather than an error.
        """
        game = self._games.get(game_id)
        if game is None:
            logger.debug("Game %d not registered, returning zero record", game_id)
            return Game(game_id=game_id)
        return game.model_copy()

    def save(self, game: Game) -> None:
        self._games[game.game_id] = game

    def exists(self, game_id: int) -> bool:
        return game_id in self._games

    def count(self) -> int:
        return len(self._games)
