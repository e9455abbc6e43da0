"""Dense listing index of games that have not ended."""

import logging

logger = logging.getLogger(__name__)


class ActiveGameIndex:
    """Dense array of game ids plus a populated-position count.

    Positions ``[0, count)`` are exactly the listed games. Appends preserve
    creation order; removal swaps the last entry into the freed slot, so
    order is not meaningful after any removal.
    """

    def __init__(self) -> None:
        self._positions: list[int] = []
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def add(self, game_id: int) -> None:
        if self._count < len(self._positions):
            self._positions[self._count] = game_id
        else:
            self._positions.append(game_id)
        self._count += 1

    def remove_by_swap(self, game_id: int) -> bool:
        """Remove the first position holding ``game_id``.

        Returns False without raising when the id is not listed.
        """
        last = self._count - 1
        for i in range(self._count):
            if self._positions[i] != game_id:
                continue
            if i != last:
                self._positions[i] = self._positions[last]
            self._count -= 1
            logger.debug(
                "Removed game %d from position %d, %d active remaining",
                game_id,
                i,
                self._count,
            )
            return True

        logger.debug("Game %d not in active index, nothing removed", game_id)
        return False

    def list_active(self) -> list[int]:
        return self._positions[: self._count]

    def __len__(self) -> int:
        return self._count
