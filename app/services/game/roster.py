"""Per-game ordered player rosters."""

from collections import defaultdict


class PlayerRoster:
    """Ordered player identities per game.

    Insertion order is turn order. Capacity is enforced by the caller
    through validation; the same identity may hold several slots.
    """

    def __init__(self, max_players: int = 10) -> None:
        self.max_players = max_players
        self._players: defaultdict[int, list[str]] = defaultdict(list)

    def append(self, game_id: int, player: str) -> int:
        """Add ``player`` at the next free slot and return that slot index."""
        slots = self._players[game_id]
        if len(slots) >= self.max_players:
            raise ValueError(f"roster for game {game_id} is at capacity")
        slots.append(player)
        return len(slots) - 1

    def size(self, game_id: int) -> int:
        return len(self._players.get(game_id, ()))

    def players(self, game_id: int) -> list[str]:
        return list(self._players.get(game_id, ()))

    def player_at(self, game_id: int, index: int) -> str | None:
        slots = self._players.get(game_id, ())
        if 0 <= index < len(slots):
            return slots[index]
        return None
