"""Per-turn action records."""

from app.schemas.game_session import ActionRecord


class ActionLog:
    """Actions keyed by (game_id, turn_index); one slot per turn."""

    def __init__(self) -> None:
        self._actions: dict[tuple[int, int], ActionRecord] = {}

    def record(
        self,
        game_id: int,
        turn_index: int,
        player: str,
        action_payload: str,
        timestamp: int,
    ) -> ActionRecord:
        action = ActionRecord(
            game_id=game_id,
            turn_index=turn_index,
            player=player,
            action_payload=action_payload,
            timestamp=timestamp,
        )
        self._actions[(game_id, turn_index)] = action
        return action

    def get(self, game_id: int, turn_index: int) -> ActionRecord | None:
        return self._actions.get((game_id, turn_index))

    def for_game(self, game_id: int) -> list[ActionRecord]:
        """All recorded actions of a game in turn order."""
        return sorted(
            (a for (gid, _), a in self._actions.items() if gid == game_id),
            key=lambda a: a.turn_index,
        )
