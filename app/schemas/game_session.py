from pydantic import BaseModel, Field


class Game(BaseModel):
    """Stored state of one turn-based session.

    A freshly created game is active, not started, and rotates clockwise.
    Ids that were never created read back with every field at its zero
    value, including ``direction_clockwise``.
    """

    game_id: int = 0
    is_active: bool = False
    current_player_index: int = Field(0, ge=0)
    last_action_timestamp: int = 0
    turn_count: int = Field(0, ge=0)
    direction_clockwise: bool = False
    is_started: bool = False


# One recorded turn, keyed by (game_id, turn_index) in the action log
class ActionRecord(BaseModel):
    game_id: int
    turn_index: int
    player: str
    action_payload: str
    timestamp: int
