"""Game event types - emitted by lifecycle transitions for observers.

Events describe what a successful operation changed, enabling:
- WebSocket fan-out to spectators and clients
- Audit logging of every transition
- Reconnection catch-up by sequence number

Failed operations emit nothing.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    game_id: int
    seq: int = 0  # Sequence number assigned during processing


class GameCreated(GameEvent):
    """A new game was registered and listed as active."""

    event_type: Literal["game_created"] = "game_created"
    creator: str


class PlayerJoined(GameEvent):
    """A player was appended to the game's roster."""

    event_type: Literal["player_joined"] = "player_joined"
    player: str


class GameStarted(GameEvent):
    """Game has transitioned from created to started."""

    event_type: Literal["game_started"] = "game_started"


class ActionSubmitted(GameEvent):
    """The current player recorded an action and the turn rotated."""

    event_type: Literal["action_submitted"] = "action_submitted"
    player: str
    action_payload: str = Field(..., description="Opaque payload supplied by the caller")


class GameEnded(GameEvent):
    """The game is no longer active."""

    event_type: Literal["game_ended"] = "game_ended"


# Union of all event types for type checking
AnyGameEvent = Annotated[
    GameCreated | PlayerJoined | GameStarted | ActionSubmitted | GameEnded,
    Field(discriminator="event_type"),
]
