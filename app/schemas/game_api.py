"""Pydantic schemas for game REST operations."""

from typing import Annotated

from pydantic import BaseModel, Field

from app.schemas.game_session import Game

# Player identities and action tokens are opaque to the service; these
# bounds only keep request bodies sane.
PlayerId = Annotated[str, Field(min_length=1, max_length=128)]


class CreateGameRequest(BaseModel):
    """Request body for creating a game."""

    creator: PlayerId


class CreateGameResponse(BaseModel):
    """Response from game creation."""

    game_id: int = Field(..., ge=1, description="Sequential game identifier")
    game: Game


class JoinGameRequest(BaseModel):
    """Request body for joining a game."""

    player: PlayerId


class SubmitActionRequest(BaseModel):
    """Request body for submitting the current turn's action."""

    actor: PlayerId
    action_payload: str = Field(
        ...,
        pattern=r"^0x[0-9a-fA-F]{64}$",
        description="Opaque 32-byte action token, 0x-prefixed hex",
    )


class EndGameRequest(BaseModel):
    """Request body for ending a game."""

    actor: PlayerId


class GameListResponse(BaseModel):
    """A list of game identifiers."""

    game_ids: list[int]


class RosterResponse(BaseModel):
    """Joined players of a game in turn order."""

    game_id: int
    players: list[str]
    current_player: str | None = Field(
        None, description="Player whose turn it is, or None for an empty roster"
    )


class ErrorDetail(BaseModel):
    """Error body returned for rejected operations."""

    error_code: str
    message: str
