"""REST endpoints for game sessions."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.dependencies.game import EventPublisher, GameMachine
from app.schemas.game_api import (
    CreateGameRequest,
    CreateGameResponse,
    EndGameRequest,
    ErrorDetail,
    GameListResponse,
    JoinGameRequest,
    RosterResponse,
    SubmitActionRequest,
)
from app.schemas.game_session import ActionRecord, Game
from app.services.game import ErrorCode, ProcessResult
from app.services.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["games"])

ERROR_STATUS_MAP = {
    ErrorCode.GAME_NOT_ACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.GAME_ALREADY_STARTED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_ENOUGH_PLAYERS: status.HTTP_409_CONFLICT,
    ErrorCode.GAME_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_YOUR_TURN: status.HTTP_403_FORBIDDEN,
}


async def _finish(
    result: ProcessResult, publisher: ConnectionManager, operation: str
) -> Game:
    """Raise for a rejected operation, otherwise publish its events."""
    if not result.success:
        http_status = ERROR_STATUS_MAP.get(
            result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        logger.warning(
            "%s rejected: %s - %s",
            operation,
            result.error_code,
            result.error_message,
        )
        raise HTTPException(
            status_code=http_status,
            detail=ErrorDetail(
                error_code=result.error_code.value,
                message=result.error_message or "Operation rejected",
            ).model_dump(),
        )

    await publisher.publish_events(result.events)
    return result.game


@router.post("", response_model=CreateGameResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    request: CreateGameRequest,
    machine: GameMachine,
    publisher: EventPublisher,
):
    """Create a new game and list it as active.

    Returns:
        CreateGameResponse with the sequential game id and its initial state.
    """
    logger.info("POST /games - creator: %s", request.creator)
    result = machine.create_game(request.creator)
    game = await _finish(result, publisher, "create_game")
    return CreateGameResponse(game_id=game.game_id, game=game)


@router.get("/active", response_model=GameListResponse)
async def list_active_games(machine: GameMachine):
    """List games that have not ended.

    Creation order holds until the first game ends; after that the order
    is not meaningful.
    """
    return GameListResponse(game_ids=machine.get_active_games())


@router.get("/not-started", response_model=GameListResponse)
async def list_not_started_games(machine: GameMachine):
    """List active, unstarted games that still have room below the
    matchmaking threshold."""
    return GameListResponse(game_ids=machine.get_not_started_games())


@router.get("/{game_id}", response_model=Game)
async def get_game_state(game_id: int, machine: GameMachine):
    """Return the game summary. Unknown ids return the zero record."""
    return machine.get_game_state(game_id)


@router.get("/{game_id}/players", response_model=RosterResponse)
async def get_players(game_id: int, machine: GameMachine):
    return RosterResponse(
        game_id=game_id,
        players=machine.get_players(game_id),
        current_player=machine.get_current_player(game_id),
    )


@router.get("/{game_id}/actions/{turn_index}", response_model=ActionRecord)
async def get_action(game_id: int, turn_index: int, machine: GameMachine):
    action = machine.get_action(game_id, turn_index)
    if action is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No action recorded for game {game_id} turn {turn_index}",
        )
    return action


@router.post("/{game_id}/join", response_model=Game)
async def join_game(
    game_id: int,
    request: JoinGameRequest,
    machine: GameMachine,
    publisher: EventPublisher,
):
    """Append a player to the game's roster.

    Raises:
        HTTPException 409: If the game is not active or is full.
    """
    logger.info("POST /games/%d/join - player: %s", game_id, request.player)
    result = machine.join_game(game_id, request.player)
    return await _finish(result, publisher, "join_game")


@router.post("/{game_id}/start", response_model=Game)
async def start_game(
    game_id: int,
    machine: GameMachine,
    publisher: EventPublisher,
):
    """Start a game.

    Raises:
        HTTPException 409: If already started or fewer than the minimum players joined.
    """
    logger.info("POST /games/%d/start", game_id)
    result = machine.start_game(game_id)
    return await _finish(result, publisher, "start_game")


@router.post("/{game_id}/actions", response_model=Game)
async def submit_action(
    game_id: int,
    request: SubmitActionRequest,
    machine: GameMachine,
    publisher: EventPublisher,
):
    """Record the current player's action and pass the turn on.

    Raises:
        HTTPException 403: If it is not the actor's turn.
        HTTPException 409: If the game is not active.
    """
    logger.info("POST /games/%d/actions - actor: %s", game_id, request.actor)
    result = machine.submit_action(game_id, request.action_payload, request.actor)
    return await _finish(result, publisher, "submit_action")


@router.post("/{game_id}/end", response_model=Game)
async def end_game(
    game_id: int,
    request: EndGameRequest,
    machine: GameMachine,
    publisher: EventPublisher,
):
    """End a game on the actor's turn.

    Raises:
        HTTPException 403: If it is not the actor's turn.
        HTTPException 409: If the game is not active.
    """
    logger.info("POST /games/%d/end - actor: %s", game_id, request.actor)
    result = machine.end_game(game_id, request.actor)
    return await _finish(result, publisher, "end_game")
