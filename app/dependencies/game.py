from typing import Annotated

from fastapi import Depends

from app.services.game import GameStateMachine, get_game_machine
from app.services.websocket.manager import ConnectionManager, get_connection_manager


def get_machine() -> GameStateMachine:
    return get_game_machine()


def get_event_publisher() -> ConnectionManager:
    return get_connection_manager()


GameMachine = Annotated[GameStateMachine, Depends(get_machine)]
EventPublisher = Annotated[ConnectionManager, Depends(get_event_publisher)]
