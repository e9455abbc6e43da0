from app.services.websocket.manager import (
    Connection,
    ConnectionManager,
    get_connection_manager,
    set_connection_manager,
)

__all__ = [
    "Connection",
    "ConnectionManager",
    "get_connection_manager",
    "set_connection_manager",
]
