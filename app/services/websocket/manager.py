import asyncio
import contextlib
import logging
import os
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from fastapi import WebSocket

from app.config import Settings, get_settings
from app.schemas.ws import (
    ConnectedPayload,
    MessageType,
    WSCloseCode,
    WSServerMessage,
)
from app.services.game.events import GameEvent

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """Represents an active WebSocket subscriber."""

    connection_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_heartbeat: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    game_id: int | None = None  # None receives events of every game


class ConnectionManager:
    """Manages WebSocket subscribers of the game event feed.

    Local storage:
        - _connections: connection_id -> Connection
        - _game_connections: game_id -> set of connection_ids
        - _global_connections: connection_ids subscribed to every game
    """

    def __init__(self, server_id: str | None = None, settings: Settings | None = None):
        self._server_id = server_id or os.getenv("HOSTNAME", str(uuid.uuid4())[:8])
        self._settings = settings or get_settings()

        self._connections: dict[str, Connection] = {}
        self._game_connections: dict[int, set[str]] = {}
        self._global_connections: set[str] = set()

        # Cleanup task
        self._cleanup_task: asyncio.Task | None = None

        logger.info("ConnectionManager initialized with server_id: %s", self._server_id)

    @property
    def server_id(self) -> str:
        return self._server_id

    async def connect(self, websocket: WebSocket, game_id: int | None = None) -> Connection:
        """Register an accepted WebSocket and acknowledge it.

        Args:
            websocket: The WebSocket instance, already accepted.
            game_id: Restrict delivery to this game, or None for all games.

        Returns:
            The created Connection object.
        """
        connection_id = str(uuid.uuid4())
        connection = Connection(
            connection_id=connection_id,
            websocket=websocket,
            game_id=game_id,
        )

        self._connections[connection_id] = connection
        if game_id is None:
            self._global_connections.add(connection_id)
        else:
            self._game_connections.setdefault(game_id, set()).add(connection_id)

        logger.info(
            "Connection %s subscribed to %s on server %s",
            connection_id,
            f"game {game_id}" if game_id is not None else "all games",
            self._server_id,
        )

        await self.send_to_connection(
            connection_id,
            WSServerMessage(
                type=MessageType.CONNECTED,
                payload=ConnectedPayload(
                    connection_id=connection_id,
                    server_id=self._server_id,
                    game_id=game_id,
                ).model_dump(),
            ),
        )

        return connection

    async def disconnect(self, connection_id: str) -> None:
        """Forget a subscriber.

        Args:
            connection_id: The connection to remove.
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.debug("Connection %s not found locally for disconnect", connection_id)
            return

        if connection.game_id is None:
            self._global_connections.discard(connection_id)
        elif connection.game_id in self._game_connections:
            self._game_connections[connection.game_id].discard(connection_id)
            if not self._game_connections[connection.game_id]:
                del self._game_connections[connection.game_id]

        logger.info("Connection %s disconnected", connection_id)

    async def heartbeat(self, connection_id: str) -> None:
        """Refresh the liveness timestamp of a subscriber."""
        connection = self._connections.get(connection_id)
        if connection:
            connection.last_heartbeat = datetime.now(timezone.utc)
            logger.debug("Heartbeat updated for connection %s", connection_id)

    async def _close(self, connection_id: str) -> None:
        """Close a subscriber's socket with GOING_AWAY and forget it."""
        connection = self._connections.get(connection_id)
        if connection is not None:
            try:
                await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
            except Exception as e:
                logger.debug("Socket %s already closed: %s", connection_id, e)
        await self.disconnect(connection_id)

    async def cleanup_stale_connections(self) -> int:
        """Close subscribers silent for longer than WS_CONNECTION_TIMEOUT.

        Returns:
            Number of subscribers closed.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(
            seconds=self._settings.WS_CONNECTION_TIMEOUT
        )
        stale = [
            conn_id
            for conn_id, connection in self._connections.items()
            if connection.last_heartbeat < cutoff
        ]
        for conn_id in stale:
            logger.warning("Closing silent subscriber %s", conn_id)
            await self._close(conn_id)

        if stale:
            logger.info("Cleaned up %d stale connections", len(stale))
        return len(stale)

    async def _cleanup_loop(self) -> None:
        interval = self._settings.WS_HEARTBEAT_INTERVAL
        logger.info("Stale subscriber sweep every %ds", interval)
        while True:
            await asyncio.sleep(interval)
            try:
                await self.cleanup_stale_connections()
            except Exception:
                logger.exception("Stale subscriber sweep failed")

    async def start_cleanup_task(self) -> None:
        """Schedule the periodic stale-subscriber sweep."""
        if self._cleanup_task is not None:
            logger.warning("Cleanup task already running")
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup_task(self) -> None:
        """Cancel the sweep and wait for it to finish."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Cleanup task stopped")

    async def close_all_connections(self) -> None:
        """Close every subscriber, used on shutdown."""
        logger.info("Closing all %d connections", len(self._connections))
        for conn_id in list(self._connections):
            await self._close(conn_id)

    async def send_to_connection(
        self, connection_id: str, message: WSServerMessage
    ) -> bool:
        """Send a message to a specific connection.

        Delivery is fire-and-forget: a failed send drops the subscriber.

        Returns:
            True if sent successfully, False otherwise.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("Connection %s not found for sending", connection_id)
            return False

        try:
            await connection.websocket.send_json(message.model_dump(mode="json", exclude_none=True))
            return True
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False

    async def publish_events(self, events: Sequence[GameEvent]) -> int:
        """Fan events out to global subscribers and subscribers of each event's game.

        Events are delivered in the order given. Callers publish after the
        machine lock is released, so events of two overlapping operations can
        reach a subscriber out of ``seq`` order; clients reorder by ``seq``.

        Returns:
            Number of messages sent.
        """
        sent = 0
        for event in events:
            message = WSServerMessage(
                type=MessageType.GAME_EVENT,
                payload=event.model_dump(mode="json"),
            )
            targets = self._global_connections | self._game_connections.get(event.game_id, set())
            for conn_id in sorted(targets):
                if await self.send_to_connection(conn_id, message):
                    sent += 1
            logger.debug(
                "Published %s (seq=%d) for game %d to %d subscribers",
                event.event_type,
                event.seq,
                event.game_id,
                len(targets),
            )
        return sent

    def get_game_connection_count(self, game_id: int) -> int:
        """Get the number of subscribers filtered to a game."""
        return len(self._game_connections.get(game_id, set()))

    def get_total_connection_count(self) -> int:
        """Get the total number of local connections."""
        return len(self._connections)


# Global manager instance (initialized in lifespan)
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global ConnectionManager instance."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def set_connection_manager(manager: ConnectionManager | None) -> None:
    """Set the global ConnectionManager instance."""
    global _connection_manager
    _connection_manager = manager
