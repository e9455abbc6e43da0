import json
import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    PongPayload,
    WSClientMessage,
    WSServerMessage,
)
from app.services.websocket.manager import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

# Rate limiting configuration
MAX_MESSAGE_SIZE = 4 * 1024  # 4 KB, subscribers only ever send pings
MAX_MESSAGES_PER_SECOND = 10
RATE_LIMIT_WINDOW = 1.0  # seconds


class RateLimiter:
    """Simple sliding window rate limiter per connection."""

    def __init__(
        self, max_tokens: int = MAX_MESSAGES_PER_SECOND, window: float = RATE_LIMIT_WINDOW
    ):
        self.max_tokens = max_tokens
        self.window = window
        self._tokens: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, connection_id: str) -> bool:
        """Check if a message is allowed under rate limiting."""
        now = time.time()
        cutoff = now - self.window

        # Remove expired timestamps
        self._tokens[connection_id] = [t for t in self._tokens[connection_id] if t > cutoff]

        if len(self._tokens[connection_id]) >= self.max_tokens:
            return False

        self._tokens[connection_id].append(now)
        return True

    def remove(self, connection_id: str) -> None:
        """Remove rate limit tracking for a connection."""
        self._tokens.pop(connection_id, None)


# Global rate limiter instance
_rate_limiter = RateLimiter()


async def _send_error(
    manager: ConnectionManager, connection_id: str, error_code: str, message: str
) -> None:
    await manager.send_to_connection(
        connection_id,
        WSServerMessage(
            type=MessageType.ERROR,
            payload=ErrorPayload(error_code=error_code, message=message).model_dump(),
        ),
    )


@router.websocket("/ws/events")
async def events_endpoint(
    websocket: WebSocket,
    game_id: int | None = Query(None, ge=1, description="Only receive events of this game"),
):
    """WebSocket feed of game events.

    Clients connect with: ws://host/api/v1/ws/events[?game_id=<id>]

    On connection the server sends a 'connected' message, then one
    'game_event' message per event emitted by a successful operation.
    The only client message acted upon is 'ping'.
    """
    await websocket.accept()
    manager = get_connection_manager()
    connection = await manager.connect(websocket, game_id)
    connection_id = connection.connection_id

    try:
        while True:
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug("WebSocket no longer connected, exiting loop")
                break

            try:
                message_data = await websocket.receive()
            except Exception as e:
                logger.debug("Error receiving message: %s", e)
                break

            if message_data.get("type") == "websocket.disconnect":
                break

            raw_text = message_data.get("text")
            if not raw_text:
                continue

            if len(raw_text.encode("utf-8")) > MAX_MESSAGE_SIZE:
                logger.warning("Message too large from connection %s", connection_id)
                await _send_error(
                    manager,
                    connection_id,
                    "MESSAGE_TOO_LARGE",
                    f"Message exceeds maximum size of {MAX_MESSAGE_SIZE} bytes",
                )
                continue

            if not _rate_limiter.is_allowed(connection_id):
                logger.warning("Rate limit exceeded for connection %s", connection_id)
                await _send_error(
                    manager, connection_id, "RATE_LIMITED", "Too many messages, please slow down"
                )
                continue

            try:
                message = WSClientMessage.model_validate(json.loads(raw_text))
            except json.JSONDecodeError:
                logger.warning("Invalid JSON from connection %s", connection_id)
                await _send_error(manager, connection_id, "INVALID_JSON", "Invalid JSON format")
                continue
            except ValidationError as e:
                logger.warning("Invalid message from connection %s: %s", connection_id, e)
                await _send_error(
                    manager, connection_id, "INVALID_MESSAGE", "Invalid message format"
                )
                continue

            await manager.heartbeat(connection_id)

            if message.type == MessageType.PING:
                await manager.send_to_connection(
                    connection_id,
                    WSServerMessage(
                        type=MessageType.PONG,
                        request_id=message.request_id,
                        payload=PongPayload().model_dump(mode="json"),
                    ),
                )
            else:
                logger.debug(
                    "Ignoring message type %s from connection %s", message.type, connection_id
                )

    except WebSocketDisconnect as e:
        logger.info("WS disconnected: connection %s, code %s", connection_id, e.code)
    except Exception as e:
        logger.error("WS error for connection %s: %s", connection_id, e)
    finally:
        _rate_limiter.remove(connection_id)
        await manager.disconnect(connection_id)
