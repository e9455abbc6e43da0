import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import games, ws
from app.services.game import get_game_machine
from app.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s", settings.APP_NAME)
    logger.debug("Debug mode: %s", settings.DEBUG)

    machine = get_game_machine()
    logger.info("Game state machine ready (max_players=%d)", machine.max_players)

    # Initialize WebSocket connection manager and start cleanup task
    connection_manager = get_connection_manager()
    await connection_manager.start_cleanup_task()
    logger.info("WebSocket connection manager initialized")

    yield

    logger.info("Shutting down %s", settings.APP_NAME)
    await connection_manager.stop_cleanup_task()
    await connection_manager.close_all_connections()
    logger.info("WebSocket cleanup complete")


app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(games.router, prefix="/api/v1")
app.include_router(ws.router, prefix="/api/v1")
logger.debug("Routers registered: /api/v1/games, /api/v1/ws/events")


@app.get("/")
def root():
    return {"message": settings.APP_NAME}


@app.get("/health")
def health():
    return {"status": "healthy"}
