import logging
import sys
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    APP_NAME: str = "Turn Rotation API"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    # Game rules
    MAX_PLAYERS_PER_GAME: int = 10
    MIN_PLAYERS_TO_START: int = 2
    NOT_STARTED_ROSTER_THRESHOLD: int = 3

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 120

    @field_validator(
        "MAX_PLAYERS_PER_GAME",
        "MIN_PLAYERS_TO_START",
        "NOT_STARTED_ROSTER_THRESHOLD",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("game limits must be positive integers")
        return v

    @model_validator(mode="after")
    def validate_start_within_capacity(self) -> "Settings":
        if self.MIN_PLAYERS_TO_START > self.MAX_PLAYERS_PER_GAME:
            raise ValueError("MIN_PLAYERS_TO_START cannot exceed MAX_PLAYERS_PER_GAME")
        return self


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug(
        "Game limits: max_players=%d, min_to_start=%d, not_started_threshold=%d",
        settings.MAX_PLAYERS_PER_GAME,
        settings.MIN_PLAYERS_TO_START,
        settings.NOT_STARTED_ROSTER_THRESHOLD,
    )
    return settings
