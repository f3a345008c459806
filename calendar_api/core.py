"""Application configuration and logging setup.

This module defines the application settings loaded from environment
variables and provides helpers for accessing cached settings and
configuring structured logging.
"""

import logging
from functools import lru_cache
from typing import List

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        APP_NAME: Human readable service name.
        DATABASE_URL: SQLAlchemy connection string. The URL scheme selects
            the backing store (``sqlite://``, ``mysql+pymysql://``, ...).
        ALLOWED_ORIGINS: Allowed origins for CORS.
        LOG_LEVEL: Minimum level emitted by the logger.
        LOG_JSON: Render log lines as JSON instead of console output.
        BCRYPT_ROUNDS: Cost factor used when hashing passwords.
    """

    APP_NAME: str = "Calendar Events API"
    DATABASE_URL: str = "sqlite:///./calendar.db"
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    BCRYPT_ROUNDS: int = 10

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog processors and level filtering.

    Args:
        settings (Settings | None): Settings to read the level and renderer
            from. Defaults to the cached application settings.
    """

    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
