"""Application configuration."""

import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Literal

import structlog
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smartalk.domain.analytics.event_types import EventType


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Database
    DATABASE_URL: str = "sqlite:///./smartalk.db"

    # API (constants, not from env)
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "SmarTalk engine API"
    VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Focus Mode
    FOCUS_MODE_TRIGGER_THRESHOLD: int = 2

    # Progress and milestones
    STREAK_ACCURACY_THRESHOLD: float = 0.8
    PERFECT_STREAK_LENGTH: int = 5
    SPEED_BONUS_SECONDS: int = 30

    # Analytics
    ACTIVATION_EVENT_TYPE: EventType = EventType.MAGIC_MOMENT_COMPLETE
    SESSION_START_EVENT_TYPE: EventType = EventType.APP_LAUNCH
    MAX_BATCH_EVENTS: int = 100
    # Estimated seconds of study per learning event
    LEARNING_EVENT_SECONDS: int = 30

    # Background work
    BACKGROUND_WORKERS: int = 4

    @field_validator(
        "FOCUS_MODE_TRIGGER_THRESHOLD",
        "PERFECT_STREAK_LENGTH",
        "MAX_BATCH_EVENTS",
        "BACKGROUND_WORKERS",
        mode="after",
    )
    @classmethod
    def require_positive(cls, value: int) -> int:
        """Counts and sizes must be at least 1."""
        if value < 1:
            msg = "value must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("STREAK_ACCURACY_THRESHOLD", mode="after")
    @classmethod
    def validate_accuracy_threshold(cls, value: float) -> float:
        """Accuracy thresholds live in [0, 1]."""
        if not 0.0 <= value <= 1.0:
            msg = "STREAK_ACCURACY_THRESHOLD must be between 0 and 1"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_timings(self) -> "Settings":
        """Validate time-based settings."""
        if self.SPEED_BONUS_SECONDS < 0:
            msg = "SPEED_BONUS_SECONDS cannot be negative"
            raise ValueError(msg)
        if self.LEARNING_EVENT_SECONDS < 0:
            msg = "LEARNING_EVENT_SECONDS cannot be negative"
            raise ValueError(msg)
        return self


def configure_logging(environment: str = "development") -> None:
    """Configure structured logging with structlog."""
    # Determine if we should use JSON output (production) or console output (dev)
    use_json = environment == "production"

    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if environment == "development" else logging.INFO,
    )

    processors: list[Callable[..., Any]] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
