"""Runtime settings and logging setup for the scheduling service."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CREWTRACK_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Shortest shift a scheduler may book, inclusive.
    MIN_SHIFT_MINUTES: int = 30
    TASK_MAX_LENGTH: int = 500
    NOTES_MAX_LENGTH: int = 1000
    LOG_LEVEL: str = "INFO"


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply the project-wide log format at the configured level."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
