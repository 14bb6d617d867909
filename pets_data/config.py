"""
Configuration for the pets data layer.

Settings come from environment variables prefixed with PETS_, falling back
to defaults suitable for local use. Command-line flags override them.

Invariants:
    - Every setting has a usable default
    - The schema version is never below 1
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .store import DATABASE_NAME, DATABASE_VERSION

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Data layer configuration."""

    # Database file
    database_path: str = Field(default=DATABASE_NAME)
    database_version: int = Field(default=DATABASE_VERSION, ge=1)
    wal_mode: bool = Field(default=True)
    busy_timeout_ms: int = Field(default=5000, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "PETS_"}

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("text", "json"):
            raise ValueError(f"Invalid log format '{value}'. Must be one of: text, json")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Invalid log level '{value}'")
        return value

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Pets configuration loaded",
            extra={
                "database_path": self.database_path,
                "database_version": self.database_version,
                "wal_mode": self.wal_mode,
                "log_level": self.log_level,
            },
        )
