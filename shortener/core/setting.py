"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Listens on a random high port unless PORT is given
- Short links are composed from PREFIX, which defaults to the loopback
  address and the chosen port
- Snapshot flushes are never scheduled more often than once per second
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings", "MIN_SAVE_INTERVAL_MS"]

MIN_SAVE_INTERVAL_MS = 1000

RANDOM_PORT_RANGE = (10000, 65535)


def _random_port() -> int:
    return random.randint(*RANDOM_PORT_RANGE)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    PORT: int = Field(
        default_factory=_random_port,
        ge=1,
        le=65535,
        description="Listening port (a random high port when unset)"
    )
    PREFIX: Optional[str] = Field(
        default=None,
        description="Prefix used to compose short links (default: http://127.0.0.1:PORT/)"
    )

    # Persistence Configuration
    SNAPSHOT_PATH: Path = Field(
        default=Path("urls.json"),
        description="JSON file holding the link store snapshot"
    )
    SAVE_INTERVAL_MS: int = Field(
        default=60000,
        ge=MIN_SAVE_INTERVAL_MS,
        description="Milliseconds between snapshot flushes of unsaved changes"
    )

    # Request Limits
    MAX_URL_LENGTH: int = Field(
        default=2048,
        gt=0,
        description="Longest long URL accepted for shortening"
    )
    MAX_BODY_BYTES: int = Field(
        default=1_000_000,
        gt=0,
        description="Largest accepted request body for POST requests"
    )
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Apply per-IP rate limits to the API endpoints"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level for the shortener logger"
    )

    @field_validator("PREFIX")
    @classmethod
    def check_prefix(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("PREFIX must start with http:// or https://")
        if not value.endswith("/"):
            value += "/"
        return value

    @model_validator(mode="after")
    def default_prefix(self) -> "Settings":
        if self.PREFIX is None:
            self.PREFIX = f"http://127.0.0.1:{self.PORT}/"
        return self


settings = Settings()
