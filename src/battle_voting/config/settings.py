"""Runtime configuration for the voting engine and its sweeper.

Values come from the process environment or a local ``.env`` file. Nested
groups use ``__`` as the separator, e.g. ``VOTING__VOTE_TIMEOUT_SECONDS=90``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BusyTimeoutMs, ConnectionTimeoutS, SweepIntervalS

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DatabaseSettings(BaseModel):
    """Where the SQLite file lives and how long to wait on its lock."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/battles.db",
        validation_alias=AliasChoices("url", "database_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = 5000
    connection_timeout_s: ConnectionTimeoutS = 10

    @field_validator("url")
    @classmethod
    def _require_sqlite(cls, v: str) -> str:
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class VotingSettings(BaseModel):
    """Battle voting rules."""

    model_config = ConfigDict(frozen=True)

    vote_timeout_seconds: int = Field(default=60, ge=1)
    max_processed_events: int = Field(default=50, ge=1)


class SweepSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    interval_seconds: SweepIntervalS = 30
    enabled: bool = True


class Settings(BaseSettings):
    """Top-level settings.

    Environment variables:
    - ENVIRONMENT, DEBUG, LOG_LEVEL
    - DATABASE__URL, DATABASE__BUSY_TIMEOUT_MS, DATABASE__CONNECTION_TIMEOUT_S
    - VOTING__VOTE_TIMEOUT_SECONDS, VOTING__MAX_PROCESSED_EVENTS
    - SWEEP__INTERVAL_SECONDS, SWEEP__ENABLED
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: LogLevel = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    voting: VotingSettings = Field(default_factory=VotingSettings)
    sweep: SweepSettings = Field(default_factory=SweepSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next ``get_settings`` reloads them."""
    get_settings.cache_clear()
