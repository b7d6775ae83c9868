"""
Configuration module for the guidebook storage engine.

Centralized configuration using Pydantic settings. Every value can be
overridden via environment variables (prefixed ``GUIDEBOOK_``) or a .env file.
Values are read once when the store is opened and never changed afterwards.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the SQLite backing store and logging.

    Attributes:
        DATABASE_PATH: Path of the SQLite database file
        BUSY_TIMEOUT_MS: How long a blocked writer waits before failing
        JOURNAL_MODE: SQLite journal mode (WAL allows readers during a write)
        FOREIGN_KEYS: Enforce foreign-key constraints on every connection
        SLOW_QUERY_THRESHOLD_MS: Statements slower than this are logged
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Render logs as JSON instead of console output
    """

    DATABASE_PATH: str = Field(
        default="guides.db",
        description="Path of the SQLite database file",
    )

    BUSY_TIMEOUT_MS: int = Field(
        default=5000,
        ge=0,
        description="Milliseconds a writer retries on a locked database",
    )
    JOURNAL_MODE: Literal["WAL", "DELETE", "TRUNCATE", "PERSIST", "MEMORY", "OFF"] = (
        Field(
            default="WAL",
            description="SQLite journal mode",
        )
    )
    FOREIGN_KEYS: bool = Field(
        default=True,
        description="Enforce foreign-key constraints",
    )

    SLOW_QUERY_THRESHOLD_MS: int = Field(
        default=100,
        ge=0,
        description="Log statements slower than this many milliseconds",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    model_config = SettingsConfigDict(
        env_prefix="GUIDEBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("JOURNAL_MODE", "LOG_LEVEL", mode="before")
    @classmethod
    def normalize_upper(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
