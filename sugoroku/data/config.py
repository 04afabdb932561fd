"""
Database configuration using pydantic-settings.

Save slots default to a local SQLite file; any SQLAlchemy URL works.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    Database configuration loaded from environment variables.

    Environment variables (prefix: SUGOROKU_DB_):
        SUGOROKU_DB_URL  - SQLAlchemy URL (default: sqlite:///sugoroku_saves.db)
        SUGOROKU_DB_ECHO - Echo SQL statements (default: false)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SUGOROKU_DB_",
    )

    url: str = Field(
        default="sqlite:///sugoroku_saves.db",
        description="SQLAlchemy connection URL for save slots",
    )
    echo: bool = Field(default=False)

    @field_validator("url")
    @classmethod
    def validate_sync_url(cls, v: str) -> str:
        """Save slots are written synchronously; async drivers are rejected."""
        if "+asyncpg" in v or "+aiosqlite" in v:
            raise ValueError("SUGOROKU_DB_URL must use a synchronous driver")
        return v

    def get_engine_kwargs(self) -> dict:
        """Return SQLAlchemy engine configuration."""
        kwargs = {"echo": self.echo}
        if not self.url.startswith("sqlite"):
            kwargs["pool_pre_ping"] = True  # Verify connections before using
        return kwargs


@lru_cache
def get_settings() -> DatabaseSettings:
    """
    Cached settings singleton.

    Returns the same DatabaseSettings instance across the application.
    """
    return DatabaseSettings()
