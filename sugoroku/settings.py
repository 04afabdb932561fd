"""
Simulation settings using pydantic-settings.

Database configuration lives in `sugoroku.data.config.DatabaseSettings`.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sugoroku.state import Difficulty


class SimulationSettings(BaseSettings):
    """
    Defaults for headless simulations.

    Environment variables (prefix: SUGOROKU_):
        SUGOROKU_TOTAL_YEARS        - Game length in years (default: 10)
        SUGOROKU_SEED               - Random seed (default: unset)
        SUGOROKU_LOG_LEVEL          - Python logging level (default: INFO)
        SUGOROKU_LOG_DIR            - Directory for JSONL game logs (default: logs)
        SUGOROKU_DEFAULT_DIFFICULTY - easy | normal | hard (default: normal)
        SUGOROKU_CATALOG_PATH       - JSON catalog to play on (default: built-in map)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="SUGOROKU_",
    )

    total_years: int = Field(default=10, ge=1, le=100)
    seed: Optional[int] = Field(default=None)
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    default_difficulty: Difficulty = Field(default=Difficulty.NORMAL)
    catalog_path: Optional[str] = Field(
        default=None,
        description="Catalog JSON file or directory; the built-in map when unset.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: Optional[str]) -> str:
        if not value:
            return "INFO"
        return str(value).upper()


@lru_cache
def get_settings() -> SimulationSettings:
    """Return cached simulation settings instance."""
    return SimulationSettings()
