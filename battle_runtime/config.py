"""
Runtime configuration.
Uses pydantic-settings for environment variable parsing (BATTLE_* variables).
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Battle settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BATTLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pathfinding
    search_margin: int = Field(
        default=5, ge=0,
        description="Cells added around the attacker/target bounding box for path search"
    )
    jump_search: bool = Field(
        default=True,
        description="Skip straight corridor runs during path search"
    )
    max_expansions: int = Field(
        default=0, ge=0,
        description="Node expansion budget per path query. 0 means unbounded"
    )

    # Battle runner
    round_ms: int = Field(default=500, gt=0, description="Simulated duration of one round")
    time_compression: float = Field(default=30.0, gt=0, description="Rounds play this many times faster than real time")
    max_rounds: int = Field(default=0, ge=0, description="Abort battles after this many rounds. 0 means unbounded")

    # Armies
    default_seed: int = Field(default=42)
    army_points: int = Field(default=1500, ge=0, description="Points budget for generated armies")
    max_units_per_type: int = Field(default=11, gt=0)

    log_level: str = Field(default="INFO")

    @property
    def expansion_budget(self) -> Optional[int]:
        return self.max_expansions or None

    @property
    def round_limit(self) -> Optional[int]:
        return self.max_rounds or None


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use dependency injection in FastAPI routes.
    """
    return Settings()
