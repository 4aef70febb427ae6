import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env for local/dev environments only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Map Generation Configuration
    grid_width: int = Field(default=74, gt=0, description="Grid width in tiles")
    grid_height: int = Field(default=46, gt=0, description="Grid height in tiles")
    land_fraction: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Share of cells drawn as land before smoothing"
    )
    smoothing_iterations: int = Field(
        default=5, ge=0, description="Cellular automaton smoothing passes"
    )
    seed: Optional[int] = Field(default=None, description="Random seed (None = fresh entropy)")

    # Placement Configuration
    faction_count: int = Field(default=4, ge=0, description="Number of clans")
    settlements_per_faction: int = Field(
        default=3, ge=1, description="Villages per clan, home village included"
    )
    home_min_distance: int = Field(
        default=15, ge=0, description="Minimum Manhattan distance for home villages"
    )
    satellite_min_distance: int = Field(
        default=3, ge=0, description="Minimum Manhattan distance for satellite villages"
    )
    satellite_radius: float = Field(
        default=10.0, gt=0.0, description="Satellite village radius around the home village"
    )
    max_placement_attempts: int = Field(
        default=10000, gt=0, description="Random draws allowed per village search"
    )
    placement_relaxations: int = Field(
        default=0, ge=0, description="Spacing relaxation passes after an exhausted search"
    )
    relaxation_factor: float = Field(
        default=1.2, gt=1.0, description="Spacing divisor applied per relaxation pass"
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
