"""Configuration management."""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
env_file = BASE_DIR / ".env"

# Values from a local .env only fill in what the environment lacks
if env_file.exists():
    file_env = dotenv_values(env_file)
    for key, value in file_env.items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


class Settings(BaseSettings):
    """Library settings pulled from PCITY_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="PCITY_", extra="ignore")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="json", description="Log format (json or console)"
    )

    # Determinism
    seed: str = Field(default="pcity", description="Seed for the default PRNG")

    # Geometry
    distance_tolerance: float = Field(
        default=1e-9,
        ge=0.0,
        description="Slack when comparing segment lengths to a threshold",
    )
    axis_tolerance: float = Field(
        default=0.0,
        ge=0.0,
        description="Horizontal offsets up to this size count as axis-aligned",
    )


settings = Settings()
