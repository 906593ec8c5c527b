"""Configuration schemas and loading for Civic Reputation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from civic_reputation.core.errors import ConfigurationError

DB_PATH_ENV = "CIVIC_REPUTATION_DB"
DEFAULT_DB_PATH = "./data/reputation.duckdb"


class ProjectLocation(BaseModel):
    """Reference coordinate of a project site, in degrees."""

    latitude: float = Field(default=27.7172, ge=-90, le=90)
    longitude: float = Field(default=85.324, ge=-180, le=180)


class ScoringConfig(BaseModel):
    """Scoring parameters that vary per deployment.

    Attributes:
        max_distance_meters: Radius around the project site within which a
            complaint photo counts as taken on site.
        default_project_location: Reference point used when a contract has no
            recorded coordinate (Kathmandu).
        default_rating: Rating assigned when a complaint or AI rating refers to
            a contractor that has no rating record yet.
        recent_complaints: How many complaints the reputation report lists.
    """

    max_distance_meters: float = Field(default=1000.0, gt=0)
    default_project_location: ProjectLocation = Field(default_factory=ProjectLocation)
    default_rating: float = Field(default=5.0, ge=0, le=5)
    recent_complaints: int = Field(default=50, ge=1)


class ReputationConfig(BaseModel):
    """Complete application configuration."""

    database_path: str = DEFAULT_DB_PATH
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("database_path cannot be empty")
        return v

    def get_database_path(self) -> Path:
        """Resolve database path, preferring the environment override."""
        return Path(os.environ.get(DB_PATH_ENV) or self.database_path)

    @property
    def database_url(self) -> str:
        return f"duckdb:///{self.get_database_path()}"


def load_config(path: str | Path | None = None) -> ReputationConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to YAML configuration file. When None, defaults are used.

    Returns:
        Validated ReputationConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file doesn't hold a YAML mapping.
        pydantic.ValidationError: If config is invalid.
    """
    if path is None:
        return ReputationConfig()

    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}",
            "Start from config.example.yaml.",
        )

    return ReputationConfig.model_validate(data)
