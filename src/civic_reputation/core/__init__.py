"""Core configuration and utilities for Civic Reputation."""

from civic_reputation.core.config import (
    DB_PATH_ENV,
    ProjectLocation,
    ReputationConfig,
    ScoringConfig,
    load_config,
)
from civic_reputation.core.errors import (
    ConfigurationError,
    MissingFieldError,
    NotFoundError,
    ReputationError,
    StaleRatingError,
    ValidationError,
)
from civic_reputation.core.validation import is_valid_email, is_valid_gps, sanitize_text

__all__ = [
    "DB_PATH_ENV",
    "ProjectLocation",
    "ReputationConfig",
    "ScoringConfig",
    "load_config",
    "ConfigurationError",
    "MissingFieldError",
    "NotFoundError",
    "ReputationError",
    "StaleRatingError",
    "ValidationError",
    "is_valid_email",
    "is_valid_gps",
    "sanitize_text",
]
