"""Scoring module for Civic Reputation.

Pure, stateless functions: sentiment, classification, location checks,
review flags, rating policies and bid eligibility.
"""

from civic_reputation.scoring.classifier import (
    Classification,
    ComplaintType,
    classify_complaint,
)
from civic_reputation.scoring.eligibility import (
    Eligibility,
    apply_eligibility,
    derive_eligibility,
    is_below_minimum,
)
from civic_reputation.scoring.flags import ComplaintFlag, FlagDetermination, determine_flag
from civic_reputation.scoring.geo import (
    DEFAULT_PROJECT_LOCATION,
    MAX_DISTANCE_METERS,
    GeoPoint,
    LocationVerification,
    haversine_distance,
    verify_location,
)
from civic_reputation.scoring.policies import (
    IssueCategory,
    RatingChange,
    Severity,
    apply_issue_penalty,
    calculate_issue_penalty,
    calculate_new_rating,
    calculate_rating_change,
    clamp_rating,
    contractor_fault_penalty,
    sentiment_impact,
)
from civic_reputation.scoring.qualification import calculate_initial_rating
from civic_reputation.scoring.sentiment import analyze_sentiment
from civic_reputation.scoring.stats import ComplaintStats, calculate_complaint_stats

__all__ = [
    "DEFAULT_PROJECT_LOCATION",
    "MAX_DISTANCE_METERS",
    "Classification",
    "ComplaintFlag",
    "ComplaintStats",
    "ComplaintType",
    "Eligibility",
    "FlagDetermination",
    "GeoPoint",
    "IssueCategory",
    "LocationVerification",
    "RatingChange",
    "Severity",
    "analyze_sentiment",
    "apply_eligibility",
    "apply_issue_penalty",
    "calculate_complaint_stats",
    "calculate_initial_rating",
    "calculate_issue_penalty",
    "calculate_new_rating",
    "calculate_rating_change",
    "clamp_rating",
    "classify_complaint",
    "contractor_fault_penalty",
    "derive_eligibility",
    "determine_flag",
    "haversine_distance",
    "is_below_minimum",
    "sentiment_impact",
    "verify_location",
]
