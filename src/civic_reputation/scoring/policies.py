"""Rating mutation policies.

Ratings are hard to gain and easy to lose:

- Complaint sentiment decays the rating toward a discrete impact.
- Citizen ratings count half of any improvement and all of any drop.
- Contractor-fault issues subtract a severity penalty, doubled when the work
  fails before half its expected lifespan.

Every policy clamps its result to [0, 5].
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import UTC, datetime

MIN_RATING = 0.0
MAX_RATING = 5.0

# Sentiment thresholds, evaluated in order
SENTIMENT_VERY_NEGATIVE = -0.6
SENTIMENT_NEGATIVE = -0.3
SENTIMENT_NEUTRAL_LOW = -0.1
SENTIMENT_POSITIVE = 0.3

RATING_IMPACT_VERY_NEGATIVE = -0.5
RATING_IMPACT_NEGATIVE = -0.3
RATING_IMPACT_NEUTRAL = -0.1
RATING_IMPACT_POSITIVE = 0.05
RATING_DECAY_FACTOR = 0.9

GAIN_FACTOR = 0.5

DAYS_PER_YEAR = 365
PREMATURE_FAILURE_FRACTION = 0.5
PREMATURE_FAILURE_MULTIPLIER = 2.0
DURABILITY_PENALTY_FACTOR = 0.5


class IssueCategory(str, enum.Enum):
    NATURAL_DISASTER = "NATURAL_DISASTER"
    CONTRACTOR_FAULT = "CONTRACTOR_FAULT"


class Severity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


SEVERITY_MULTIPLIERS: dict[str, float] = {
    Severity.LOW.value: 0.5,
    Severity.MEDIUM.value: 1.0,
    Severity.HIGH.value: 1.5,
    Severity.CRITICAL.value: 2.0,
}
DEFAULT_SEVERITY_MULTIPLIER = 1.0


def clamp_rating(value: float) -> float:
    """Clamp a rating to the [0, 5] domain."""
    return max(MIN_RATING, min(MAX_RATING, value))


def round_points(value: float) -> float:
    """Round half-up to 2 decimals."""
    return math.floor(value * 100 + 0.5) / 100


# ==================== Sentiment-driven update ====================


def sentiment_impact(sentiment: float) -> float:
    """Map a sentiment score to a discrete rating impact.

    | sentiment       | impact |
    |-----------------|--------|
    | <= -0.6         | -0.5   |
    | <= -0.3         | -0.3   |
    | <= -0.1         | -0.1   |
    | >= 0.3          | +0.05  |
    | (-0.1, 0.3)     | -0.05  |
    """
    if sentiment <= SENTIMENT_VERY_NEGATIVE:
        return RATING_IMPACT_VERY_NEGATIVE
    if sentiment <= SENTIMENT_NEGATIVE:
        return RATING_IMPACT_NEGATIVE
    if sentiment <= SENTIMENT_NEUTRAL_LOW:
        return RATING_IMPACT_NEUTRAL
    if sentiment >= SENTIMENT_POSITIVE:
        return RATING_IMPACT_POSITIVE
    return RATING_IMPACT_NEUTRAL * 0.5


def calculate_new_rating(current_rating: float, sentiment: float) -> float:
    """Apply one complaint's sentiment to a rating.

    new = clamp(current * 0.9 + impact, 0, 5)

    Args:
        current_rating: Current overall rating.
        sentiment: Sentiment score in [-1, 1].

    Returns:
        New rating in [0, 5].
    """
    return clamp_rating(current_rating * RATING_DECAY_FACTOR + sentiment_impact(sentiment))


# ==================== Citizen-rating update ====================


@dataclass(frozen=True)
class RatingChange:
    """Result of applying a citizen rating.

    Attributes:
        new_overall_rating: Clamped rating computed from the unrounded deltas.
        points_gained: Applied gain, rounded to 2 decimals.
        points_lost: Applied loss, rounded to 2 decimals.
    """

    new_overall_rating: float
    points_gained: float
    points_lost: float


def calculate_rating_change(
    current_rating: float,
    submitted_rating: float,
    is_forgiven: bool = False,
) -> RatingChange:
    """Apply a citizen's 0-5 rating asymmetrically to the current rating.

    Only half of an improvement counts; all of a drop counts.

    Args:
        current_rating: Contractor's current overall rating.
        submitted_rating: Rating given by the citizen.
        is_forgiven: When True, the rating is recorded without effect.

    Returns:
        RatingChange with the new rating and point deltas.
    """
    if is_forgiven:
        return RatingChange(current_rating, 0.0, 0.0)

    diff = submitted_rating - current_rating
    points_gained = 0.0
    points_lost = 0.0

    if diff > 0:
        points_gained = diff * GAIN_FACTOR
    elif diff < 0:
        points_lost = abs(diff)

    return RatingChange(
        new_overall_rating=clamp_rating(current_rating + points_gained - points_lost),
        points_gained=round_points(points_gained),
        points_lost=round_points(points_lost),
    )


# ==================== Issue-penalty update ====================


def calculate_issue_penalty(category: IssueCategory | str, severity: str | None) -> float:
    """Base rating penalty for an issue report.

    Natural disasters never carry a penalty. Unknown severities count as
    MEDIUM.
    """
    if IssueCategory(category) is IssueCategory.NATURAL_DISASTER:
        return 0.0
    key = severity.upper() if severity else ""
    return SEVERITY_MULTIPLIERS.get(key, DEFAULT_SEVERITY_MULTIPLIER)


def _as_utc(value: datetime) -> datetime:
    # Database round-trips drop tzinfo; stored values are UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def days_since(start: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``start``, floored."""
    now = _as_utc(now or datetime.now(UTC))
    return (now - _as_utc(start)).days


def is_premature_failure(
    completed_at: datetime | None,
    expected_lifespan_years: float | None,
    now: datetime | None = None,
) -> bool:
    """Whether work failed before half of its expected lifespan."""
    if completed_at is None or not expected_lifespan_years:
        return False
    expected_days = expected_lifespan_years * DAYS_PER_YEAR
    return days_since(completed_at, now) < expected_days * PREMATURE_FAILURE_FRACTION


def contractor_fault_penalty(
    severity: str | None,
    completed_at: datetime | None = None,
    expected_lifespan_years: float | None = None,
    now: datetime | None = None,
) -> float:
    """Penalty for a contractor-fault issue, with the premature-failure amplifier."""
    penalty = calculate_issue_penalty(IssueCategory.CONTRACTOR_FAULT, severity)
    if is_premature_failure(completed_at, expected_lifespan_years, now):
        penalty *= PREMATURE_FAILURE_MULTIPLIER
    return penalty


@dataclass(frozen=True)
class PenaltyOutcome:
    overall_rating: float
    durability_score: float
    points_lost: float


def apply_issue_penalty(
    overall_rating: float,
    durability_score: float,
    points_lost: float,
    penalty: float,
) -> PenaltyOutcome:
    """Subtract a penalty from the overall and durability scores.

    Durability takes half the penalty. The lost-points accumulator takes
    all of it.
    """
    return PenaltyOutcome(
        overall_rating=clamp_rating(overall_rating - penalty),
        durability_score=clamp_rating(durability_score - penalty * DURABILITY_PENALTY_FACTOR),
        points_lost=points_lost + penalty,
    )
