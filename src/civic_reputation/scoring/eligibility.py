"""Bid eligibility derived from a contractor's rating."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

MINIMUM_RATING = 3.8
MEDIUM_BID_RATING = 3.8
LARGE_BID_RATING = 4.0

SUSPENDED_REASON = "Rating below minimum threshold of 3.8"
QUALITY_SUSPENDED_REASON = "Rating below minimum threshold of 3.8 due to quality issues"


@dataclass(frozen=True)
class Eligibility:
    """Bid permissions for one rating value.

    Attributes:
        current_rating: Rating the flags were derived from.
        can_bid_small: True unless suspended.
        can_bid_medium: Rating at or above 3.8.
        can_bid_large: Rating at or above 4.0.
        is_suspended: Rating below 3.8.
    """

    current_rating: float
    can_bid_small: bool
    can_bid_medium: bool
    can_bid_large: bool
    is_suspended: bool


def is_below_minimum(rating: float) -> bool:
    return rating < MINIMUM_RATING


def derive_eligibility(rating: float) -> Eligibility:
    """Derive bid eligibility flags from a rating."""
    suspended = is_below_minimum(rating)
    return Eligibility(
        current_rating=rating,
        can_bid_small=not suspended,
        can_bid_medium=rating >= MEDIUM_BID_RATING,
        can_bid_large=rating >= LARGE_BID_RATING,
        is_suspended=suspended,
    )


def apply_eligibility(
    progress: Any,
    eligibility: Eligibility,
    reason: str = SUSPENDED_REASON,
    now: datetime | None = None,
) -> bool:
    """Write derived eligibility onto a progress record.

    Sets the suspension reason and timestamp when the contractor enters
    suspension, keeps the original timestamp while it stays suspended, and
    clears both once the rating recovers.

    Args:
        progress: Object with the ContractorProgress attributes.
        eligibility: Flags from derive_eligibility.
        reason: Message recorded when suspended.
        now: Timestamp for the write.

    Returns:
        True if this write newly suspended the contractor.
    """
    now = now or datetime.now(UTC)
    newly_suspended = eligibility.is_suspended and not progress.is_suspended

    progress.current_rating = eligibility.current_rating
    progress.can_bid_small = eligibility.can_bid_small
    progress.can_bid_medium = eligibility.can_bid_medium
    progress.can_bid_large = eligibility.can_bid_large
    progress.is_suspended = eligibility.is_suspended

    if eligibility.is_suspended:
        progress.suspended_reason = reason
        if newly_suspended or progress.suspended_at is None:
            progress.suspended_at = now
    else:
        progress.suspended_reason = None
        progress.suspended_at = None

    progress.last_updated = now
    return newly_suspended
