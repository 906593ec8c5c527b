"""Summary statistics over a contractor's complaints."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from statistics import mean
from typing import Any

from civic_reputation.scoring.flags import ComplaintFlag


@dataclass(frozen=True)
class ComplaintStats:
    total: int
    verified: int
    pending: int
    rejected: int
    average_sentiment: float
    most_common_type: str
    verification_rate: float


def _value(field: Any) -> str:
    return field.value if hasattr(field, "value") else str(field)


def calculate_complaint_stats(complaints: Sequence[Any]) -> ComplaintStats:
    """Summarize complaints by status, sentiment and category.

    Args:
        complaints: Records with ``status``, ``sentiment_score`` and
            ``complaint_type`` attributes.

    Returns:
        ComplaintStats. With no complaints, averages are 0.0 and the most
        common type is "NONE".
    """
    total = len(complaints)
    statuses = Counter(_value(c.status) for c in complaints)
    types = Counter(_value(c.complaint_type) for c in complaints)

    verified = statuses[ComplaintFlag.VERIFIED.value]
    average_sentiment = mean(c.sentiment_score for c in complaints) if total else 0.0
    most_common_type = types.most_common(1)[0][0] if types else "NONE"

    return ComplaintStats(
        total=total,
        verified=verified,
        pending=statuses[ComplaintFlag.PENDING_REVIEW.value],
        rejected=statuses[ComplaintFlag.REJECTED.value],
        average_sentiment=average_sentiment,
        most_common_type=most_common_type,
        verification_rate=verified / total if total else 0.0,
    )
