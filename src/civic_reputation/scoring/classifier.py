"""Keyword-weighted complaint classification."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass


class ComplaintType(str, enum.Enum):
    """Complaint categories, in tie-break order."""

    QUALITY_ISSUE = "QUALITY_ISSUE"
    SAFETY_CONCERN = "SAFETY_CONCERN"
    DELAY = "DELAY"
    COMMUNICATION = "COMMUNICATION"
    COST_OVERRUN = "COST_OVERRUN"
    MATERIAL_DEFECT = "MATERIAL_DEFECT"
    WORKMANSHIP = "WORKMANSHIP"
    OTHER = "OTHER"


# Declaration order is the tie-break order: the first category reaching the
# highest weight wins.
CATEGORY_KEYWORDS: tuple[tuple[ComplaintType, tuple[str, ...]], ...] = (
    (
        ComplaintType.QUALITY_ISSUE,
        (
            "quality",
            "poor quality",
            "substandard",
            "inferior",
            "defect",
            "defective",
            "cheap",
            "shoddy",
        ),
    ),
    (
        ComplaintType.SAFETY_CONCERN,
        ("safety", "unsafe", "dangerous", "hazard", "risk", "injury", "accident", "code violation"),
    ),
    (
        ComplaintType.DELAY,
        ("delay", "late", "behind schedule", "slow", "waiting", "overdue", "deadline", "timeline"),
    ),
    (
        ComplaintType.COMMUNICATION,
        (
            "communication",
            "unresponsive",
            "no response",
            "ignoring",
            "doesn't answer",
            "no call back",
            "unprofessional",
        ),
    ),
    (
        ComplaintType.COST_OVERRUN,
        ("cost", "expensive", "overpriced", "budget", "overcharge", "money", "price", "fee"),
    ),
    (
        ComplaintType.MATERIAL_DEFECT,
        ("material", "materials", "supplies", "product", "equipment", "broken", "faulty"),
    ),
    (
        ComplaintType.WORKMANSHIP,
        (
            "workmanship",
            "work quality",
            "craftsmanship",
            "installation",
            "construction",
            "built",
            "finish",
        ),
    ),
    (ComplaintType.OTHER, ()),
)

EXACT_MATCH_WEIGHT = 0.5


@dataclass(frozen=True)
class Classification:
    """Winning complaint category and its share of the total weight."""

    type: ComplaintType
    confidence: float


def keyword_weight(lower_text: str, keywords: tuple[str, ...]) -> float:
    """Score one category against lower-cased text.

    Each keyword found as a substring adds 1.0, plus 0.5 for every
    whole-word occurrence.
    """
    weight = 0.0
    for keyword in keywords:
        if keyword in lower_text:
            weight += 1.0
            matches = re.findall(rf"\b{re.escape(keyword)}\b", lower_text, flags=re.IGNORECASE)
            weight += len(matches) * EXACT_MATCH_WEIGHT
    return weight


def category_weights(text: str) -> dict[ComplaintType, float]:
    """Compute the weight of every category, in declaration order."""
    lower_text = text.lower()
    return {
        category: keyword_weight(lower_text, keywords) for category, keywords in CATEGORY_KEYWORDS
    }


def classify_complaint(text: str) -> Classification:
    """Classify complaint text into one of the fixed categories.

    Args:
        text: Free complaint text.

    Returns:
        Classification with the highest-weighted category. Ties go to the
        category declared first; with no keyword hits the type is OTHER and
        confidence 0.0.
    """
    weights = category_weights(text)

    max_weight = 0.0
    selected = ComplaintType.OTHER
    for category, weight in weights.items():
        if weight > max_weight:
            max_weight = weight
            selected = category

    total_weight = sum(weights.values())
    confidence = max_weight / total_weight if total_weight > 0 else 0.0

    return Classification(type=selected, confidence=min(1.0, confidence))
