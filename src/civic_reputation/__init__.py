"""Civic Reputation.

Contractor reputation scoring for a civic transparency platform: complaint
verification, citizen ratings, issue penalties and bid eligibility.
"""

from civic_reputation.scoring import (
    analyze_sentiment,
    calculate_new_rating,
    calculate_rating_change,
    classify_complaint,
    derive_eligibility,
    determine_flag,
    verify_location,
)

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "analyze_sentiment",
    "calculate_new_rating",
    "calculate_rating_change",
    "classify_complaint",
    "derive_eligibility",
    "determine_flag",
    "verify_location",
]
