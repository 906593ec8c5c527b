"""Initial rating from a contractor's qualification."""

from __future__ import annotations

from collections.abc import Sequence

CERTIFICATE_POINTS = 2.0
POINTS_PER_EXPERIENCE_YEAR = 0.5
MAX_EXPERIENCE_POINTS = 2.0
POINTS_PER_SKILL = 0.2
MAX_SKILL_POINTS = 1.0
MAX_INITIAL_RATING = 5.0


def calculate_initial_rating(
    has_certificate: bool,
    experience_years: float,
    skills: Sequence[str],
) -> float:
    """Compute the starting rating for a newly qualified contractor.

    - Certificate (URL and number): 2.0
    - Experience: 0.5 per year, up to 2.0
    - Skills: 0.2 per skill, up to 1.0

    Args:
        has_certificate: Whether both certificate URL and number were given.
        experience_years: Years of experience.
        skills: Declared skills.

    Returns:
        Initial rating, at most 5.0.
    """
    rating = 0.0
    if has_certificate:
        rating += CERTIFICATE_POINTS
    if experience_years:
        rating += min(experience_years * POINTS_PER_EXPERIENCE_YEAR, MAX_EXPERIENCE_POINTS)
    if skills:
        rating += min(len(skills) * POINTS_PER_SKILL, MAX_SKILL_POINTS)
    return min(rating, MAX_INITIAL_RATING)
