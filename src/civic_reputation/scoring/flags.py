"""Review flag decision for complaint submissions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from civic_reputation.scoring.geo import MAX_DISTANCE_METERS

NO_GPS_REASON = "No GPS data in image"
ALL_CHECKS_PASSED = "All checks passed"


class ComplaintFlag(str, enum.Enum):
    """Whether a complaint may affect the live rating."""

    VERIFIED = "VERIFIED"
    PENDING_REVIEW = "PENDING_REVIEW"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class FlagDetermination:
    flag: ComplaintFlag
    reasons: list[str] = field(default_factory=list)

    @property
    def reason_text(self) -> str:
        """Reasons joined for display, or the all-clear message."""
        return ", ".join(self.reasons) if self.reasons else ALL_CHECKS_PASSED


def determine_flag(
    has_gps: bool,
    location_verified: bool,
    distance: float | None,
    max_distance_meters: float = MAX_DISTANCE_METERS,
) -> FlagDetermination:
    """Decide the review flag from GPS presence and location verification.

    | has_gps | location_verified | flag           |
    |---------|-------------------|----------------|
    | False   | any               | PENDING_REVIEW |
    | True    | False             | REJECTED       |
    | True    | True              | VERIFIED       |

    Args:
        has_gps: Whether the submission carried a GPS coordinate.
        location_verified: Whether the coordinate was within range.
        distance: Distance from the project site in meters, if known.
        max_distance_meters: Radius quoted in the rejection reason.

    Returns:
        FlagDetermination with the flag and human-readable reasons.
    """
    if not has_gps:
        return FlagDetermination(ComplaintFlag.PENDING_REVIEW, [NO_GPS_REASON])

    if not location_verified:
        shown = f"{distance:.0f}" if distance is not None else "unknown"
        reason = f"Location is {shown}m from project site (max: {max_distance_meters:g}m)"
        return FlagDetermination(ComplaintFlag.REJECTED, [reason])

    return FlagDetermination(ComplaintFlag.VERIFIED, [])
