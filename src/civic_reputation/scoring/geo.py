"""Great-circle distance and photo location verification."""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_METERS = 6_371_000.0
MAX_DISTANCE_METERS = 1000.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in degrees."""

    latitude: float
    longitude: float


# Kathmandu, used when a contract has no recorded project coordinate.
DEFAULT_PROJECT_LOCATION = GeoPoint(latitude=27.7172, longitude=85.324)


@dataclass(frozen=True)
class LocationVerification:
    """Outcome of comparing a photo coordinate with a project site.

    Attributes:
        is_valid: Whether the photo counts as taken on site.
        distance: Distance from the project site in meters.
        within_range: Same as ``is_valid``; kept for callers that display both.
    """

    is_valid: bool
    distance: float
    within_range: bool


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points.

    Uses the Haversine formula:
    a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
    d = R · 2 · atan2(√a, √(1−a))

    Args:
        lat1: Latitude of the first point in degrees.
        lon1: Longitude of the first point in degrees.
        lat2: Latitude of the second point in degrees.
        lon2: Longitude of the second point in degrees.

    Returns:
        Distance in meters.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) * math.sin(delta_phi / 2)
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) * math.sin(delta_lambda / 2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def verify_location(
    photo_lat: float,
    photo_lon: float,
    project_lat: float,
    project_lon: float,
    max_distance_meters: float = MAX_DISTANCE_METERS,
) -> LocationVerification:
    """Check whether a photo was taken within range of the project site.

    Args:
        photo_lat: Photo latitude in degrees.
        photo_lon: Photo longitude in degrees.
        project_lat: Project site latitude in degrees.
        project_lon: Project site longitude in degrees.
        max_distance_meters: Inclusive acceptance radius.

    Returns:
        LocationVerification with the computed distance.
    """
    distance = haversine_distance(photo_lat, photo_lon, project_lat, project_lon)
    within_range = distance <= max_distance_meters
    return LocationVerification(is_valid=within_range, distance=distance, within_range=within_range)
