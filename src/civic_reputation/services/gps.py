"""GPS extraction from complaint photos."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from civic_reputation.scoring.geo import GeoPoint


@runtime_checkable
class GpsExtractor(Protocol):
    """Protocol for reading a capture coordinate from image bytes.

    Implementations return None when the image carries no usable location.
    """

    def extract(self, image: bytes) -> GeoPoint | None:
        """Extract the capture coordinate from an image.

        Args:
            image: Raw image bytes.

        Returns:
            Capture coordinate, or None.
        """
        ...


class NullGpsExtractor:
    """Extractor that never finds a location.

    Complaints relying on it land in PENDING_REVIEW unless the caller passes
    explicit coordinates.
    """

    def extract(self, image: bytes) -> GeoPoint | None:
        return None
