"""Input validation helpers shared by submission models."""

from __future__ import annotations

import re

MAX_TEXT_LENGTH = 2000

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check for a minimal ``local@domain.tld`` shape."""
    return bool(_EMAIL_RE.match(email))


def is_valid_gps(latitude: float, longitude: float) -> bool:
    """Check that a coordinate lies within latitude/longitude ranges."""
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def sanitize_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Trim whitespace, strip angle brackets and cap length."""
    return re.sub(r"[<>]", "", text.strip())[:max_length]
