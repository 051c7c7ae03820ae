"""
Service-area gate.

Turning a GPS fix into text is the location service's job; the gate only
classifies the resulting text.
"""

from typing import Optional

DEFAULT_SUPPORTED_LOCATION = "Orlando"


def is_supported_location(text: Optional[str], supported: str = DEFAULT_SUPPORTED_LOCATION) -> bool:
    """Case-insensitive substring match of the supported city in ``text``."""
    if not text or not supported:
        return False
    return supported.casefold() in text.casefold()


def format_placemark(city: Optional[str], region: Optional[str], country: Optional[str]) -> str:
    """Join the non-empty parts of a resolved place as "City, Region, Country"."""
    parts = [p.strip() for p in (city, region, country) if p and p.strip()]
    return ", ".join(parts)
