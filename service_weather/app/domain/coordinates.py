"""
Validation of the lat/lng query parameters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from shared.errors import InvalidCoordinatesError


@dataclass(frozen=True)
class CoordinateQuery:
    """A validated point: lat in [-90, 90], lng in [-180, 180]."""

    lat: float
    lng: float


def parse_coordinate(raw_value: Optional[str], minimum: float, maximum: float) -> Optional[float]:
    """Parse a finite number within ``[minimum, maximum]``, else None."""
    if raw_value is None or not str(raw_value).strip():
        return None
    # float() accepts digit separators ("4_0"); coordinates must not.
    if "_" in str(raw_value):
        return None
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value < minimum or value > maximum:
        return None
    return value


def validate_coordinates(raw_lat: Optional[str], raw_lng: Optional[str]) -> CoordinateQuery:
    lat = parse_coordinate(raw_lat, -90.0, 90.0)
    lng = parse_coordinate(raw_lng, -180.0, 180.0)
    if lat is None or lng is None:
        raise InvalidCoordinatesError()
    return CoordinateQuery(lat=lat, lng=lng)
