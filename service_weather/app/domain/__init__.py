"""
Request-level domain helpers for the weather proxy.
"""

from .coordinates import CoordinateQuery, parse_coordinate, validate_coordinates

__all__ = [
    "CoordinateQuery",
    "parse_coordinate",
    "validate_coordinates",
]
