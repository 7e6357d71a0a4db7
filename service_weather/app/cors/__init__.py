"""
CORS gating by Origin allow-list.
"""

from .origins import build_cors_headers, is_origin_allowed, parse_allowed_origins

__all__ = [
    "build_cors_headers",
    "is_origin_allowed",
    "parse_allowed_origins",
]
