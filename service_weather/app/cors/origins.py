"""
Origin allow-list matching and CORS header construction.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional, Sequence

ALLOW_METHODS = "GET, OPTIONS"
ALLOW_HEADERS = "Content-Type"
MAX_AGE_SECONDS = "86400"


def parse_allowed_origins(multi: str = "", single: str = "") -> List[str]:
    """Build the allow-list from ``ALLOWED_ORIGINS`` or ``ALLOWED_ORIGIN``.

    The comma-separated list wins when it yields at least one pattern.
    Blank entries are dropped.
    """
    patterns = [value.strip() for value in (multi or "").split(",") if value.strip()]
    if patterns:
        return patterns

    single = (single or "").strip()
    return [single] if single else []


def _wildcard_regex(pattern: str) -> "re.Pattern[str]":
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def is_origin_allowed(origin: str, patterns: Sequence[str]) -> bool:
    """Return True if ``origin`` matches any pattern, checked in order."""
    for allowed in patterns:
        if allowed == "*":
            return True
        if "*" not in allowed:
            if origin == allowed:
                return True
            continue
        if _wildcard_regex(allowed).fullmatch(origin):
            return True
    return False


def build_cors_headers(headers: Mapping[str, str], allowed_origins: Sequence[str]) -> Optional[Dict[str, str]]:
    """Compute CORS response headers for a request.

    Returns ``{}`` when no allow-list is configured or the request has no
    Origin, ``None`` when the Origin is not allowed, and otherwise headers
    that echo the request's own Origin.
    """
    if not allowed_origins:
        return {}

    origin = headers.get("Origin")
    if not origin:
        return {}

    if not is_origin_allowed(origin, allowed_origins):
        return None

    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Max-Age": MAX_AGE_SECONDS,
        "Vary": "Origin",
    }
