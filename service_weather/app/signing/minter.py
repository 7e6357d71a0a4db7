"""
ES256 token minting for WeatherKit.
"""

from __future__ import annotations

import base64
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from shared.config import MAX_TOKEN_TTL_SECONDS, MIN_TOKEN_TTL_SECONDS

from .der import der_to_jose
from .key_loader import SigningKey


@dataclass(frozen=True)
class TokenRecord:
    """A compact JWT and the unix time it stops being valid."""

    token: str
    expires_at: int


def b64url_encode(data: bytes) -> str:
    """Base64url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _encode_segment(value: Dict[str, Any]) -> str:
    return b64url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def clamp_ttl(ttl_seconds: int) -> int:
    """Clamp a token lifetime into the range WeatherKit accepts."""
    return max(MIN_TOKEN_TTL_SECONDS, min(MAX_TOKEN_TTL_SECONDS, int(ttl_seconds)))


def build_header(team_id: str, service_id: str, key_id: str) -> Dict[str, str]:
    return {
        "alg": "ES256",
        "kid": key_id,
        "id": f"{team_id}.{service_id}",
        "typ": "JWT",
    }


def build_payload(team_id: str, service_id: str, issued_at: int, expires_at: int) -> Dict[str, Any]:
    return {
        "iss": team_id,
        "sub": service_id,
        "iat": issued_at,
        "exp": expires_at,
    }


def mint(
    team_id: str,
    service_id: str,
    key_id: str,
    ttl_seconds: int,
    signing_key: SigningKey,
    now: Optional[int] = None,
) -> TokenRecord:
    """Build and sign a WeatherKit developer token.

    Args:
        team_id: Apple developer team identifier (``iss``).
        service_id: WeatherKit service identifier (``sub``).
        key_id: Identifier of the private key (``kid``).
        ttl_seconds: Requested lifetime, clamped to [300, 3600].
        signing_key: Imported P-256 key.
        now: Issue time in unix seconds; defaults to the current time.

    Returns:
        TokenRecord holding the compact JWT and its ``exp``.
    """
    issued_at = int(time.time()) if now is None else int(now)
    expires_at = issued_at + clamp_ttl(ttl_seconds)

    header = build_header(team_id, service_id, key_id)
    payload = build_payload(team_id, service_id, issued_at, expires_at)
    signing_input = f"{_encode_segment(header)}.{_encode_segment(payload)}"

    signature = der_to_jose(signing_key.sign(signing_input.encode("utf-8")))
    return TokenRecord(token=f"{signing_input}.{b64url_encode(signature)}", expires_at=expires_at)
