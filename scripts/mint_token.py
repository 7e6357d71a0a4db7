#!/usr/bin/env python3
"""
Mint a WeatherKit developer token from the local configuration.

Useful for calling WeatherKit by hand (curl, Postman) with exactly the token
the proxy would send. Reads the same WEATHERKIT_* environment variables or
``.env`` file as the service.
"""

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import get_config  # noqa: E402
from shared.errors import ProxyError  # noqa: E402
from service_weather.app.signing.key_loader import import_signing_key  # noqa: E402
from service_weather.app.signing.minter import mint  # noqa: E402


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mint a WeatherKit ES256 developer token.")
    parser.add_argument("--key-file", type=Path, default=None, help="Read the PKCS8 PEM from this file instead of WEATHERKIT_P8")
    parser.add_argument("--ttl", type=int, default=None, help="Token lifetime in seconds (clamped to 300-3600)")
    parser.add_argument("--header", action="store_true", help="Print an Authorization header line instead of JSON")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    config = get_config()

    pem_text = args.key_file.read_text() if args.key_file else config.weatherkit_p8
    ttl = args.ttl if args.ttl is not None else config.weatherkit_token_ttl_seconds

    if not (config.weatherkit_team_id and config.weatherkit_service_id and config.weatherkit_key_id):
        print("[mint-token] failed: Missing required WeatherKit configuration.", file=sys.stderr)
        return 1

    try:
        record = mint(
            config.weatherkit_team_id,
            config.weatherkit_service_id,
            config.weatherkit_key_id,
            ttl,
            import_signing_key(pem_text),
        )
    except ProxyError as exc:
        print(f"[mint-token] failed: {exc.message}", file=sys.stderr)
        return 1

    if args.header:
        print(f"Authorization: Bearer {record.token}")
    else:
        print(json.dumps({
            "token": record.token,
            "expires_at": record.expires_at,
            "kid": config.weatherkit_key_id,
        }, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
