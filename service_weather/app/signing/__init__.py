"""
Key import, ES256 minting and token caching for WeatherKit.
"""

from .der import der_to_jose
from .key_loader import KeyLoader, SigningKey, import_signing_key
from .minter import TokenRecord, clamp_ttl, mint
from .token_cache import EXPIRY_MARGIN_SECONDS, TokenCache

__all__ = [
    "EXPIRY_MARGIN_SECONDS",
    "KeyLoader",
    "SigningKey",
    "TokenCache",
    "TokenRecord",
    "clamp_ttl",
    "der_to_jose",
    "import_signing_key",
    "mint",
]
