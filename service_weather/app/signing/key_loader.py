"""
Import of the WeatherKit PKCS8 private key into a signing-only handle.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re
from typing import Optional

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from shared.errors import ConfigError, FormatError
from shared.logging import get_logger

_PEM_ARMOR = re.compile(r"-----(BEGIN|END) PRIVATE KEY-----")

logger = get_logger("weather.signing.key_loader")


class SigningKey:
    """Opaque ECDSA P-256 key that can only sign.

    The wrapped key object is never exposed, serialized or rendered.
    """

    __slots__ = ("_key",)

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._key = private_key

    def sign(self, data: bytes) -> bytes:
        """Sign ``data`` with ECDSA/SHA-256 and return the DER signature."""
        return self._key.sign(data, ec.ECDSA(hashes.SHA256()))

    def __repr__(self) -> str:
        return "<SigningKey ES256>"

    def __reduce__(self):
        raise TypeError("SigningKey cannot be serialized")


def pem_to_der(pem_text: str) -> bytes:
    """Strip PEM armor and line breaks and decode the base64 body."""
    clean = _PEM_ARMOR.sub("", str(pem_text or "")).replace("\r", "").replace("\n", "").strip()
    if not clean:
        raise ConfigError("WEATHERKIT_P8 is empty or invalid.")

    try:
        return base64.b64decode(clean, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("WEATHERKIT_P8 is not valid base64.") from exc


def import_signing_key(pem_text: str) -> SigningKey:
    """Import a PEM/PKCS8 EC P-256 private key for signing.

    Raises:
        ConfigError: the PEM is empty, or holds a key that is not EC P-256.
        FormatError: the PEM body is not a decodable PKCS8 private key.
    """
    der = pem_to_der(pem_text)
    try:
        private_key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError) as exc:
        raise FormatError("WEATHERKIT_P8 is not a valid PKCS8 private key.") from exc

    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise ConfigError("WEATHERKIT_P8 is not an EC private key.")
    if not isinstance(private_key.curve, ec.SECP256R1):
        raise ConfigError(f"WEATHERKIT_P8 uses curve {private_key.curve.name}, expected P-256.")

    return SigningKey(private_key)


class KeyLoader:
    """Memoized, retryable import of the configured signing key.

    Concurrent callers during a cold start wait on the same import. A failed
    import is not remembered; the next call tries again.
    """

    def __init__(self, pem_text: str) -> None:
        self._pem_text = pem_text
        self._key: Optional[SigningKey] = None
        self._lock = asyncio.Lock()
        self.import_count = 0

    @property
    def loaded(self) -> bool:
        return self._key is not None

    async def get_key(self) -> SigningKey:
        """Return the signing key, importing it on first use."""
        if self._key is not None:
            return self._key

        async with self._lock:
            if self._key is not None:
                return self._key

            if not self._pem_text:
                raise ConfigError("Missing WEATHERKIT_P8 secret.")

            self.import_count += 1
            key = await asyncio.to_thread(import_signing_key, self._pem_text)
            self._key = key
            logger.info("Signing key imported")
            return key
