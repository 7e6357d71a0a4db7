"""
ASN.1 DER to JOSE conversion for ECDSA signatures.

``cryptography`` produces ECDSA signatures as a DER ``SEQUENCE`` of two
``INTEGER`` values. JWS wants the fixed-width concatenation ``R || S``
instead. Signature bytes are treated as untrusted, so every read goes
through :class:`_DerCursor`, which refuses to step past the buffer.
"""

from __future__ import annotations

from shared.errors import FormatError

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02


class _DerCursor:
    """Bounds-checked reader over a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.position

    def read_byte(self) -> int:
        if self.position >= len(self._data):
            raise FormatError("Truncated DER signature.")
        value = self._data[self.position]
        self.position += 1
        return value

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or count > self.remaining:
            raise FormatError("Truncated DER signature.")
        chunk = self._data[self.position:self.position + count]
        self.position += count
        return chunk

    def expect_tag(self, tag: int, what: str) -> None:
        if self.read_byte() != tag:
            raise FormatError(f"Expected DER {what}.")

    def read_length(self) -> int:
        first = self.read_byte()
        if first < 0x80:
            return first

        count = first & 0x7F
        if count == 0 or count > 4:
            raise FormatError("Invalid ASN.1 length.")

        return int.from_bytes(self.read_bytes(count), "big")

    def read_integer(self, what: str) -> bytes:
        self.expect_tag(INTEGER_TAG, what)
        return self.read_bytes(self.read_length())


def _normalize_integer(value: bytes, size: int) -> bytes:
    # DER adds one 0x00 when the high bit of the integer is set.
    if len(value) > size and value[:1] == b"\x00":
        value = value[1:]
    if len(value) > size:
        raise FormatError("Invalid ECDSA integer length.")
    return value.rjust(size, b"\x00")


def der_to_jose(signature: bytes, component_size: int = 32) -> bytes:
    """Convert a DER ECDSA signature into JOSE ``R || S`` form.

    A signature that is already ``2 * component_size`` bytes and does not
    start with a SEQUENCE tag is assumed to be JOSE already and returned
    as-is.

    Raises:
        FormatError: when the input is not a well-formed DER signature or an
            integer does not fit in ``component_size`` bytes.
    """
    signature = bytes(signature)
    if len(signature) == component_size * 2 and signature[:1] != bytes([SEQUENCE_TAG]):
        return signature

    cursor = _DerCursor(signature)
    cursor.expect_tag(SEQUENCE_TAG, "sequence")
    sequence_length = cursor.read_length()
    if sequence_length != cursor.remaining:
        raise FormatError("Invalid DER signature length.")

    r = cursor.read_integer("integer for R")
    s = cursor.read_integer("integer for S")
    if cursor.remaining:
        raise FormatError("Invalid DER signature length.")

    return _normalize_integer(r, component_size) + _normalize_integer(s, component_size)
