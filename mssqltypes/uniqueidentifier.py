"""Unique identifier (GUID) values and their on-the-wire byte order."""

from __future__ import annotations

import binascii
from dataclasses import dataclass


def _swap(raw: bytes) -> bytes:
    """Reverse the first three groups; the operation is its own inverse."""
    return raw[3::-1] + raw[5:3:-1] + raw[7:5:-1] + raw[8:]


@dataclass(frozen=True)
class UniqueIdentifier:
    """A 16-byte GUID held in canonical (big-endian, display) order."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != 16:
            raise ValueError("invalid UniqueIdentifier length")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def scan(cls, value) -> UniqueIdentifier:
        """Build from server bytes (mixed-endian) or a 36-character string."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
            if len(data) != 16:
                raise ValueError("invalid UniqueIdentifier length")
            return cls(_swap(data))
        if isinstance(value, str):
            if len(value) != 36:
                raise ValueError("invalid UniqueIdentifier string length")
            decoded = binascii.unhexlify(value.replace("-", ""))
            if len(decoded) != 16:
                raise ValueError("invalid UniqueIdentifier length")
            return cls(decoded)
        raise TypeError(f"cannot convert {type(value).__name__} to UniqueIdentifier")

    def value(self) -> bytes:
        """Return the bytes in the order the server stores them."""
        return _swap(self.raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        h = self.raw.hex().upper()
        return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:]}"