"""
ConfTx Serialization Utilities

All multi-byte integers are BIG-ENDIAN unless noted. Field elements and
curve points have their own fixed-width encodings in conftx.crypto.
"""

from __future__ import annotations
from typing import Tuple

from conftx.constants import BIG_ENDIAN, LITTLE_ENDIAN
from conftx.errors import InvalidEncodingError


# ==============================================================================
# Integer Serialization (Big-Endian)
# ==============================================================================

def serialize_u8(value: int) -> bytes:
    """Serialize unsigned 8-bit integer."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"u8 value out of range: {value}")
    return bytes([value])


def serialize_u64(value: int) -> bytes:
    """Serialize unsigned 64-bit integer (big-endian)."""
    if not 0 <= value <= 0xFFFFFFFFFFFFFFFF:
        raise ValueError(f"u64 value out of range: {value}")
    return value.to_bytes(8, BIG_ENDIAN)


# ==============================================================================
# Integer Deserialization (Big-Endian)
# ==============================================================================

def _require(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise InvalidEncodingError(
            "integer", f"need {size} bytes at offset {offset}, have {len(data) - offset}"
        )


def deserialize_u8(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 8-bit integer.
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 1)
    return data[offset], 1


def deserialize_u64(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 64-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    _require(data, offset, 8)
    return int.from_bytes(data[offset:offset + 8], BIG_ENDIAN), 8


# ==============================================================================
# Varint Encoding (Bitcoin-style)
# ==============================================================================

def serialize_varint(value: int) -> bytes:
    """
    Serialize integer as variable-length integer (Bitcoin-style).

    - 0x00-0xFC: 1 byte
    - 0xFD-0xFFFF: 0xFD + 2 bytes (little-endian)
    - 0x10000-0xFFFFFFFF: 0xFE + 4 bytes (little-endian)
    - 0x100000000+: 0xFF + 8 bytes (little-endian)
    """
    if value < 0:
        raise ValueError(f"Varint cannot be negative: {value}")

    if value <= 0xFC:
        return bytes([value])
    elif value <= 0xFFFF:
        return bytes([0xFD]) + value.to_bytes(2, LITTLE_ENDIAN)
    elif value <= 0xFFFFFFFF:
        return bytes([0xFE]) + value.to_bytes(4, LITTLE_ENDIAN)
    else:
        return bytes([0xFF]) + value.to_bytes(8, LITTLE_ENDIAN)


def deserialize_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize variable-length integer.
    Returns (value, bytes_consumed).

    Only the shortest encoding of a value is accepted.
    """
    _require(data, offset, 1)
    first_byte = data[offset]

    if first_byte <= 0xFC:
        return first_byte, 1
    elif first_byte == 0xFD:
        size, minimum = 2, 0xFD
    elif first_byte == 0xFE:
        size, minimum = 4, 0x10000
    else:  # 0xFF
        size, minimum = 8, 0x100000000

    _require(data, offset + 1, size)
    value = int.from_bytes(data[offset + 1:offset + 1 + size], LITTLE_ENDIAN)
    if value < minimum:
        raise InvalidEncodingError("varint", f"non-minimal encoding of {value}")
    return value, 1 + size


class ByteReader:
    """
    Helper class for sequential deserialization.

    Every read checks bounds, so truncated input raises
    InvalidEncodingError instead of silently returning short slices.
    """

    def __init__(self, data: bytes, kind: str = "message"):
        self.data = bytes(data)
        self.offset = 0
        self.kind = kind

    def read_u8(self) -> int:
        value, size = deserialize_u8(self.data, self.offset)
        self.offset += size
        return value

    def read_u64(self) -> int:
        value, size = deserialize_u64(self.data, self.offset)
        self.offset += size
        return value

    def read_varint(self) -> int:
        value, size = deserialize_varint(self.data, self.offset)
        self.offset += size
        return value

    def read_fixed_bytes(self, size: int) -> bytes:
        """Read fixed-length byte array."""
        if self.remaining() < size:
            raise InvalidEncodingError(
                self.kind, f"truncated: need {size} bytes, have {self.remaining()}"
            )
        value = self.data[self.offset:self.offset + size]
        self.offset += size
        return value

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset

    def expect_end(self) -> None:
        """Reject trailing bytes."""
        if self.remaining():
            raise InvalidEncodingError(self.kind, f"{self.remaining()} trailing bytes")


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u8(value))
        return self

    def write_u64(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u64(value))
        return self

    def write_varint(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_varint(value))
        return self

    def write_raw(self, data: bytes) -> "ByteWriter":
        """Write raw bytes without length prefix."""
        self.buffer.extend(data)
        return self

    def to_bytes(self) -> bytes:
        """Return the serialized bytes."""
        return bytes(self.buffer)
