"""
ConfTx Core Data Structures
"""

from conftx.core.types import Hash
from conftx.core.serialization import (
    serialize_u8,
    serialize_u64,
    serialize_varint,
    deserialize_u8,
    deserialize_u64,
    deserialize_varint,
    ByteReader,
    ByteWriter,
)

__all__ = [
    # Types
    "Hash",
    # Serialization
    "serialize_u8",
    "serialize_u64",
    "serialize_varint",
    "deserialize_u8",
    "deserialize_u64",
    "deserialize_varint",
    "ByteReader",
    "ByteWriter",
]
