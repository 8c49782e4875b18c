"""
ConfTx Hash Functions

SHA3-256 (FIPS 202) for identifiers and digests, personalized BLAKE2b
for key derivation.
"""

from __future__ import annotations
import hashlib
from typing import Union

from conftx.core.types import Hash

BytesLike = Union[bytes, bytearray, memoryview]


def sha3_256(data: BytesLike) -> Hash:
    """
    SHA3-256 hash function per NIST FIPS 202.

    Args:
        data: Input data to hash

    Returns:
        Hash: 32-byte hash output wrapped in Hash type
    """
    hasher = hashlib.sha3_256()
    hasher.update(data)
    return Hash(hasher.digest())


def sha3_256_raw(data: BytesLike) -> bytes:
    """SHA3-256 returning raw bytes."""
    return hashlib.sha3_256(data).digest()


def tagged_hash(tag: bytes, data: bytes) -> Hash:
    """
    Domain-separated hash.

    Computes: SHA3-256(SHA3-256(tag) || SHA3-256(tag) || data)
    """
    tag_hash = sha3_256_raw(tag)
    return sha3_256(tag_hash + tag_hash + data)


def blake2b_personal(personalization: bytes, data: BytesLike) -> bytes:
    """BLAKE2b-512 with a 16-byte personalization string."""
    return hashlib.blake2b(data, digest_size=64, person=personalization).digest()


class HashBuilder:
    """
    Builder pattern for constructing hashes from multiple inputs.

    Example:
        digest = HashBuilder().update(b"hello").update_u32(7).finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha3_256()

    def update(self, data: bytes) -> "HashBuilder":
        """Add data to the hash computation."""
        self._hasher.update(data)
        return self

    def update_u32(self, value: int) -> "HashBuilder":
        """Add a u32 (big-endian) to the hash computation."""
        self._hasher.update(value.to_bytes(4, "big"))
        return self

    def update_int(self, value: int) -> "HashBuilder":
        """Add a field element as 32 big-endian bytes."""
        self._hasher.update(value.to_bytes(32, "big"))
        return self

    def finalize(self) -> Hash:
        """Return the final hash."""
        return Hash(self._hasher.digest())
