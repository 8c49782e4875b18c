"""
ConfTx ElGamal Encryption

Additively homomorphic ElGamal "in the exponent" over the Baby Jubjub
prime-order subgroup:

    Enc(pk, v; r) = (v*G + r*pk, r*G)

Adding ciphertexts under the same key adds the plaintexts. Decryption
recovers v*G and then searches [0, max_value] with baby-step giant-step,
so only bounded values can be decrypted.
"""

from __future__ import annotations
import functools
import logging
import math
from dataclasses import dataclass
from typing import Dict, Tuple, Union

from conftx.constants import CIPHERTEXT_SIZE, JUBJUB_SUBGROUP_ORDER
from conftx.crypto.jubjub import GENERATOR, Point, Scalar, generator_multiples
from conftx.errors import (
    DecryptionOutOfRangeError,
    InvalidKeyError,
    InvalidParameterError,
    SubgroupCheckFailedError,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# Keys
# ==============================================================================

@dataclass(frozen=True, slots=True)
class EncryptionKey:
    """
    Public encryption key sk*G.

    SIZE: 32 bytes (point encoding)
    """
    point: Point

    def __post_init__(self):
        if self.point.is_identity():
            raise InvalidKeyError("encryption key is the identity")
        if not self.point.is_in_subgroup():
            raise SubgroupCheckFailedError("encryption key")

    def serialize(self) -> bytes:
        return self.point.serialize()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[EncryptionKey, int]:
        point, consumed = Point.deserialize(data, offset)
        return cls(point), consumed

    def hex(self) -> str:
        return self.serialize().hex()

    @classmethod
    def from_hex(cls, hex_string: str) -> EncryptionKey:
        key, _ = cls.deserialize(bytes.fromhex(hex_string))
        return key

    def __repr__(self) -> str:
        return f"EncryptionKey({self.hex()[:16]}...)"


@dataclass(frozen=True, slots=True)
class DecryptionKey:
    """
    Secret decryption key. Never leaves its holder.

    SIZE: 32 bytes (scalar encoding)
    """
    scalar: Scalar

    def __post_init__(self):
        if self.scalar.is_zero():
            raise InvalidKeyError("decryption key is zero")

    def public(self) -> EncryptionKey:
        return EncryptionKey(GENERATOR * self.scalar)

    def serialize(self) -> bytes:
        return self.scalar.serialize()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[DecryptionKey, int]:
        scalar, consumed = Scalar.deserialize(data, offset)
        return cls(scalar), consumed

    def __repr__(self) -> str:
        return "DecryptionKey(<redacted>)"


# ==============================================================================
# Ciphertexts
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Ciphertext:
    """
    ElGamal ciphertext (left, right) = (v*G + r*pk, r*G).

    SIZE: 64 bytes
    SERIALIZATION: left || right
    """
    left: Point
    right: Point

    @classmethod
    def zero(cls) -> Ciphertext:
        """Encryption of 0 with randomness 0, valid under every key."""
        return cls(Point.identity(), Point.identity())

    def __add__(self, other: Ciphertext) -> Ciphertext:
        return Ciphertext(self.left + other.left, self.right + other.right)

    def __sub__(self, other: Ciphertext) -> Ciphertext:
        return Ciphertext(self.left - other.left, self.right - other.right)

    def serialize(self) -> bytes:
        return self.left.serialize() + self.right.serialize()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Ciphertext, int]:
        """Deserialize, return (Ciphertext, bytes_consumed). Both points are subgroup-checked."""
        left, n1 = Point.deserialize(data, offset)
        right, n2 = Point.deserialize(data, offset + n1)
        return cls(left, right), n1 + n2

    def __repr__(self) -> str:
        return f"Ciphertext({self.serialize().hex()[:16]}...)"


KeyLike = Union[EncryptionKey, Point]


def _point(key: KeyLike) -> Point:
    return key.point if isinstance(key, EncryptionKey) else key


def encrypt(key: KeyLike, amount: int, randomness: Scalar) -> Ciphertext:
    """
    Encrypt amount under key.

    Deterministic in (key, amount, randomness); callers draw fresh
    randomness for every ciphertext they publish.
    """
    if not 0 <= amount < JUBJUB_SUBGROUP_ORDER:
        raise InvalidParameterError("amount", "must be a non-negative scalar")
    pk = _point(key)
    return Ciphertext(GENERATOR * amount + pk * randomness, GENERATOR * randomness)


def add(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    return a + b


def sub(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    return a - b


# ==============================================================================
# Bounded decryption
# ==============================================================================

@functools.lru_cache(maxsize=8)
def _baby_steps(size: int) -> Dict[Point, int]:
    logger.debug(f"Building baby-step table of {size} entries")
    return {p: j for j, p in enumerate(generator_multiples(0, size))}


def decrypt_point(decryption_key: DecryptionKey, ciphertext: Ciphertext) -> Point:
    """v*G for the plaintext v."""
    return ciphertext.left - ciphertext.right * decryption_key.scalar


def decrypt_bounded(
    decryption_key: DecryptionKey,
    ciphertext: Ciphertext,
    max_value: int,
) -> int:
    """
    Recover the plaintext if it lies in [0, max_value].

    Raises:
        DecryptionOutOfRangeError: no value in range matches
    """
    if max_value < 0:
        raise InvalidParameterError("max_value", "must be non-negative")
    target = decrypt_point(decryption_key, ciphertext)

    m = math.isqrt(max_value) + 1
    table = _baby_steps(m)
    giant = -(GENERATOR * m)
    current = target
    for i in range(max_value // m + 1):
        j = table.get(current)
        if j is not None:
            value = i * m + j
            if value <= max_value:
                return value
            break
        current = current + giant
    raise DecryptionOutOfRangeError(max_value)
