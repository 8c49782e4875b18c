"""
ConfTx Key Pairs

Key generation and deterministic derivation from a seed. The circuit
reads decryption keys as scalar_bits-wide bit strings, so every key is
kept below 2^scalar_bits.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from conftx.constants import (
    DEFAULT_SCALAR_BITS,
    JUBJUB_SUBGROUP_ORDER,
    KEY_DERIVATION_PERSONALIZATION,
    SEED_MIN_SIZE,
)
from conftx.crypto.elgamal import DecryptionKey, EncryptionKey
from conftx.crypto.hash import blake2b_personal
from conftx.crypto.jubjub import Scalar
from conftx.errors import InvalidKeyError

logger = logging.getLogger(__name__)


def _key_bound(scalar_bits: int) -> int:
    return min(1 << scalar_bits, JUBJUB_SUBGROUP_ORDER)


@dataclass(frozen=True, slots=True)
class KeyPair:
    """
    Encryption/decryption key pair.
    """
    public: EncryptionKey
    secret: DecryptionKey

    def __post_init__(self):
        if self.secret.public() != self.public:
            raise InvalidKeyError("public key does not match secret key")

    def __repr__(self) -> str:
        return f"KeyPair(public={self.public})"

    @classmethod
    def from_scalar(cls, n: int, scalar_bits: int = DEFAULT_SCALAR_BITS) -> KeyPair:
        """Build a key pair from an explicit secret scalar."""
        if not 0 < n < _key_bound(scalar_bits):
            raise InvalidKeyError(f"secret must be in (0, 2^{scalar_bits}) and below the group order")
        secret = DecryptionKey(Scalar(n))
        return cls(public=secret.public(), secret=secret)

    @classmethod
    def generate(cls, scalar_bits: int = DEFAULT_SCALAR_BITS) -> KeyPair:
        """Fresh key pair from the OS CSPRNG."""
        return cls.from_scalar(Scalar.random(scalar_bits).value, scalar_bits)

    @classmethod
    def from_seed(cls, seed: bytes, scalar_bits: int = DEFAULT_SCALAR_BITS) -> KeyPair:
        """
        Derive a key pair from a seed.

        sk = BLAKE2b-512("ConfTx_KeyDerive", seed || counter) mod bound,
        retrying with the next counter on zero.
        """
        if len(seed) < SEED_MIN_SIZE:
            raise InvalidKeyError(f"seed must be at least {SEED_MIN_SIZE} bytes")
        bound = _key_bound(scalar_bits)
        counter = 0
        while True:
            digest = blake2b_personal(
                KEY_DERIVATION_PERSONALIZATION,
                seed + counter.to_bytes(4, "big"),
            )
            n = int.from_bytes(digest, "little") % bound
            if n:
                return cls.from_scalar(n, scalar_bits)
            counter += 1
