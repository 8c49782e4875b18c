"""
ConfTx Groth16 Proofs

SIZE: 192 bytes
SERIALIZATION: A (G1, 32) || B (G2, 128) || C (G1, 32)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Tuple

from conftx.constants import G1_COMPRESSED_SIZE, G2_UNCOMPRESSED_SIZE, PROOF_SIZE
from conftx.crypto.bn254 import decode_g1, decode_g2, encode_g1, encode_g2
from conftx.errors import InvalidEncodingError


@dataclass(frozen=True, eq=False)
class Proof:
    """Groth16 proof (A in G1, B in G2, C in G1)."""
    a: Any
    b: Any
    c: Any

    def serialize(self) -> bytes:
        return encode_g1(self.a) + encode_g2(self.b) + encode_g1(self.c)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Proof, int]:
        """
        Decode and validate a proof, return (Proof, bytes_consumed).

        Raises:
            InvalidEncodingError: truncated or malformed group element
            SubgroupCheckFailedError: B outside the G2 subgroup
        """
        chunk = bytes(data[offset:offset + PROOF_SIZE])
        if len(chunk) != PROOF_SIZE:
            raise InvalidEncodingError("proof", f"expected {PROOF_SIZE} bytes, got {len(chunk)}")
        b_end = G1_COMPRESSED_SIZE + G2_UNCOMPRESSED_SIZE
        a = decode_g1(chunk[:G1_COMPRESSED_SIZE])
        b = decode_g2(chunk[G1_COMPRESSED_SIZE:b_end])
        c = decode_g1(chunk[b_end:])
        return cls(a, b, c), PROOF_SIZE

    @classmethod
    def from_bytes(cls, data: bytes) -> Proof:
        if len(data) != PROOF_SIZE:
            raise InvalidEncodingError("proof", f"expected {PROOF_SIZE} bytes, got {len(data)}")
        proof, _ = cls.deserialize(data)
        return proof

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Proof):
            return self.serialize() == other.serialize()
        return False

    def __hash__(self) -> int:
        return hash(self.serialize())

    def __repr__(self) -> str:
        return f"Proof({self.serialize().hex()[:16]}...)"
