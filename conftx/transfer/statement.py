"""
ConfTx Transfer Statement and Witness

The statement is everything the network sees about a transfer; the
witness is what only the sender knows.

TransferStatement wire format (360 bytes):
    sender_key (32) || recipient_key (32) || fee_collector_key (32)
    || balance_before (64) || balance_after (64)
    || recipient_ciphertext (64) || fee_ciphertext (64)
    || nonce (u64, big-endian)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

from conftx.constants import MAX_NONCE, STATEMENT_SIZE
from conftx.core.serialization import ByteReader, ByteWriter
from conftx.core.types import Hash
from conftx.crypto.elgamal import Ciphertext, DecryptionKey, EncryptionKey
from conftx.crypto.hash import sha3_256
from conftx.crypto.jubjub import Point, Scalar
from conftx.errors import InvalidEncodingError, SubgroupCheckFailedError


@dataclass(frozen=True, slots=True)
class TransferStatement:
    """
    Public statement of a confidential transfer.

    SIZE: 360 bytes
    """
    sender_key: EncryptionKey
    recipient_key: EncryptionKey
    fee_collector_key: EncryptionKey
    balance_before: Ciphertext
    balance_after: Ciphertext
    recipient_ciphertext: Ciphertext
    fee_ciphertext: Ciphertext
    nonce: int

    def __post_init__(self):
        if not 0 <= self.nonce <= MAX_NONCE:
            raise ValueError(f"nonce out of range: {self.nonce}")
        if not self.points_in_subgroup():
            raise SubgroupCheckFailedError("statement")

    def points_in_subgroup(self) -> bool:
        """Every statement point lies in the prime-order subgroup."""
        return all(point.is_in_subgroup() for point in self.points())

    def points(self) -> List[Point]:
        """Statement points in circuit input order."""
        return [
            self.sender_key.point,
            self.recipient_key.point,
            self.fee_collector_key.point,
            self.balance_before.left,
            self.balance_before.right,
            self.balance_after.left,
            self.balance_after.right,
            self.recipient_ciphertext.left,
            self.recipient_ciphertext.right,
            self.fee_ciphertext.left,
            self.fee_ciphertext.right,
        ]

    def public_inputs(self) -> List[int]:
        """Field elements fed to the verifier: (x, y) of every point, then the nonce."""
        inputs = []
        for point in self.points():
            inputs.append(point.x)
            inputs.append(point.y)
        inputs.append(self.nonce)
        return inputs

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_raw(self.sender_key.serialize())
        writer.write_raw(self.recipient_key.serialize())
        writer.write_raw(self.fee_collector_key.serialize())
        writer.write_raw(self.balance_before.serialize())
        writer.write_raw(self.balance_after.serialize())
        writer.write_raw(self.recipient_ciphertext.serialize())
        writer.write_raw(self.fee_ciphertext.serialize())
        writer.write_u64(self.nonce)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[TransferStatement, int]:
        """
        Decode a statement, return (TransferStatement, bytes_consumed).

        Every point is checked for canonical encoding and subgroup
        membership; keys must not be the identity.
        """
        chunk = bytes(data[offset:offset + STATEMENT_SIZE])
        if len(chunk) != STATEMENT_SIZE:
            raise InvalidEncodingError("statement", f"expected {STATEMENT_SIZE} bytes, got {len(chunk)}")
        reader = ByteReader(chunk, "statement")
        keys = [EncryptionKey.deserialize(reader.read_fixed_bytes(32))[0] for _ in range(3)]
        cts = [Ciphertext.deserialize(reader.read_fixed_bytes(64))[0] for _ in range(4)]
        nonce = reader.read_u64()
        statement = cls(*keys, *cts, nonce)
        return statement, STATEMENT_SIZE

    @classmethod
    def from_bytes(cls, data: bytes) -> TransferStatement:
        if len(data) != STATEMENT_SIZE:
            raise InvalidEncodingError("statement", f"expected {STATEMENT_SIZE} bytes, got {len(data)}")
        statement, _ = cls.deserialize(data)
        return statement

    def hash(self) -> Hash:
        return sha3_256(self.serialize())

    def __repr__(self) -> str:
        return (
            f"TransferStatement(sender={self.sender_key.hex()[:16]}..., "
            f"recipient={self.recipient_key.hex()[:16]}..., nonce={self.nonce})"
        )


@dataclass(frozen=True, repr=False)
class TransferWitness:
    """
    Private witness of a transfer. Never serialized.

    amount_randomness, fee_randomness and debit_randomness encrypt the
    recipient ciphertext, the fee ciphertext and the sender's debit.
    """
    amount: int
    fee: int
    balance: int
    decryption_key: DecryptionKey
    amount_randomness: Scalar
    fee_randomness: Scalar
    debit_randomness: Scalar

    @property
    def remaining(self) -> int:
        return self.balance - self.amount - self.fee

    def __repr__(self) -> str:
        return "TransferWitness(<redacted>)"
