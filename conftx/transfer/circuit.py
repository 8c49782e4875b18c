"""
ConfTx Confidential Transfer Circuit

Proves, for the public statement and a private witness
(v, f, sk, r_a, r_f, r_d):

    range       v, f and rem = balance - v - f are value_bits wide
    ownership   pk_s = sk*G
    recipient   recipient = (v*G + r_a*pk_r, r_a*G)
    fee         fee_ct    = (f*G + r_f*pk_f, r_f*G)
    debit       after = before - ((v + f)*G + r_d*pk_s, r_d*G)
    solvency    after decrypts under sk to rem: rem*G + sk*after.right = after.left
    nonce       bound into the proof as a public input

Public inputs, in order: x and y of pk_s, pk_r, pk_f, before.left,
before.right, after.left, after.right, recipient.left, recipient.right,
fee.left, fee.right, then the nonce.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from conftx.constants import (
    DEFAULT_SCALAR_BITS,
    DEFAULT_VALUE_BITS,
    JUBJUB_SCALAR_BITS,
    MAX_VALUE_BITS,
    MIN_BITS,
)
from conftx.crypto.jubjub import GENERATOR
from conftx.errors import InvalidParameterError
from conftx.transfer.statement import TransferStatement, TransferWitness
from conftx.zk.gadgets import EdwardsPoint, Num, UInt, fixed_base_mul, variable_base_mul
from conftx.zk.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)

LABEL_PREFIX = b"conftx-transfer/v1:"


@dataclass(frozen=True)
class CircuitParams:
    """
    Bit widths of the transfer circuit.

    value_bits bounds amounts, fees and balances; scalar_bits bounds
    decryption keys and encryption randomness. Changing either changes
    the circuit and requires a new setup.
    """
    value_bits: int = DEFAULT_VALUE_BITS
    scalar_bits: int = DEFAULT_SCALAR_BITS

    def __post_init__(self):
        if not MIN_BITS <= self.value_bits <= MAX_VALUE_BITS:
            raise InvalidParameterError("value_bits", f"must be in [{MIN_BITS}, {MAX_VALUE_BITS}]")
        if not MIN_BITS <= self.scalar_bits <= JUBJUB_SCALAR_BITS:
            raise InvalidParameterError("scalar_bits", f"must be in [{MIN_BITS}, {JUBJUB_SCALAR_BITS}]")

    @property
    def max_value(self) -> int:
        return (1 << self.value_bits) - 1

    def label(self) -> bytes:
        """Key label identifying these parameters."""
        return LABEL_PREFIX + f"{self.value_bits}:{self.scalar_bits}".encode()

    @classmethod
    def from_label(cls, label: bytes) -> CircuitParams:
        if not label.startswith(LABEL_PREFIX):
            raise InvalidParameterError("label", "not a transfer circuit key")
        try:
            value_bits, scalar_bits = label[len(LABEL_PREFIX):].decode().split(":")
            return cls(int(value_bits), int(scalar_bits))
        except (UnicodeDecodeError, ValueError) as e:
            raise InvalidParameterError("label", f"malformed: {e}") from e


class ConfidentialTransferCircuit:
    """
    Transfer circuit. Without a statement and witness it synthesizes the
    constraint structure only, for key generation.
    """

    def __init__(
        self,
        params: CircuitParams,
        statement: Optional[TransferStatement] = None,
        witness: Optional[TransferWitness] = None,
    ):
        self.params = params
        self.statement = statement
        self.witness = witness

    def synthesize(self, cs: ConstraintSystem) -> None:
        st = self.statement
        w = self.witness
        value_bits = self.params.value_bits
        scalar_bits = self.params.scalar_bits

        # Public inputs
        pk_s = EdwardsPoint.alloc_input(cs, "sender_key", lambda: st.sender_key.point)
        pk_r = EdwardsPoint.alloc_input(cs, "recipient_key", lambda: st.recipient_key.point)
        pk_f = EdwardsPoint.alloc_input(cs, "fee_collector_key", lambda: st.fee_collector_key.point)
        before_left = EdwardsPoint.alloc_input(cs, "before_left", lambda: st.balance_before.left)
        before_right = EdwardsPoint.alloc_input(cs, "before_right", lambda: st.balance_before.right)
        after_left = EdwardsPoint.alloc_input(cs, "after_left", lambda: st.balance_after.left)
        after_right = EdwardsPoint.alloc_input(cs, "after_right", lambda: st.balance_after.right)
        recipient_left = EdwardsPoint.alloc_input(cs, "recipient_left", lambda: st.recipient_ciphertext.left)
        recipient_right = EdwardsPoint.alloc_input(cs, "recipient_right", lambda: st.recipient_ciphertext.right)
        fee_left = EdwardsPoint.alloc_input(cs, "fee_left", lambda: st.fee_ciphertext.left)
        fee_right = EdwardsPoint.alloc_input(cs, "fee_right", lambda: st.fee_ciphertext.right)
        nonce = Num.alloc_input(cs, "nonce", lambda: st.nonce)

        # nonce * nonce ties the nonce input into at least one constraint
        nonce.mul(cs, "nonce_binding", nonce)

        # Private witness, range-checked by bit decomposition
        amount = UInt.alloc(cs, "amount", lambda: w.amount, value_bits)
        fee = UInt.alloc(cs, "fee", lambda: w.fee, value_bits)
        remaining = UInt.alloc(cs, "remaining", lambda: w.remaining, value_bits)
        sk = UInt.alloc(cs, "sk", lambda: w.decryption_key.scalar.value, scalar_bits)
        r_a = UInt.alloc(cs, "amount_randomness", lambda: w.amount_randomness.value, scalar_bits)
        r_f = UInt.alloc(cs, "fee_randomness", lambda: w.fee_randomness.value, scalar_bits)
        r_d = UInt.alloc(cs, "debit_randomness", lambda: w.debit_randomness.value, scalar_bits)

        # Ownership
        with cs.namespace("ownership"):
            sk_g = fixed_base_mul(cs, "sk_g", sk.bits, GENERATOR)
            sk_g.enforce_equal(cs, "pk_s", pk_s)

        v_g = fixed_base_mul(cs, "amount_g", amount.bits, GENERATOR)
        f_g = fixed_base_mul(cs, "fee_g", fee.bits, GENERATOR)

        # Recipient ciphertext
        with cs.namespace("recipient"):
            fixed_base_mul(cs, "r_g", r_a.bits, GENERATOR).enforce_equal(cs, "right", recipient_right)
            r_pk = variable_base_mul(cs, "r_pk", r_a.bits, pk_r)
            v_g.add(cs, "left_sum", r_pk).enforce_equal(cs, "left", recipient_left)

        # Fee ciphertext
        with cs.namespace("fee"):
            fixed_base_mul(cs, "r_g", r_f.bits, GENERATOR).enforce_equal(cs, "right", fee_right)
            r_pk = variable_base_mul(cs, "r_pk", r_f.bits, pk_f)
            f_g.add(cs, "left_sum", r_pk).enforce_equal(cs, "left", fee_left)

        # Sender debit: after + Enc(pk_s, v + f; r_d) == before
        with cs.namespace("debit"):
            r_g = fixed_base_mul(cs, "r_g", r_d.bits, GENERATOR)
            after_right.add(cs, "right_sum", r_g).enforce_equal(cs, "right", before_right)
            r_pk = variable_base_mul(cs, "r_pk", r_d.bits, pk_s)
            debit_left = v_g.add(cs, "value_sum", f_g).add(cs, "debit_sum", r_pk)
            after_left.add(cs, "left_sum", debit_left).enforce_equal(cs, "left", before_left)

        # Solvency: the new balance decrypts to the range-checked remainder
        with cs.namespace("solvency"):
            rem_g = fixed_base_mul(cs, "rem_g", remaining.bits, GENERATOR)
            sk_right = variable_base_mul(cs, "sk_right", sk.bits, after_right)
            rem_g.add(cs, "sum", sk_right).enforce_equal(cs, "decrypts", after_left)
