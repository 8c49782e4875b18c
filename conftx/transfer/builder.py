"""
ConfTx Transfer Builder

Wallet-side assembly of a consistent (statement, witness) pair.
"""

from __future__ import annotations
import logging
from typing import Tuple

from conftx.crypto.elgamal import Ciphertext, EncryptionKey, encrypt
from conftx.crypto.jubjub import Scalar
from conftx.errors import InvalidKeyError, InvalidParameterError
from conftx.keys.keypair import KeyPair
from conftx.transfer.circuit import CircuitParams
from conftx.transfer.statement import TransferStatement, TransferWitness

logger = logging.getLogger(__name__)


def build_transfer(
    sender: KeyPair,
    balance: Ciphertext,
    balance_value: int,
    recipient: EncryptionKey,
    fee_collector: EncryptionKey,
    amount: int,
    fee: int,
    nonce: int,
    params: CircuitParams,
) -> Tuple[TransferStatement, TransferWitness]:
    """
    Build a transfer of amount (plus fee) from sender.

    Fresh randomness is drawn for the recipient, fee and debit
    ciphertexts. balance must be the sender's current ciphertext and
    balance_value its plaintext.

    Raises:
        InvalidParameterError: amount, fee or balance out of range, or
            amount + fee exceeding the balance
        InvalidKeyError: sender key wider than the circuit allows
    """
    max_value = params.max_value
    for name, value in (("amount", amount), ("fee", fee), ("balance_value", balance_value)):
        if not 0 <= value <= max_value:
            raise InvalidParameterError(name, f"must be in [0, {max_value}]")
    if amount + fee > balance_value:
        raise InvalidParameterError("amount", "amount plus fee exceeds balance")
    if sender.secret.scalar.bit_length() > params.scalar_bits:
        raise InvalidKeyError(f"sender key exceeds {params.scalar_bits} bits")

    amount_randomness = Scalar.random(params.scalar_bits)
    fee_randomness = Scalar.random(params.scalar_bits)
    debit_randomness = Scalar.random(params.scalar_bits)

    recipient_ct = encrypt(recipient, amount, amount_randomness)
    fee_ct = encrypt(fee_collector, fee, fee_randomness)
    debit = encrypt(sender.public, amount + fee, debit_randomness)

    statement = TransferStatement(
        sender_key=sender.public,
        recipient_key=recipient,
        fee_collector_key=fee_collector,
        balance_before=balance,
        balance_after=balance - debit,
        recipient_ciphertext=recipient_ct,
        fee_ciphertext=fee_ct,
        nonce=nonce,
    )
    witness = TransferWitness(
        amount=amount,
        fee=fee,
        balance=balance_value,
        decryption_key=sender.secret,
        amount_randomness=amount_randomness,
        fee_randomness=fee_randomness,
        debit_randomness=debit_randomness,
    )
    logger.debug(f"Built transfer {statement.hash().hex()[:16]} with nonce {nonce}")
    return statement, witness
