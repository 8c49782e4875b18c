"""
ConfTx Transfer Circuit Tests

Satisfiability checks only; proofs are covered in test_proving.py.
"""

from dataclasses import replace

import pytest

from conftx.constants import NUM_PUBLIC_INPUTS, STATEMENT_SIZE
from conftx.crypto.elgamal import DecryptionKey, decrypt_bounded, encrypt
from conftx.crypto.jubjub import Scalar
from conftx.errors import InvalidEncodingError, InvalidKeyError, InvalidParameterError
from conftx.keys import KeyPair
from conftx.transfer import (
    CircuitParams,
    ConfidentialTransferCircuit,
    TransferStatement,
    TransferWitness,
    build_transfer,
)
from conftx.zk.groth16 import synthesize_witness
from conftx.zk.r1cs import ConstraintSystem


def _unsatisfied(params, statement, witness):
    cs = synthesize_witness(ConfidentialTransferCircuit(params, statement, witness))
    return cs.which_is_unsatisfied()


@pytest.fixture
def transfer(params, alice, bob, fee_collector, alice_balance):
    return build_transfer(
        sender=alice,
        balance=alice_balance,
        balance_value=100,
        recipient=bob.public,
        fee_collector=fee_collector.public,
        amount=10,
        fee=1,
        nonce=1,
        params=params,
    )


class TestCircuitParams:
    """Tests for CircuitParams."""

    def test_defaults(self):
        params = CircuitParams()
        assert params.value_bits == 32
        assert params.scalar_bits == 251

    def test_bounds(self):
        with pytest.raises(InvalidParameterError):
            CircuitParams(value_bits=1)
        with pytest.raises(InvalidParameterError):
            CircuitParams(value_bits=65)
        with pytest.raises(InvalidParameterError):
            CircuitParams(scalar_bits=252)

    def test_label_roundtrip(self, params):
        assert CircuitParams.from_label(params.label()) == params

    def test_bad_label(self):
        with pytest.raises(InvalidParameterError):
            CircuitParams.from_label(b"cubic")
        with pytest.raises(InvalidParameterError):
            CircuitParams.from_label(b"conftx-transfer/v1:eight")


class TestBuilder:
    """Tests for build_transfer."""

    def test_ciphertexts_decrypt(self, transfer, alice, bob, fee_collector, alice_balance):
        """Test every statement ciphertext carries the intended value."""
        statement, witness = transfer
        assert statement.balance_before == alice_balance
        assert decrypt_bounded(alice.secret, statement.balance_after, 255) == 89
        assert decrypt_bounded(bob.secret, statement.recipient_ciphertext, 255) == 10
        assert decrypt_bounded(fee_collector.secret, statement.fee_ciphertext, 255) == 1
        assert witness.remaining == 89

    def test_overspend(self, params, alice, bob, fee_collector, alice_balance):
        with pytest.raises(InvalidParameterError):
            build_transfer(alice, alice_balance, 100, bob.public, fee_collector.public, 100, 1, 1, params)

    def test_value_too_large(self, params, alice, bob, fee_collector, alice_balance):
        """Test values must fit value_bits."""
        with pytest.raises(InvalidParameterError):
            build_transfer(alice, alice_balance, 256, bob.public, fee_collector.public, 1, 0, 1, params)
        with pytest.raises(InvalidParameterError):
            build_transfer(alice, alice_balance, 100, bob.public, fee_collector.public, -1, 0, 1, params)

    def test_sender_key_too_wide(self, params, bob, fee_collector):
        wide = KeyPair.from_scalar(300, 251)
        balance = encrypt(wide.public, 50, Scalar.from_int(1))
        with pytest.raises(InvalidKeyError):
            build_transfer(wide, balance, 50, bob.public, fee_collector.public, 1, 0, 1, params)

    def test_fresh_randomness(self, params, alice, bob, fee_collector, alice_balance):
        """Test the same transfer built twice gives different ciphertexts."""
        args = (alice, alice_balance, 100, bob.public, fee_collector.public, 10, 1, 1, params)
        a, _ = build_transfer(*args)
        b, _ = build_transfer(*args)
        assert a.recipient_ciphertext != b.recipient_ciphertext
        assert a.balance_after != b.balance_after


class TestStatement:
    """Tests for TransferStatement and TransferWitness."""

    def test_serialization(self, transfer):
        statement, _ = transfer
        data = statement.serialize()
        assert len(data) == STATEMENT_SIZE == 360
        assert TransferStatement.from_bytes(data) == statement
        assert TransferStatement.deserialize(b"\x00" + data, 1) == (statement, 360)

    def test_wrong_length(self, transfer):
        statement, _ = transfer
        with pytest.raises(InvalidEncodingError):
            TransferStatement.from_bytes(statement.serialize() + b"\x00")

    def test_public_inputs(self, transfer, alice):
        statement, _ = transfer
        inputs = statement.public_inputs()
        assert len(inputs) == NUM_PUBLIC_INPUTS == 23
        assert inputs[:2] == [alice.public.point.x, alice.public.point.y]
        assert inputs[-1] == 1

    def test_nonce_range(self, transfer):
        statement, _ = transfer
        with pytest.raises(ValueError):
            replace(statement, nonce=-1)
        with pytest.raises(ValueError):
            replace(statement, nonce=1 << 64)

    def test_witness_repr_redacted(self, transfer):
        _, witness = transfer
        assert repr(witness) == "TransferWitness(<redacted>)"


class TestCircuit:
    """Tests for ConfidentialTransferCircuit."""

    def test_keygen_matches_witness_structure(self, params, transfer, verifying_key):
        """Test both synthesis modes produce the key's circuit."""
        statement, witness = transfer
        shape = ConstraintSystem(with_witness=False)
        ConfidentialTransferCircuit(params).synthesize(shape)
        cs = synthesize_witness(ConfidentialTransferCircuit(params, statement, witness))
        assert shape.digest() == cs.digest() == verifying_key.circuit_digest
        assert cs.num_inputs == NUM_PUBLIC_INPUTS + 1
        assert cs.public_inputs() == statement.public_inputs()

    def test_honest_witness(self, params, transfer):
        statement, witness = transfer
        assert _unsatisfied(params, statement, witness) is None

    def test_tampered_amount(self, params, transfer):
        """Test a witness amount that disagrees with the recipient ciphertext."""
        statement, witness = transfer
        failed = _unsatisfied(params, statement, replace(witness, amount=11))
        assert failed.startswith("recipient/left")

    def test_wrong_decryption_key(self, params, transfer):
        statement, witness = transfer
        failed = _unsatisfied(params, statement, replace(witness, decryption_key=DecryptionKey(Scalar(12))))
        assert failed.startswith("ownership/")

    def test_wrong_fee_randomness(self, params, transfer):
        statement, witness = transfer
        failed = _unsatisfied(params, statement, replace(witness, fee_randomness=witness.fee_randomness + Scalar(1)))
        assert failed.startswith("fee/")

    def test_overspend(self, params, alice, bob, fee_collector):
        """Test spending 11 from a balance of 5 leaves the solvency check unsatisfied."""
        balance = encrypt(alice.public, 5, Scalar.from_int(1))
        r_a, r_f, r_d = Scalar(2), Scalar(3), Scalar(4)
        statement = TransferStatement(
            sender_key=alice.public,
            recipient_key=bob.public,
            fee_collector_key=fee_collector.public,
            balance_before=balance,
            balance_after=balance - encrypt(alice.public, 11, r_d),
            recipient_ciphertext=encrypt(bob.public, 10, r_a),
            fee_ciphertext=encrypt(fee_collector.public, 1, r_f),
            nonce=1,
        )
        witness = TransferWitness(
            amount=10,
            fee=1,
            balance=5,
            decryption_key=alice.secret,
            amount_randomness=r_a,
            fee_randomness=r_f,
            debit_randomness=r_d,
        )
        assert _unsatisfied(params, statement, witness).startswith("solvency/")

    def test_amount_out_of_range(self, params, alice, bob, fee_collector):
        """Test an amount wider than value_bits cannot satisfy the circuit."""
        balance = encrypt(alice.public, 255, Scalar.from_int(1))
        r_a, r_f, r_d = Scalar(2), Scalar(3), Scalar(4)
        statement = TransferStatement(
            sender_key=alice.public,
            recipient_key=bob.public,
            fee_collector_key=fee_collector.public,
            balance_before=balance,
            balance_after=balance - encrypt(alice.public, 256, r_d),
            recipient_ciphertext=encrypt(bob.public, 256, r_a),
            fee_ciphertext=encrypt(fee_collector.public, 0, r_f),
            nonce=1,
        )
        witness = TransferWitness(256, 0, 255, alice.secret, r_a, r_f, r_d)
        assert _unsatisfied(params, statement, witness) is not None
