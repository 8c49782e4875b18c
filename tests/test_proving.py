"""
ConfTx Transfer Proof Tests
"""

from dataclasses import replace

import pytest

from conftx.crypto.elgamal import Ciphertext, EncryptionKey
from conftx.crypto.jubjub import GENERATOR, Point, R
from conftx.errors import CircuitMismatchError, SubgroupCheckFailedError, UnsatisfiedWitnessError
from conftx.transfer import key_params, prove, verify
from conftx.zk.gadgets import Num
from conftx.zk.groth16 import setup as groth16_setup

# (0, -1) has order 2
ORDER_TWO = Point(0, R - 1)


class SquareCircuit:
    """x * x = y with y public."""

    def synthesize(self, cs):
        y = Num.alloc_input(cs, "y", lambda: 0)
        x = Num.alloc(cs, "x", lambda: 0)
        x.mul(cs, "square", x).enforce_equal(cs, "y", y)


class TestKeyParams:
    """Tests for reading circuit parameters from keys."""

    def test_from_keys(self, params, proving_key, verifying_key, prepared_vk):
        assert key_params(proving_key) == params
        assert key_params(verifying_key) == params
        assert key_params(prepared_vk) == params

    def test_foreign_key(self):
        _, vk = groth16_setup(SquareCircuit(), max_degree=16, label=b"square")
        with pytest.raises(CircuitMismatchError):
            key_params(vk)


@pytest.mark.timeout(600)
class TestProveVerify:
    """Tests for transfer proofs."""

    def test_valid_transfer(self, signed_transfer, verifying_key, prepared_vk):
        statement, _, proof = signed_transfer
        assert verify(proof, statement, verifying_key)
        assert verify(proof, statement, prepared_vk)

    def test_verify_bytes(self, signed_transfer, prepared_vk):
        """Test verification straight from wire bytes."""
        statement, _, proof = signed_transfer
        assert verify(proof.serialize(), statement.serialize(), prepared_vk)

    def test_tampered_nonce(self, signed_transfer, prepared_vk):
        """Test the proof is bound to its nonce."""
        statement, _, proof = signed_transfer
        assert not verify(proof, replace(statement, nonce=2), prepared_vk)

    def test_swapped_recipient(self, signed_transfer, prepared_vk, fee_collector):
        statement, _, proof = signed_transfer
        assert not verify(proof, replace(statement, recipient_key=fee_collector.public), prepared_vk)

    def test_malformed_input(self, signed_transfer, prepared_vk):
        """Test garbage bytes are rejected without raising."""
        statement, _, proof = signed_transfer
        assert not verify(b"\x00" * 10, statement, prepared_vk)
        assert not verify(b"\xff" * 192, statement, prepared_vk)
        assert not verify(proof, statement.serialize()[:-1], prepared_vk)
        assert not verify(proof, b"\xff" * 360, prepared_vk)

    def test_foreign_verifying_key(self, signed_transfer):
        statement, _, proof = signed_transfer
        _, vk = groth16_setup(SquareCircuit(), max_degree=16, label=b"square")
        assert not verify(proof, statement, vk)

    def test_unsatisfied_witness_refused(self, signed_transfer, proving_key):
        """Test the prover refuses a witness that does not match the statement."""
        statement, witness, _ = signed_transfer
        with pytest.raises(UnsatisfiedWitnessError) as excinfo:
            prove(replace(witness, amount=11), statement, proving_key)
        assert excinfo.value.details["constraint"].startswith("recipient/")

    def test_proofs_are_randomized(self, signed_transfer, proving_key, prepared_vk):
        statement, witness, proof = signed_transfer
        again = prove(witness, statement, proving_key)
        assert again != proof
        assert verify(again, statement, prepared_vk)


class TestSmallOrderPoints:
    """Tests that statements never carry points outside the subgroup."""

    def test_torsion_key_rejected(self):
        """Test a small-order point cannot become a recipient key."""
        with pytest.raises(SubgroupCheckFailedError):
            EncryptionKey(ORDER_TWO)
        with pytest.raises(SubgroupCheckFailedError):
            EncryptionKey(GENERATOR + ORDER_TWO)

    def test_torsion_ciphertext_rejected(self, signed_transfer):
        """Test a statement object with a mixed-order ciphertext point."""
        statement, _, _ = signed_transfer
        tainted = Ciphertext(statement.recipient_ciphertext.left + ORDER_TWO, statement.recipient_ciphertext.right)
        with pytest.raises(SubgroupCheckFailedError):
            replace(statement, recipient_ciphertext=tainted)
        with pytest.raises(SubgroupCheckFailedError):
            replace(statement, fee_ciphertext=Ciphertext(ORDER_TWO, statement.fee_ciphertext.right))

    def test_torsion_key_bytes(self, signed_transfer, prepared_vk):
        """Test a mixed-order recipient key in wire bytes fails verification."""
        statement, _, proof = signed_transfer
        data = bytearray(statement.serialize())
        data[32:64] = (statement.recipient_key.point + ORDER_TWO).serialize()
        assert not verify(proof, bytes(data), prepared_vk)
