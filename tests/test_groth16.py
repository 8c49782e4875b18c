"""
ConfTx Groth16 Tests

Uses the cubic x^3 + x + 5 = out with out public, small enough that
setup and proving take well under a second of group arithmetic.
"""

import pytest

from conftx.crypto.field import R
from conftx.errors import CircuitMismatchError, InvalidEncodingError, SetupSizeExceededError
from conftx.zk.groth16 import (
    Proof,
    ProvingKey,
    ReferenceString,
    VerifyingKey,
    create_proof,
    generate_parameters,
    setup,
    synthesize_witness,
    verify_proof,
)
from conftx.zk.gadgets import Num


class CubicCircuit:
    """Knowledge of x with x^3 + x + c = out."""

    def __init__(self, x=None, out=None, c=5):
        self.x = x
        self.out = out
        self.c = c

    def synthesize(self, cs):
        out = Num.alloc_input(cs, "out", lambda: self.out)
        x = Num.alloc(cs, "x", lambda: self.x)
        x2 = x.mul(cs, "x2", x)
        x3 = x2.mul(cs, "x3", x)
        (x3 + x + self.c).enforce_equal(cs, "result", out)


@pytest.fixture(scope="module")
def cubic_keys():
    return setup(CubicCircuit(), max_degree=64, label=b"cubic")


@pytest.fixture(scope="module")
def cubic_proof(cubic_keys):
    pk, _ = cubic_keys
    return create_proof(CubicCircuit(x=3, out=35), pk)


class TestSetup:
    """Tests for key generation."""

    def test_key_shape(self, cubic_keys):
        pk, vk = cubic_keys
        assert vk.num_public_inputs == 1
        assert vk.label == b"cubic"
        # 3 constraints + 2 inputs
        assert pk.domain_size == 8
        # ONE, out, x, x^2, x^3
        assert len(pk.a_query) == 5

    def test_size_exceeded(self):
        """Test a reference string too small for the circuit."""
        with pytest.raises(SetupSizeExceededError):
            setup(CubicCircuit(), max_degree=4)

    def test_deterministic_from_reference_string(self):
        """Test the same trapdoor yields the same keys."""
        srs = ReferenceString(11, 12, 13, 14, 15, max_degree=64)
        a = generate_parameters(CubicCircuit(), srs)
        b = generate_parameters(CubicCircuit(), srs)
        assert a.serialize() == b.serialize()

    def test_reference_string_repr(self):
        assert "11" not in repr(ReferenceString(11, 12, 13, 14, 15))


class TestProveVerify:
    """Tests for proving and verification."""

    @pytest.mark.timeout(300)
    def test_valid_proof(self, cubic_keys, cubic_proof):
        _, vk = cubic_keys
        assert verify_proof(vk, cubic_proof, [35])
        assert verify_proof(vk.prepare(), cubic_proof, [35])

    @pytest.mark.timeout(300)
    def test_wrong_public_input(self, cubic_keys, cubic_proof):
        _, vk = cubic_keys
        assert not verify_proof(vk, cubic_proof, [36])

    def test_input_count_and_range(self, cubic_keys, cubic_proof):
        """Test malformed public inputs are refused before pairing."""
        _, vk = cubic_keys
        assert not verify_proof(vk, cubic_proof, [])
        assert not verify_proof(vk, cubic_proof, [35, 1])
        assert not verify_proof(vk, cubic_proof, [35 + R])

    @pytest.mark.timeout(300)
    def test_unsatisfied_witness(self, cubic_keys):
        """Test a proof of a false statement does not verify."""
        pk, vk = cubic_keys
        assert not synthesize_witness(CubicCircuit(x=3, out=36)).is_satisfied()
        proof = create_proof(CubicCircuit(x=3, out=36), pk)
        assert not verify_proof(vk, proof, [36])

    def test_proofs_are_randomized(self, cubic_keys, cubic_proof):
        pk, _ = cubic_keys
        assert create_proof(CubicCircuit(x=3, out=35), pk) != cubic_proof

    def test_circuit_mismatch(self, cubic_keys):
        """Test proving a different circuit with the key."""
        pk, _ = cubic_keys
        with pytest.raises(CircuitMismatchError):
            create_proof(CubicCircuit(x=3, out=36, c=6), pk)

    @pytest.mark.timeout(300)
    def test_key_from_other_setup(self, cubic_keys, cubic_proof):
        """Test a proof does not verify under an independent setup."""
        _, other_vk = setup(CubicCircuit(), max_degree=64)
        assert not verify_proof(other_vk, cubic_proof, [35])


class TestEncoding:
    """Tests for proof and key serialization."""

    def test_proof_roundtrip(self, cubic_proof):
        data = cubic_proof.serialize()
        assert len(data) == 192
        assert Proof.from_bytes(data) == cubic_proof

    def test_proof_wrong_length(self, cubic_proof):
        with pytest.raises(InvalidEncodingError):
            Proof.from_bytes(cubic_proof.serialize()[:-1])

    def test_verifying_key_roundtrip(self, cubic_keys):
        _, vk = cubic_keys
        restored = VerifyingKey.deserialize(vk.serialize())
        assert restored.serialize() == vk.serialize()
        assert restored.label == b"cubic"
        assert restored.circuit_digest == vk.circuit_digest

    def test_proving_key_roundtrip(self, cubic_keys, tmp_path):
        pk, _ = cubic_keys
        path = tmp_path / "cubic.pk"
        pk.save(path)
        restored = ProvingKey.load(path, checked=True)
        assert restored.serialize() == pk.serialize()
        assert restored.domain_size == pk.domain_size

    @pytest.mark.timeout(300)
    def test_restored_keys_work(self, cubic_keys, tmp_path):
        pk, vk = cubic_keys
        pk_path = tmp_path / "cubic.pk"
        vk_path = tmp_path / "cubic.vk"
        pk.save(pk_path)
        vk.save(vk_path)
        proof = create_proof(CubicCircuit(x=2, out=15), ProvingKey.load(pk_path))
        assert verify_proof(VerifyingKey.load(vk_path), proof, [15])
