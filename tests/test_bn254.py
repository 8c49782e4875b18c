"""
ConfTx BN254 Group Tests
"""

import pytest

from conftx.crypto.bn254 import (
    G1,
    G2,
    Z1,
    Z2,
    FixedBaseTable,
    add,
    decode_g1,
    decode_g2,
    encode_g1,
    encode_g2,
    g1_eq,
    g1_mul,
    g2_eq,
    g2_mul,
    msm,
    neg,
    pairing_gt,
)
from conftx.constants import FQ_MODULUS, FR_MODULUS
from conftx.errors import InvalidEncodingError


class TestG1Encoding:
    """Tests for compressed G1 points."""

    def test_roundtrip(self):
        """Test compress/decompress for both y parities."""
        for k in (1, 2, 5, 12345):
            for pt in (g1_mul(G1, k), neg(g1_mul(G1, k))):
                data = encode_g1(pt)
                assert len(data) == 32
                assert g1_eq(decode_g1(data), pt)

    def test_infinity(self):
        """Test point at infinity encoding."""
        data = encode_g1(Z1)
        assert data[0] == 0x40
        assert g1_eq(decode_g1(data), Z1)

    def test_non_canonical_infinity(self):
        """Test infinity with stray bits."""
        with pytest.raises(InvalidEncodingError):
            decode_g1(bytes([0x40]) + bytes(30) + b"\x01")
        with pytest.raises(InvalidEncodingError):
            decode_g1(bytes([0xC0]) + bytes(31))

    def test_unreduced_x(self):
        """Test x >= p is rejected."""
        with pytest.raises(InvalidEncodingError):
            decode_g1(FQ_MODULUS.to_bytes(32, "big"))

    def test_wrong_length(self):
        with pytest.raises(InvalidEncodingError):
            decode_g1(bytes(33))


class TestG2Encoding:
    """Tests for uncompressed G2 points."""

    def test_roundtrip(self):
        """Test G2 serialization with subgroup check."""
        pt = g2_mul(G2, 7)
        data = encode_g2(pt)
        assert len(data) == 128
        assert g2_eq(decode_g2(data), pt)

    def test_infinity(self):
        assert g2_eq(decode_g2(encode_g2(Z2)), Z2)

    def test_off_curve(self):
        """Test (1, 1) is not on the twist."""
        data = (1).to_bytes(32, "big") + bytes(32) + (1).to_bytes(32, "big") + bytes(32)
        with pytest.raises(InvalidEncodingError):
            decode_g2(data)


class TestScalarMultiplication:
    """Tests for MSM and fixed-base tables."""

    def test_mul_reduces_scalar(self):
        """Test n and n + r give the same point."""
        assert g1_eq(g1_mul(G1, 5), g1_mul(G1, 5 + FR_MODULUS))
        assert g1_eq(g1_mul(G1, FR_MODULUS), Z1)

    def test_msm_matches_naive(self):
        """Test Pippenger against a plain sum."""
        points = [g1_mul(G1, k) for k in range(1, 41)]
        scalars = [0, 1, FR_MODULUS - 1] + [k * 7919 + 3 for k in range(37)]
        expected = Z1
        for pt, s in zip(points, scalars):
            expected = add(expected, g1_mul(pt, s))
        assert g1_eq(msm(points, scalars, Z1), expected)

    def test_msm_empty(self):
        """Test all-zero scalars give infinity."""
        assert g1_eq(msm([G1, G1], [0, 0], Z1), Z1)

    def test_msm_g2(self):
        """Test MSM over G2."""
        points = [G2, g2_mul(G2, 3)]
        assert g2_eq(msm(points, [2, 5], Z2), g2_mul(G2, 17))

    def test_fixed_base_table(self):
        """Test window table against double-and-add."""
        table = FixedBaseTable(G1, Z1, window=4)
        for n in (0, 1, 15, 16, 2 ** 100 + 12345, FR_MODULUS - 1):
            assert g1_eq(table.mul(n), g1_mul(G1, n))


class TestPairing:
    """Tests for the pairing."""

    @pytest.mark.timeout(300)
    def test_bilinearity(self):
        """Test e(aP, bQ) == e(abP, Q)."""
        a, b = 6, 35
        lhs = pairing_gt(g1_mul(G1, a), g2_mul(G2, b))
        rhs = pairing_gt(g1_mul(G1, a * b), G2)
        assert lhs == rhs
        assert lhs != pairing_gt(G1, G2)
