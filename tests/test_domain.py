"""
ConfTx Evaluation Domain Tests
"""

import pytest

from conftx.crypto.field import R
from conftx.errors import InvalidParameterError
from conftx.zk.domain import EvaluationDomain, domain_size_for


def _evaluate(coeffs, x):
    acc = 0
    for c in reversed(coeffs):
        acc = (acc * x + c) % R
    return acc


class TestDomainSize:
    """Tests for domain sizing."""

    @pytest.mark.parametrize("n,size", [(0, 2), (2, 2), (3, 4), (760, 1024), (1024, 1024), (1025, 2048)])
    def test_domain_size_for(self, n, size):
        assert domain_size_for(n) == size

    def test_rejects_non_power_of_two(self):
        with pytest.raises(InvalidParameterError):
            EvaluationDomain(12)
        with pytest.raises(InvalidParameterError):
            EvaluationDomain(1)

    def test_omega_order(self):
        """Test omega generates a subgroup of exactly the domain size."""
        domain = EvaluationDomain(16)
        assert pow(domain.omega, 16, R) == 1
        assert pow(domain.omega, 8, R) != 1


class TestTransforms:
    """Tests for NTTs."""

    def test_fft_evaluates(self):
        """Test fft output equals direct evaluation at omega^i."""
        domain = EvaluationDomain(8)
        coeffs = [3, 1, 4, 1, 5, 9, 2, 6]
        evals = domain.fft(coeffs)
        for i, value in enumerate(evals):
            assert value == _evaluate(coeffs, pow(domain.omega, i, R))

    def test_ifft_inverts_fft(self):
        domain = EvaluationDomain(32)
        coeffs = [(i * 7919 + 17) % R for i in range(32)]
        assert domain.ifft(domain.fft(coeffs)) == coeffs

    def test_short_input_is_padded(self):
        domain = EvaluationDomain(8)
        assert domain.ifft(domain.fft([1, 2])) == [1, 2, 0, 0, 0, 0, 0, 0]

    def test_too_long_input(self):
        with pytest.raises(InvalidParameterError):
            EvaluationDomain(4).fft([1] * 5)

    def test_coset_roundtrip(self):
        domain = EvaluationDomain(16)
        coeffs = list(range(1, 17))
        assert domain.icoset_fft(domain.coset_fft(coeffs)) == coeffs

    def test_coset_evaluates(self):
        """Test coset_fft evaluates at shift * omega^i."""
        domain = EvaluationDomain(4)
        coeffs = [5, 0, 2, 1]
        evals = domain.coset_fft(coeffs)
        for i, value in enumerate(evals):
            x = domain.shift * pow(domain.omega, i, R) % R
            assert value == _evaluate(coeffs, x)


class TestVanishingAndLagrange:
    """Tests for Z(X) and the Lagrange basis."""

    def test_vanishing_on_domain(self):
        domain = EvaluationDomain(8)
        for i in range(8):
            assert domain.vanishing_at(pow(domain.omega, i, R)) == 0
        assert domain.vanishing_at(domain.shift) != 0

    def test_vanishing_on_coset_inv(self):
        domain = EvaluationDomain(8)
        x = domain.shift * domain.omega % R
        assert domain.vanishing_at(x) * domain.vanishing_on_coset_inv() % R == 1

    def test_lagrange_sums_to_one(self):
        domain = EvaluationDomain(16)
        assert sum(domain.lagrange_at(123456789)) % R == 1

    def test_lagrange_interpolates(self):
        """Test sum(p(omega^j) * L_j(tau)) == p(tau)."""
        domain = EvaluationDomain(8)
        coeffs = [9, 8, 7, 6, 5, 4, 3, 2]
        tau = 987654321
        evals = domain.fft(coeffs)
        basis = domain.lagrange_at(tau)
        assert sum(e * l for e, l in zip(evals, basis)) % R == _evaluate(coeffs, tau)

    def test_lagrange_rejects_domain_point(self):
        domain = EvaluationDomain(8)
        with pytest.raises(InvalidParameterError):
            domain.lagrange_at(domain.omega)
