"""
ConfTx Evaluation Domains

Multiplicative subgroups of Fr of power-of-two size, with radix-2 NTTs
and the coset variants the prover uses to divide by the vanishing
polynomial Z(X) = X^n - 1.
"""

from __future__ import annotations
import logging
from typing import List, Sequence

from conftx.constants import FR_MULTIPLICATIVE_GENERATOR, MAX_DOMAIN_LOG2
from conftx.crypto.field import R, batch_inverse, root_of_unity
from conftx.errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Coset shift. A non-residue, so it lies outside every 2-power subgroup.
COSET_SHIFT = FR_MULTIPLICATIVE_GENERATOR


def domain_size_for(n: int) -> int:
    """Smallest power of two >= n (at least 2)."""
    size = 2
    while size < n:
        size <<= 1
    return size


class EvaluationDomain:
    """Subgroup {omega^i} of size 2^log_size."""

    def __init__(self, size: int):
        if size < 2 or size & (size - 1):
            raise InvalidParameterError("size", f"{size} is not a power of two >= 2")
        self.size = size
        self.log_size = size.bit_length() - 1
        if self.log_size > MAX_DOMAIN_LOG2:
            raise InvalidParameterError("size", f"2^{self.log_size} exceeds the field's 2-adicity")
        self.omega = root_of_unity(self.log_size)
        self.omega_inv = pow(self.omega, -1, R)
        self.size_inv = pow(size, -1, R)
        self.shift = COSET_SHIFT
        self.shift_inv = pow(COSET_SHIFT, -1, R)

    def _pad(self, values: Sequence[int]) -> List[int]:
        if len(values) > self.size:
            raise InvalidParameterError("values", f"{len(values)} > domain size {self.size}")
        return [v % R for v in values] + [0] * (self.size - len(values))

    def fft(self, coeffs: Sequence[int]) -> List[int]:
        """Coefficients to evaluations at omega^i."""
        return _ntt(self._pad(coeffs), self.omega)

    def ifft(self, evals: Sequence[int]) -> List[int]:
        """Evaluations at omega^i to coefficients."""
        out = _ntt(self._pad(evals), self.omega_inv)
        return [v * self.size_inv % R for v in out]

    def coset_fft(self, coeffs: Sequence[int]) -> List[int]:
        """Coefficients to evaluations at shift * omega^i."""
        return self.fft(_distribute_powers(self._pad(coeffs), self.shift))

    def icoset_fft(self, evals: Sequence[int]) -> List[int]:
        """Evaluations at shift * omega^i to coefficients."""
        return _distribute_powers(self.ifft(evals), self.shift_inv)

    def vanishing_at(self, x: int) -> int:
        """Z(x) = x^n - 1."""
        return (pow(x, self.size, R) - 1) % R

    def vanishing_on_coset_inv(self) -> int:
        """1 / Z(shift * omega^i), the same for every i."""
        return pow(self.vanishing_at(self.shift), -1, R)

    def lagrange_at(self, tau: int) -> List[int]:
        """
        All Lagrange basis polynomials at tau:

            L_j(tau) = Z(tau) * omega^j / (n * (tau - omega^j))
        """
        z = self.vanishing_at(tau)
        if z == 0:
            raise InvalidParameterError("tau", "lies in the evaluation domain")
        roots = [1] * self.size
        for j in range(1, self.size):
            roots[j] = roots[j - 1] * self.omega % R
        denominators = batch_inverse([(tau - w) % R for w in roots])
        scale = z * self.size_inv % R
        return [scale * w % R * d % R for w, d in zip(roots, denominators)]


def _distribute_powers(values: List[int], g: int) -> List[int]:
    out = []
    power = 1
    for v in values:
        out.append(v * power % R)
        power = power * g % R
    return out


def _ntt(a: List[int], omega: int) -> List[int]:
    # Iterative Cooley-Tukey, bit-reversed input order.
    n = len(a)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            a[i], a[j] = a[j], a[i]

    length = 2
    while length <= n:
        half = length >> 1
        w_len = pow(omega, n // length, R)
        twiddles = [1] * half
        for k in range(1, half):
            twiddles[k] = twiddles[k - 1] * w_len % R
        for start in range(0, n, length):
            for k in range(half):
                u = a[start + k]
                v = a[start + k + half] * twiddles[k] % R
                a[start + k] = (u + v) % R
                a[start + k + half] = (u - v) % R
        length <<= 1
    return a
