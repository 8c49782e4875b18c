"""
ConfTx Scalar Field Arithmetic

Elements of Fr (the BN254 scalar field, also the base field of Baby
Jubjub) are plain Python ints kept in [0, r).
"""

from __future__ import annotations
import secrets
from typing import List, Optional, Sequence

from conftx.constants import (
    FR_MODULUS,
    FR_TWO_ADICITY,
    FR_MULTIPLICATIVE_GENERATOR,
    LITTLE_ENDIAN,
)
from conftx.errors import InvalidEncodingError

R = FR_MODULUS

# Tonelli-Shanks parameters: r - 1 = Q * 2^S with Q odd
_TS_Q = (R - 1) >> FR_TWO_ADICITY
_TS_S = FR_TWO_ADICITY
_TS_Z = pow(FR_MULTIPLICATIVE_GENERATOR, _TS_Q, R)


def inv(x: int) -> int:
    """Multiplicative inverse. Raises ZeroDivisionError on zero."""
    x %= R
    if x == 0:
        raise ZeroDivisionError("zero has no inverse in Fr")
    return pow(x, -1, R)


def batch_inverse(values: Sequence[int]) -> List[int]:
    """
    Invert many elements with a single field inversion.

    Montgomery's trick: prefix products forward, one inversion, then
    peel the inverses off backwards.
    """
    n = len(values)
    if n == 0:
        return []
    prefix = [0] * n
    acc = 1
    for i, v in enumerate(values):
        v %= R
        if v == 0:
            raise ZeroDivisionError(f"zero at position {i} in batch inverse")
        prefix[i] = acc
        acc = acc * v % R
    acc = pow(acc, -1, R)
    out = [0] * n
    for i in range(n - 1, -1, -1):
        out[i] = acc * prefix[i] % R
        acc = acc * values[i] % R
    return out


def legendre(x: int) -> int:
    """Legendre symbol of x: 1, -1 or 0."""
    x %= R
    if x == 0:
        return 0
    return 1 if pow(x, (R - 1) >> 1, R) == 1 else -1


def sqrt(x: int) -> Optional[int]:
    """Square root in Fr via Tonelli-Shanks, or None for non-residues."""
    x %= R
    if x == 0:
        return 0
    if legendre(x) != 1:
        return None

    m = _TS_S
    c = _TS_Z
    t = pow(x, _TS_Q, R)
    root = pow(x, (_TS_Q + 1) >> 1, R)
    while t != 1:
        i = 0
        t2 = t
        while t2 != 1:
            t2 = t2 * t2 % R
            i += 1
        b = pow(c, 1 << (m - i - 1), R)
        m = i
        c = b * b % R
        t = t * c % R
        root = root * b % R
    return root


def root_of_unity(log_n: int) -> int:
    """Primitive 2^log_n-th root of unity."""
    if not 0 <= log_n <= FR_TWO_ADICITY:
        raise ValueError(f"No 2^{log_n}-th root of unity in Fr")
    return pow(FR_MULTIPLICATIVE_GENERATOR, (R - 1) >> log_n, R)


def random_element(nonzero: bool = True) -> int:
    """Uniform element of Fr from the OS CSPRNG."""
    while True:
        x = secrets.randbelow(R)
        if x or not nonzero:
            return x


def to_bytes_le(x: int) -> bytes:
    return (x % R).to_bytes(32, LITTLE_ENDIAN)


def from_bytes_le(data: bytes) -> int:
    """Decode a canonical little-endian field element."""
    if len(data) != 32:
        raise InvalidEncodingError("field element", f"expected 32 bytes, got {len(data)}")
    x = int.from_bytes(data, LITTLE_ENDIAN)
    if x >= R:
        raise InvalidEncodingError("field element", "not reduced")
    return x
