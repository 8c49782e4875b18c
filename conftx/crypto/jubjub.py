"""
ConfTx Baby Jubjub Curve

Twisted Edwards curve a*x^2 + y^2 = 1 + d*x^2*y^2 over Fr, the scalar
field of BN254. Keys and ciphertexts live in its prime-order subgroup of
order l, which lets the transfer circuit check them with native field
arithmetic.

a is a square and d is not, so the addition law is complete: the same
formula handles doubling, the identity and inverses.

Point encoding (32 bytes):
    y as little-endian integer, with the parity of x in bit 255.
    Canonical: y < r and no sign bit on x == 0.
"""

from __future__ import annotations
import secrets
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from conftx.constants import (
    JUBJUB_A,
    JUBJUB_D,
    JUBJUB_COFACTOR,
    JUBJUB_SUBGROUP_ORDER,
    JUBJUB_SCALAR_BITS,
    JUBJUB_GENERATOR_X,
    JUBJUB_GENERATOR_Y,
    LITTLE_ENDIAN,
    POINT_SIZE,
    POINT_SIGN_BIT,
    SCALAR_SIZE,
)
from conftx.crypto import field
from conftx.errors import InvalidEncodingError, SubgroupCheckFailedError

R = field.R
A = JUBJUB_A
D = JUBJUB_D
L = JUBJUB_SUBGROUP_ORDER


# ==============================================================================
# Scalars
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Scalar:
    """
    Element of Z/lZ.

    SIZE: 32 bytes
    SERIALIZATION: little-endian, canonical (< l)
    """
    value: int

    def __post_init__(self):
        if not 0 <= self.value < L:
            raise ValueError("Scalar must be reduced modulo the subgroup order")

    @classmethod
    def from_int(cls, n: int) -> Scalar:
        return cls(n % L)

    @classmethod
    def zero(cls) -> Scalar:
        return cls(0)

    @classmethod
    def random(cls, bits: int = JUBJUB_SCALAR_BITS) -> Scalar:
        """Uniform non-zero scalar below min(2^bits, l)."""
        bound = min(1 << bits, L)
        while True:
            n = secrets.randbelow(bound)
            if n:
                return cls(n)

    def is_zero(self) -> bool:
        return self.value == 0

    def bits(self, width: int) -> List[int]:
        """Little-endian bit decomposition, truncated to width."""
        return [(self.value >> i) & 1 for i in range(width)]

    def bit_length(self) -> int:
        return self.value.bit_length()

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __add__(self, other: Scalar) -> Scalar:
        return Scalar((self.value + int(other)) % L)

    def __sub__(self, other: Scalar) -> Scalar:
        return Scalar((self.value - int(other)) % L)

    def __mul__(self, other: Scalar) -> Scalar:
        return Scalar(self.value * int(other) % L)

    def __neg__(self) -> Scalar:
        return Scalar(-self.value % L)

    def inverse(self) -> Scalar:
        if self.value == 0:
            raise ZeroDivisionError("zero scalar has no inverse")
        return Scalar(pow(self.value, -1, L))

    def __repr__(self) -> str:
        return "Scalar(<redacted>)"

    def serialize(self) -> bytes:
        """Serialize to 32 little-endian bytes."""
        return self.value.to_bytes(SCALAR_SIZE, LITTLE_ENDIAN)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Scalar, int]:
        """Deserialize a canonical scalar, return (Scalar, bytes_consumed)."""
        chunk = bytes(data[offset:offset + SCALAR_SIZE])
        if len(chunk) != SCALAR_SIZE:
            raise InvalidEncodingError("scalar", f"expected {SCALAR_SIZE} bytes")
        n = int.from_bytes(chunk, LITTLE_ENDIAN)
        if n >= L:
            raise InvalidEncodingError("scalar", "not reduced modulo subgroup order")
        return cls(n), SCALAR_SIZE


# ==============================================================================
# Extended coordinates (X : Y : T : Z), x = X/Z, y = Y/Z, x*y = T/Z
# ==============================================================================

_Ext = Tuple[int, int, int, int]
_EXT_IDENTITY: _Ext = (0, 1, 0, 1)


def _ext_add(p: _Ext, q: _Ext) -> _Ext:
    # add-2008-hwcd, unified
    x1, y1, t1, z1 = p
    x2, y2, t2, z2 = q
    a = x1 * x2 % R
    b = y1 * y2 % R
    c = D * t1 % R * t2 % R
    d = z1 * z2 % R
    e = ((x1 + y1) * (x2 + y2) - a - b) % R
    f = (d - c) % R
    g = (d + c) % R
    h = (b - A * a) % R
    return (e * f % R, g * h % R, e * h % R, f * g % R)


def _ext_double(p: _Ext) -> _Ext:
    # dbl-2008-hwcd
    x1, y1, _, z1 = p
    a = x1 * x1 % R
    b = y1 * y1 % R
    c = 2 * z1 * z1 % R
    d = A * a % R
    e = ((x1 + y1) * (x1 + y1) - a - b) % R
    g = (d + b) % R
    f = (g - c) % R
    h = (d - b) % R
    return (e * f % R, g * h % R, e * h % R, f * g % R)


def _ext_neg(p: _Ext) -> _Ext:
    x, y, t, z = p
    return (-x % R, y, -t % R, z)


def _ext_mul(p: _Ext, n: int) -> _Ext:
    if n < 0:
        return _ext_mul(_ext_neg(p), -n)
    acc = _EXT_IDENTITY
    for i in range(n.bit_length() - 1, -1, -1):
        acc = _ext_double(acc)
        if (n >> i) & 1:
            acc = _ext_add(acc, p)
    return acc


def _ext_is_identity(p: _Ext) -> bool:
    x, y, _, z = p
    return x == 0 and y == z


def _to_ext(x: int, y: int) -> _Ext:
    return (x, y, x * y % R, 1)


def _from_ext(p: _Ext) -> Tuple[int, int]:
    x, y, _, z = p
    zi = pow(z, -1, R)
    return x * zi % R, y * zi % R


def _is_on_curve(x: int, y: int) -> bool:
    xx = x * x % R
    yy = y * y % R
    return (A * xx + yy) % R == (1 + D * xx % R * yy) % R


# ==============================================================================
# Points
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Point:
    """
    Affine Baby Jubjub point.

    Construction checks the curve equation. Points arriving from outside
    (deserialize, from_affine) are additionally checked to lie in the
    prime-order subgroup.
    """
    x: int
    y: int

    def __post_init__(self):
        if not (0 <= self.x < R and 0 <= self.y < R):
            raise ValueError("Point coordinates must be reduced field elements")
        if not _is_on_curve(self.x, self.y):
            raise ValueError("Point is not on the curve")

    @classmethod
    def identity(cls) -> Point:
        return _IDENTITY

    @classmethod
    def generator(cls) -> Point:
        return GENERATOR

    @classmethod
    def from_affine(cls, x: int, y: int) -> Point:
        """Build a point from untrusted coordinates."""
        if not (0 <= x < R and 0 <= y < R):
            raise InvalidEncodingError("point", "coordinate out of range")
        if not _is_on_curve(x, y):
            raise InvalidEncodingError("point", "not on curve")
        point = cls(x, y)
        if not point.is_in_subgroup():
            raise SubgroupCheckFailedError("jubjub")
        return point

    def _ext(self) -> _Ext:
        return _to_ext(self.x, self.y)

    @classmethod
    def _from_ext(cls, p: _Ext) -> Point:
        x, y = _from_ext(p)
        return cls(x, y)

    def is_identity(self) -> bool:
        return self.x == 0 and self.y == 1

    def is_in_subgroup(self) -> bool:
        return _ext_is_identity(_ext_mul(self._ext(), L))

    def is_small_order(self) -> bool:
        return _ext_is_identity(_ext_mul(self._ext(), JUBJUB_COFACTOR))

    def __add__(self, other: Point) -> Point:
        return Point._from_ext(_ext_add(self._ext(), other._ext()))

    def __neg__(self) -> Point:
        return Point(-self.x % R, self.y)

    def __sub__(self, other: Point) -> Point:
        return self + (-other)

    def double(self) -> Point:
        return Point._from_ext(_ext_double(self._ext()))

    def __mul__(self, k: Union[int, Scalar]) -> Point:
        n = int(k)
        if self is GENERATOR or self == GENERATOR:
            return Point._from_ext(_generator_mul(n % L))
        return Point._from_ext(_ext_mul(self._ext(), n))

    __rmul__ = __mul__

    def __repr__(self) -> str:
        return f"Point({self.serialize().hex()[:16]}...)"

    def serialize(self) -> bytes:
        """Serialize to 32 bytes: y little-endian, sign of x in the top bit."""
        out = bytearray(self.y.to_bytes(POINT_SIZE, LITTLE_ENDIAN))
        if self.x & 1:
            out[-1] |= POINT_SIGN_BIT
        return bytes(out)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Point, int]:
        """
        Deserialize and validate a point, return (Point, bytes_consumed).

        Raises:
            InvalidEncodingError: wrong length, non-canonical, or off-curve
            SubgroupCheckFailedError: point outside the prime-order subgroup
        """
        chunk = bytearray(data[offset:offset + POINT_SIZE])
        if len(chunk) != POINT_SIZE:
            raise InvalidEncodingError("point", f"expected {POINT_SIZE} bytes")
        sign = chunk[-1] >> 7
        chunk[-1] &= POINT_SIGN_BIT - 1
        y = int.from_bytes(chunk, LITTLE_ENDIAN)
        if y >= R:
            raise InvalidEncodingError("point", "y not reduced")

        yy = y * y % R
        denom = (A - D * yy) % R
        if denom == 0:
            raise InvalidEncodingError("point", "not on curve")
        x = field.sqrt((1 - yy) * pow(denom, -1, R) % R)
        if x is None:
            raise InvalidEncodingError("point", "not on curve")
        if x == 0 and sign:
            raise InvalidEncodingError("point", "non-canonical sign of zero x")
        if x & 1 != sign:
            x = R - x

        point = cls(x, y)
        if not point.is_in_subgroup():
            raise SubgroupCheckFailedError("jubjub")
        return point, POINT_SIZE


_IDENTITY = Point(0, 1)
GENERATOR = Point(JUBJUB_GENERATOR_X, JUBJUB_GENERATOR_Y)

# 2^i * G for i < 251, filled on first use
_GENERATOR_POWERS: List[_Ext] = []


def _generator_mul(n: int) -> _Ext:
    if not _GENERATOR_POWERS:
        p = GENERATOR._ext()
        powers = []
        for _ in range(L.bit_length()):
            powers.append(p)
            p = _ext_double(p)
        _GENERATOR_POWERS.extend(powers)
    acc = _EXT_IDENTITY
    i = 0
    while n:
        if n & 1:
            acc = _ext_add(acc, _GENERATOR_POWERS[i])
        n >>= 1
        i += 1
    return acc


def generator_multiples(start: int, count: int) -> List[Point]:
    """[start*G, (start+1)*G, ...] with a single batched normalization."""
    p = _generator_mul(start % L)
    g = GENERATOR._ext()
    ext = []
    for _ in range(count):
        ext.append(p)
        p = _ext_add(p, g)
    return batch_normalize(ext)


def batch_normalize(points: Sequence[_Ext]) -> List[Point]:
    zs = field.batch_inverse([p[3] for p in points])
    return [Point(p[0] * zi % R, p[1] * zi % R) for p, zi in zip(points, zs)]
