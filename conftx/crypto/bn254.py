"""
ConfTx BN254 Pairing Groups

Thin layer over py_ecc.optimized_bn128: canonical encodings with
subgroup checks, scalar multiplication that never reduces the scalar
behind the caller's back, Pippenger multi-scalar multiplication and
fixed-base window tables.

Points are py_ecc projective triples (X, Y, Z); infinity has Z == 0.

Encodings:
    G1: 32 bytes, x big-endian, 0x80 = y odd, 0x40 = infinity
    G2: 128 bytes uncompressed x.c0 || x.c1 || y.c0 || y.c1, big-endian,
        0x40 in the first byte = infinity
"""

from __future__ import annotations
import logging
from typing import List, Sequence, Tuple

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    FQ12,
    G1,
    G2,
    Z1,
    Z2,
    add,
    b2,
    double,
    final_exponentiate,
    is_inf,
    is_on_curve,
    neg,
    normalize,
    pairing,
)

from conftx.constants import (
    BIG_ENDIAN,
    FIXED_BASE_WINDOW,
    FR_BITS,
    FR_MODULUS,
    FQ_MODULUS,
    G1_COMPRESSED_SIZE,
    G1_FLAG_INFINITY,
    G1_FLAG_Y_ODD,
    G2_FLAG_INFINITY,
    G2_UNCOMPRESSED_SIZE,
)
from conftx.errors import InvalidEncodingError, SubgroupCheckFailedError

logger = logging.getLogger(__name__)


P = FQ_MODULUS
R = FR_MODULUS

__all__ = [
    "G1", "G2", "Z1", "Z2", "FQ12",
    "add", "double", "neg", "is_inf",
    "g1_mul", "g2_mul", "g1_eq", "g2_eq",
    "encode_g1", "decode_g1", "encode_g2", "decode_g2",
    "msm", "FixedBaseTable", "miller_product", "final_exponentiate",
]


# ==============================================================================
# Scalar multiplication
# ==============================================================================

def _mul(pt, n: int, zero):
    acc = zero
    for i in range(n.bit_length() - 1, -1, -1):
        acc = double(acc)
        if (n >> i) & 1:
            acc = add(acc, pt)
    return acc


def g1_mul(pt, n: int):
    """n * pt in G1 with n reduced modulo r."""
    return _mul(pt, n % R, Z1)


def g2_mul(pt, n: int):
    """n * pt in G2 with n reduced modulo r."""
    return _mul(pt, n % R, Z2)


def _eq(p1, p2) -> bool:
    if is_inf(p1) or is_inf(p2):
        return is_inf(p1) and is_inf(p2)
    x1, y1, z1 = p1
    x2, y2, z2 = p2
    return x1 * z2 == x2 * z1 and y1 * z2 == y2 * z1


g1_eq = _eq
g2_eq = _eq


def _in_subgroup(pt, zero) -> bool:
    return is_inf(_mul(pt, R, zero))


# ==============================================================================
# G1 encoding
# ==============================================================================

def encode_g1(pt) -> bytes:
    """Compress a G1 point to 32 bytes."""
    if is_inf(pt):
        return bytes([G1_FLAG_INFINITY]) + bytes(G1_COMPRESSED_SIZE - 1)
    x, y = normalize(pt)
    out = bytearray(int(x).to_bytes(G1_COMPRESSED_SIZE, BIG_ENDIAN))
    if int(y) & 1:
        out[0] |= G1_FLAG_Y_ODD
    return bytes(out)


def decode_g1(data: bytes):
    """
    Decompress a G1 point.

    G1 has cofactor 1, so an on-curve point is in the subgroup.

    Raises:
        InvalidEncodingError: wrong length, bad flags, non-canonical x,
            or x not on the curve
    """
    if len(data) != G1_COMPRESSED_SIZE:
        raise InvalidEncodingError("g1", f"expected {G1_COMPRESSED_SIZE} bytes")
    flags = data[0] & (G1_FLAG_Y_ODD | G1_FLAG_INFINITY)
    if flags & G1_FLAG_INFINITY:
        if flags & G1_FLAG_Y_ODD or any(data[1:]) or data[0] & ~flags & 0xFF:
            raise InvalidEncodingError("g1", "non-canonical infinity")
        return Z1

    x = int.from_bytes(bytes([data[0] & 0x3F]) + bytes(data[1:]), BIG_ENDIAN)
    if x >= P:
        raise InvalidEncodingError("g1", "x not reduced")
    y2 = (pow(x, 3, P) + 3) % P
    y = pow(y2, (P + 1) >> 2, P)
    if y * y % P != y2:
        raise InvalidEncodingError("g1", "not on curve")
    if (y & 1) != bool(flags & G1_FLAG_Y_ODD):
        y = P - y
    return (FQ(x), FQ(y), FQ.one())


# ==============================================================================
# G2 encoding
# ==============================================================================

def _fq2_coeffs(v) -> Tuple[int, int]:
    return int(v.coeffs[0]) % P, int(v.coeffs[1]) % P


def encode_g2(pt) -> bytes:
    """Serialize a G2 point to 128 bytes."""
    if is_inf(pt):
        return bytes([G2_FLAG_INFINITY]) + bytes(G2_UNCOMPRESSED_SIZE - 1)
    x, y = normalize(pt)
    parts = _fq2_coeffs(x) + _fq2_coeffs(y)
    return b"".join(c.to_bytes(32, BIG_ENDIAN) for c in parts)


def decode_g2(data: bytes, check_subgroup: bool = True):
    """
    Deserialize a G2 point and check it lies in the order-r subgroup.

    check_subgroup=False skips the (slow) subgroup check for points from
    a trusted source such as a locally generated proving key.

    Raises:
        InvalidEncodingError: wrong length, bad flag, unreduced
            coordinate, or off-curve point
        SubgroupCheckFailedError: on the twist but outside the subgroup
    """
    if len(data) != G2_UNCOMPRESSED_SIZE:
        raise InvalidEncodingError("g2", f"expected {G2_UNCOMPRESSED_SIZE} bytes")
    if data[0] & G2_FLAG_INFINITY:
        if data[0] != G2_FLAG_INFINITY or any(data[1:]):
            raise InvalidEncodingError("g2", "non-canonical infinity")
        return Z2

    coords = [int.from_bytes(data[i:i + 32], BIG_ENDIAN) for i in range(0, 128, 32)]
    if any(c >= P for c in coords):
        raise InvalidEncodingError("g2", "coordinate not reduced")
    pt = (FQ2(coords[0:2]), FQ2(coords[2:4]), FQ2.one())
    if not is_on_curve(pt, b2):
        raise InvalidEncodingError("g2", "not on curve")
    if check_subgroup and not _in_subgroup(pt, Z2):
        raise SubgroupCheckFailedError("g2")
    return pt


# ==============================================================================
# Multi-scalar multiplication
# ==============================================================================

def _window_size(n: int) -> int:
    if n < 32:
        return 3
    return max(4, n.bit_length() - 3)


def msm(points: Sequence, scalars: Sequence[int], zero):
    """
    Sum of scalars[i] * points[i] (Pippenger bucket method).

    Zero scalars and points at infinity are skipped, and the number of
    windows follows the largest scalar, so bit-valued witnesses are cheap.
    """
    pairs = []
    max_bits = 0
    for pt, s in zip(points, scalars):
        s %= R
        if s == 0 or is_inf(pt):
            continue
        pairs.append((pt, s))
        max_bits = max(max_bits, s.bit_length())
    if not pairs:
        return zero

    c = _window_size(len(pairs))
    mask = (1 << c) - 1
    num_windows = (max_bits + c - 1) // c

    result = zero
    for w in range(num_windows - 1, -1, -1):
        for _ in range(c):
            result = double(result)
        shift = w * c
        buckets = [None] * mask
        for pt, s in pairs:
            idx = (s >> shift) & mask
            if idx:
                slot = buckets[idx - 1]
                buckets[idx - 1] = pt if slot is None else add(slot, pt)
        running = zero
        window_sum = zero
        for bucket in reversed(buckets):
            if bucket is not None:
                running = add(running, bucket)
            window_sum = add(window_sum, running)
        result = add(result, window_sum)
    return result


class FixedBaseTable:
    """
    Window table for many multiplications of one base point.

    table[w][j] = j * 2^(w*window) * base. A multiplication then costs one
    addition per window.
    """

    def __init__(self, base, zero, window: int = FIXED_BASE_WINDOW, scalar_bits: int = FR_BITS):
        self.window = window
        self.zero = zero
        self.num_windows = (scalar_bits + window - 1) // window
        self.table: List[List] = []
        width = 1 << window
        current = base
        for _ in range(self.num_windows):
            row = [zero]
            acc = zero
            for _ in range(1, width):
                acc = add(acc, current)
                row.append(acc)
            self.table.append(row)
            for _ in range(window):
                current = double(current)

    def mul(self, n: int):
        n %= R
        mask = (1 << self.window) - 1
        acc = self.zero
        w = 0
        while n:
            idx = n & mask
            if idx:
                acc = add(acc, self.table[w][idx])
            n >>= self.window
            w += 1
        return acc

    def mul_many(self, scalars: Sequence[int]) -> List:
        return [self.mul(s) for s in scalars]


# ==============================================================================
# Pairings
# ==============================================================================

def miller_product(pairs: Sequence[Tuple]) -> FQ12:
    """
    Product of Miller loops over (G1, G2) pairs, without the final
    exponentiation. Pairs with a point at infinity contribute 1.
    """
    result = FQ12.one()
    for p1, q2 in pairs:
        result = result * pairing(q2, p1, final_exponentiate=False)
    return result


def pairing_gt(p1, q2) -> FQ12:
    """Full pairing e(p1, q2) in GT."""
    return final_exponentiate(miller_product([(p1, q2)]))
