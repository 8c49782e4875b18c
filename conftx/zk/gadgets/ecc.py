"""
ConfTx Baby Jubjub Circuit Gadgets

Twisted Edwards arithmetic in R1CS. Addition uses

    beta  = x1*y2
    gamma = y1*x2
    delta = (-a*x1 + y1) * (x2 + y2)
    tau   = beta*gamma
    x3 = (beta + gamma) / (1 + d*tau)
    y3 = (delta + a*beta - gamma) / (1 - d*tau)

which costs 6 constraints for two variable points and 3 when one of
them is constant. The law is complete on this curve, so denominators
never vanish and doubling is addition with itself.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional, Tuple

from conftx.crypto.jubjub import A, D, Point
from conftx.zk.gadgets.num import Num
from conftx.zk.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)


class EdwardsPoint:
    """Curve point with coordinates as circuit numbers."""

    __slots__ = ("x", "y")

    def __init__(self, x: Num, y: Num):
        self.x = x
        self.y = y

    @classmethod
    def constant(cls, point: Point) -> EdwardsPoint:
        return cls(Num.constant(point.x), Num.constant(point.y))

    @classmethod
    def identity(cls) -> EdwardsPoint:
        return cls.constant(Point.identity())

    @classmethod
    def alloc_input(cls, cs: ConstraintSystem, name: str, point_fn: Callable[[], Point]) -> EdwardsPoint:
        """
        Allocate both coordinates as public inputs, x first.

        Public points are validated (on-curve, subgroup) before they reach
        the verifier, so no curve-membership constraints are added here.
        """
        with cs.namespace(name):
            x = Num.alloc_input(cs, "x", lambda: point_fn().x)
            y = Num.alloc_input(cs, "y", lambda: point_fn().y)
        return cls(x, y)

    def is_constant(self) -> bool:
        return self.x.is_constant() and self.y.is_constant()

    def get_value(self) -> Optional[Tuple[int, int]]:
        if self.x.value is None or self.y.value is None:
            return None
        return self.x.value, self.y.value

    def _as_point(self) -> Point:
        return Point(self.x.lc.constant_value(), self.y.lc.constant_value())

    def _is_constant_identity(self) -> bool:
        return self.is_constant() and self._as_point().is_identity()

    def add(self, cs: ConstraintSystem, name: str, other: EdwardsPoint) -> EdwardsPoint:
        if self._is_constant_identity():
            return other
        if other._is_constant_identity():
            return self
        if self.is_constant() and other.is_constant():
            return EdwardsPoint.constant(self._as_point() + other._as_point())

        with cs.namespace(name):
            x1, y1, x2, y2 = self.x, self.y, other.x, other.y
            beta = x1.mul(cs, "beta", y2)
            gamma = y1.mul(cs, "gamma", x2)
            delta = (y1 - x1.scale(A)).mul(cs, "delta", x2 + y2)
            tau = beta.mul(cs, "tau", gamma)
            x3 = (beta + gamma).div(cs, "x3", tau.scale(D) + 1)
            y3 = (delta + beta.scale(A) - gamma).div(cs, "y3", 1 - tau.scale(D))
        return EdwardsPoint(x3, y3)

    def double(self, cs: ConstraintSystem, name: str) -> EdwardsPoint:
        return self.add(cs, name, self)

    def enforce_equal(self, cs: ConstraintSystem, name: str, other: EdwardsPoint) -> None:
        with cs.namespace(name):
            self.x.enforce_equal(cs, "x", other.x)
            self.y.enforce_equal(cs, "y", other.y)


def select(
    cs: ConstraintSystem,
    name: str,
    bit: Num,
    if_true: EdwardsPoint,
    if_false: EdwardsPoint,
) -> EdwardsPoint:
    """
    bit ? if_true : if_false, as if_false + bit * (if_true - if_false).

    Free when both points are constant, 2 constraints otherwise.
    """
    with cs.namespace(name):
        x = if_false.x + bit.mul(cs, "x", if_true.x - if_false.x)
        y = if_false.y + bit.mul(cs, "y", if_true.y - if_false.y)
    return EdwardsPoint(x, y)


def fixed_base_mul(
    cs: ConstraintSystem,
    name: str,
    bits: List[Num],
    base: Point,
) -> EdwardsPoint:
    """
    sum(b_i * 2^i * base) for a constant base, bits little-endian.

    The first bit is a free selection between constants; every further
    bit costs a constant addition (3) and a selection (2).
    """
    if not bits:
        return EdwardsPoint.identity()
    with cs.namespace(name):
        power = base
        acc = select(cs, "select0", bits[0], EdwardsPoint.constant(power), EdwardsPoint.identity())
        for i in range(1, len(bits)):
            power = power.double()
            added = acc.add(cs, f"add{i}", EdwardsPoint.constant(power))
            acc = select(cs, f"select{i}", bits[i], added, acc)
    return acc


def variable_base_mul(
    cs: ConstraintSystem,
    name: str,
    bits: List[Num],
    base: EdwardsPoint,
) -> EdwardsPoint:
    """
    sum(b_i * 2^i * base) for a point known only to the circuit.

    Most-significant bit first: double, add, select.
    """
    acc = EdwardsPoint.identity()
    with cs.namespace(name):
        for i in range(len(bits) - 1, -1, -1):
            acc = acc.double(cs, f"double{i}")
            added = acc.add(cs, f"add{i}", base)
            acc = select(cs, f"select{i}", bits[i], added, acc)
    return acc
