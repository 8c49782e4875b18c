"""
ConfTx Circuit Numbers

A Num is a linear combination together with its value when the
constraint system carries a witness. Linear operations are free; only
multiplication of two non-constant Nums costs a constraint.
"""

from __future__ import annotations
from typing import Callable, Optional, Union

from conftx.crypto.field import R
from conftx.errors import SynthesisError
from conftx.zk.r1cs import ONE, ConstraintSystem, LinearCombination


def _lift(a: Optional[int], b: Optional[int], op: Callable[[int, int], int]) -> Optional[int]:
    if a is None or b is None:
        return None
    return op(a, b) % R


class Num:
    """Field element inside a circuit."""

    __slots__ = ("lc", "value")

    def __init__(self, lc: LinearCombination, value: Optional[int]):
        self.lc = lc
        self.value = None if value is None else value % R

    @classmethod
    def constant(cls, value: int) -> Num:
        return cls(LinearCombination.constant(value), value)

    @classmethod
    def alloc(cls, cs: ConstraintSystem, name: str, value_fn: Callable[[], int]) -> Num:
        var = cs.alloc(name, value_fn)
        return cls(LinearCombination.of(var), cs.value(var))

    @classmethod
    def alloc_input(cls, cs: ConstraintSystem, name: str, value_fn: Callable[[], int]) -> Num:
        var = cs.alloc_input(name, value_fn)
        return cls(LinearCombination.of(var), cs.value(var))

    def get_value(self) -> int:
        if self.value is None:
            raise SynthesisError("value requested during key generation")
        return self.value

    def is_constant(self) -> bool:
        return self.lc.is_constant()

    def __add__(self, other: Union[Num, int]) -> Num:
        other = _as_num(other)
        return Num(self.lc + other.lc, _lift(self.value, other.value, lambda a, b: a + b))

    __radd__ = __add__

    def __sub__(self, other: Union[Num, int]) -> Num:
        other = _as_num(other)
        return Num(self.lc - other.lc, _lift(self.value, other.value, lambda a, b: a - b))

    def __rsub__(self, other: int) -> Num:
        return _as_num(other) - self

    def __neg__(self) -> Num:
        return Num(-self.lc, None if self.value is None else -self.value)

    def scale(self, k: int) -> Num:
        return Num(self.lc * k, None if self.value is None else self.value * k)

    def mul(self, cs: ConstraintSystem, name: str, other: Num) -> Num:
        """Product; free when either side is constant."""
        if self.is_constant():
            return other.scale(self.lc.constant_value())
        if other.is_constant():
            return self.scale(other.lc.constant_value())
        product = Num.alloc(cs, name, lambda: self.get_value() * other.get_value())
        cs.enforce(name, self.lc, other.lc, product.lc)
        return product

    def div(self, cs: ConstraintSystem, name: str, denominator: Num) -> Num:
        """
        self / denominator, enforced as quotient * denominator = self.

        The caller guarantees the denominator is non-zero.
        """
        quotient = Num.alloc(
            cs, name,
            lambda: self.get_value() * pow(denominator.get_value(), -1, R),
        )
        cs.enforce(name, quotient.lc, denominator.lc, self.lc)
        return quotient

    def enforce_equal(self, cs: ConstraintSystem, name: str, other: Num) -> None:
        cs.enforce(name, self.lc - other.lc, ONE, LinearCombination.zero())


def _as_num(x: Union[Num, int]) -> Num:
    return x if isinstance(x, Num) else Num.constant(x)
