"""
ConfTx Boolean and Fixed-Width Integer Gadgets

UInt is the circuit-side fixed-width unsigned integer: `width` boolean
variables in little-endian order. Allocating one is the range check
0 <= value < 2^width.
"""

from __future__ import annotations
from typing import Callable, List, Optional

from conftx.errors import SynthesisError
from conftx.zk.gadgets.num import Num
from conftx.zk.r1cs import ONE, ConstraintSystem, LinearCombination


def alloc_bit(cs: ConstraintSystem, name: str, value_fn: Callable[[], int]) -> Num:
    """Allocate a variable constrained to 0 or 1: (1 - b) * b = 0."""
    bit = Num.alloc(cs, name, value_fn)
    cs.enforce(f"{name}_boolean", ONE - bit.lc, bit.lc, LinearCombination.zero())
    return bit


class UInt:
    """Unsigned integer of fixed width in a circuit."""

    def __init__(self, bits: List[Num]):
        if not bits:
            raise SynthesisError("UInt needs at least one bit")
        self.bits = bits

    @property
    def width(self) -> int:
        return len(self.bits)

    @classmethod
    def alloc(
        cls,
        cs: ConstraintSystem,
        name: str,
        value_fn: Callable[[], int],
        width: int,
    ) -> UInt:
        """
        Allocate width bits of value_fn().

        Values outside [0, 2^width) are truncated to their low bits, which
        leaves the circuit unsatisfied wherever the full value is used.
        """
        value: Optional[int] = value_fn() if cs.with_witness else None
        bits = []
        with cs.namespace(name):
            for i in range(width):
                bits.append(alloc_bit(cs, f"b{i}", lambda i=i: (value >> i) & 1))
        return cls(bits)

    @property
    def value(self) -> Optional[int]:
        total = 0
        for i, bit in enumerate(self.bits):
            if bit.value is None:
                return None
            total |= bit.value << i
        return total

    def packed(self) -> Num:
        """sum(2^i * b_i) as a linear combination."""
        lc = LinearCombination.zero()
        for i, bit in enumerate(self.bits):
            lc = lc + bit.lc * (1 << i)
        return Num(lc, self.value)
