"""
ConfTx Circuit Gadgets
"""

from conftx.zk.gadgets.num import Num
from conftx.zk.gadgets.boolean import UInt, alloc_bit
from conftx.zk.gadgets.ecc import (
    EdwardsPoint,
    fixed_base_mul,
    select,
    variable_base_mul,
)

__all__ = [
    "Num",
    "UInt",
    "alloc_bit",
    "EdwardsPoint",
    "fixed_base_mul",
    "select",
    "variable_base_mul",
]
