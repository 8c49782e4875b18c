"""
ConfTx Zero-Knowledge Layer

R1CS construction, circuit gadgets, evaluation domains and Groth16.
"""

from conftx.zk.r1cs import ONE, ConstraintSystem, LinearCombination, Variable
from conftx.zk.domain import EvaluationDomain

__all__ = [
    "ONE",
    "ConstraintSystem",
    "LinearCombination",
    "Variable",
    "EvaluationDomain",
]
