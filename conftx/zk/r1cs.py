"""
ConfTx Rank-1 Constraint Systems

A constraint is <A, z> * <B, z> = <C, z> over Fr, where z is the full
assignment: the constant ONE, then the public inputs, then the private
(auxiliary) variables.

The same ConstraintSystem class serves key generation, where no values
are known, and proving, where every allocation carries a value. Value
callbacks are only invoked in witness mode, so circuits are written
once and synthesized in both modes.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from conftx.crypto.field import R
from conftx.crypto.hash import HashBuilder
from conftx.errors import SynthesisError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Variable:
    """Index into the input or auxiliary part of the assignment."""
    index: int
    is_input: bool

    def __repr__(self) -> str:
        return f"{'input' if self.is_input else 'aux'}[{self.index}]"


ONE = Variable(0, True)

Term = Union["LinearCombination", Variable, int]


class LinearCombination:
    """
    Sum of coefficient * variable, coefficients reduced mod r.

    Immutable: every operator returns a new combination.
    """

    __slots__ = ("terms",)

    def __init__(self, terms: Optional[Dict[Variable, int]] = None):
        self.terms: Dict[Variable, int] = {}
        if terms:
            for var, coeff in terms.items():
                coeff %= R
                if coeff:
                    self.terms[var] = coeff

    @classmethod
    def zero(cls) -> LinearCombination:
        return cls()

    @classmethod
    def constant(cls, value: int) -> LinearCombination:
        return cls({ONE: value})

    @classmethod
    def of(cls, term: Term) -> LinearCombination:
        if isinstance(term, LinearCombination):
            return term
        if isinstance(term, Variable):
            return cls({term: 1})
        return cls.constant(term)

    def __add__(self, other: Term) -> LinearCombination:
        other = LinearCombination.of(other)
        merged = dict(self.terms)
        for var, coeff in other.terms.items():
            merged[var] = merged.get(var, 0) + coeff
        return LinearCombination(merged)

    __radd__ = __add__

    def __neg__(self) -> LinearCombination:
        return LinearCombination({v: -c for v, c in self.terms.items()})

    def __sub__(self, other: Term) -> LinearCombination:
        return self + (-LinearCombination.of(other))

    def __rsub__(self, other: Term) -> LinearCombination:
        return LinearCombination.of(other) - self

    def __mul__(self, scalar: int) -> LinearCombination:
        return LinearCombination({v: c * scalar for v, c in self.terms.items()})

    __rmul__ = __mul__

    def is_constant(self) -> bool:
        return all(var == ONE for var in self.terms)

    def constant_value(self) -> int:
        return self.terms.get(ONE, 0)

    def evaluate(self, inputs: List[int], aux: List[int]) -> int:
        total = 0
        for var, coeff in self.terms.items():
            total += coeff * (inputs[var.index] if var.is_input else aux[var.index])
        return total % R

    def sorted_terms(self) -> List[Tuple[Variable, int]]:
        return sorted(self.terms.items(), key=lambda t: (not t[0].is_input, t[0].index))

    def __repr__(self) -> str:
        return f"LC({len(self.terms)} terms)"


@dataclass(frozen=True, slots=True)
class Constraint:
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    annotation: str


class ConstraintSystem:
    """
    Constraint collector and (optionally) witness holder.

    Args:
        with_witness: evaluate value callbacks and keep the assignment
    """

    def __init__(self, with_witness: bool = True):
        self.with_witness = with_witness
        self.inputs: List[Optional[int]] = [1]
        self.aux: List[Optional[int]] = []
        self.input_names: List[str] = ["ONE"]
        self.aux_names: List[str] = []
        self.constraints: List[Constraint] = []
        self._path: List[str] = []

    # --------------------------------------------------------------------------
    # Namespaces
    # --------------------------------------------------------------------------

    @contextmanager
    def namespace(self, name: str) -> Iterator["ConstraintSystem"]:
        if "/" in name:
            raise SynthesisError(f"namespace name may not contain '/': {name}")
        self._path.append(name)
        try:
            yield self
        finally:
            self._path.pop()

    def _full_name(self, name: str) -> str:
        return "/".join(self._path + [name])

    # --------------------------------------------------------------------------
    # Allocation
    # --------------------------------------------------------------------------

    def _evaluate(self, name: str, value_fn: Callable[[], int]) -> Optional[int]:
        if not self.with_witness:
            return None
        value = value_fn()
        if value is None:
            raise SynthesisError(f"missing assignment for {self._full_name(name)}")
        return value % R

    def alloc(self, name: str, value_fn: Callable[[], int]) -> Variable:
        """Allocate a private variable."""
        self.aux.append(self._evaluate(name, value_fn))
        self.aux_names.append(self._full_name(name))
        return Variable(len(self.aux) - 1, False)

    def alloc_input(self, name: str, value_fn: Callable[[], int]) -> Variable:
        """Allocate a public input."""
        self.inputs.append(self._evaluate(name, value_fn))
        self.input_names.append(self._full_name(name))
        return Variable(len(self.inputs) - 1, True)

    def enforce(self, name: str, a: Term, b: Term, c: Term) -> None:
        """Add the constraint a * b = c."""
        self.constraints.append(Constraint(
            LinearCombination.of(a),
            LinearCombination.of(b),
            LinearCombination.of(c),
            self._full_name(name),
        ))

    # --------------------------------------------------------------------------
    # Inspection
    # --------------------------------------------------------------------------

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def num_inputs(self) -> int:
        """Number of inputs including the constant ONE."""
        return len(self.inputs)

    @property
    def num_aux(self) -> int:
        return len(self.aux)

    def value(self, var: Variable) -> Optional[int]:
        return self.inputs[var.index] if var.is_input else self.aux[var.index]

    def assignment(self) -> Tuple[List[int], List[int]]:
        if not self.with_witness:
            raise SynthesisError("constraint system has no witness")
        return list(self.inputs), list(self.aux)

    def public_inputs(self) -> List[int]:
        """Public input values without the leading ONE."""
        inputs, _ = self.assignment()
        return inputs[1:]

    def which_is_unsatisfied(self) -> Optional[str]:
        """Annotation of the first violated constraint, or None."""
        inputs, aux = self.assignment()
        for constraint in self.constraints:
            a = constraint.a.evaluate(inputs, aux)
            b = constraint.b.evaluate(inputs, aux)
            c = constraint.c.evaluate(inputs, aux)
            if a * b % R != c:
                return constraint.annotation
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None

    def digest(self) -> bytes:
        """
        Structural hash of the constraint system.

        Covers sizes and every coefficient, not annotations or values, so
        key-generation and proving synthesis of the same circuit agree.
        """
        builder = HashBuilder()
        builder.update_u32(self.num_inputs).update_u32(self.num_aux).update_u32(self.num_constraints)
        for constraint in self.constraints:
            for lc in (constraint.a, constraint.b, constraint.c):
                terms = lc.sorted_terms()
                builder.update_u32(len(terms))
                for var, coeff in terms:
                    builder.update(b"\x01" if var.is_input else b"\x00")
                    builder.update_u32(var.index)
                    builder.update_int(coeff)
        return builder.finalize().data
