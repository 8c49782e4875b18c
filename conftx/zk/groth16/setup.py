"""
ConfTx Groth16 Setup

The reference string is the trapdoor (tau, alpha, beta, gamma, delta)
together with the largest evaluation domain it was generated for. Keys
are derived from it deterministically: the same string and circuit give
the same keys.

Anyone holding the trapdoor can forge proofs. setup() never lets it
escape; generate_parameters() is exposed for tests and ceremonies that
manage the string themselves.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import List, Protocol, Tuple

from conftx.constants import DEFAULT_MAX_DEGREE, MAX_DOMAIN_LOG2
from conftx.crypto import field
from conftx.crypto.bn254 import G1, G2, Z1, Z2, FixedBaseTable
from conftx.errors import SetupSizeExceededError
from conftx.zk.domain import EvaluationDomain, domain_size_for
from conftx.zk.groth16.keys import ProvingKey, VerifyingKey
from conftx.zk.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)

R = field.R


class Circuit(Protocol):
    def synthesize(self, cs: ConstraintSystem) -> None: ...


@dataclass(frozen=True)
class ReferenceString:
    """Setup trapdoor with its degree capacity."""
    tau: int
    alpha: int
    beta: int
    gamma: int
    delta: int
    max_degree: int = DEFAULT_MAX_DEGREE

    @classmethod
    def generate(cls, max_degree: int = DEFAULT_MAX_DEGREE) -> ReferenceString:
        rand = field.random_element
        return cls(rand(), rand(), rand(), rand(), rand(), max_degree)

    def __repr__(self) -> str:
        return f"ReferenceString(max_degree={self.max_degree}, trapdoor=<redacted>)"


def required_domain_size(cs: ConstraintSystem) -> int:
    """Domain size for cs: its constraints plus one input constraint per input."""
    return domain_size_for(cs.num_constraints + cs.num_inputs)


def _check_capacity(required: int, srs: ReferenceString) -> None:
    available = min(srs.max_degree, 1 << MAX_DOMAIN_LOG2)
    if required > available:
        logger.error(f"Setup needs domain {required}, reference string supports {available}")
        raise SetupSizeExceededError(required, available)


def _evaluate_qap(
    cs: ConstraintSystem,
    lagrange: List[int],
) -> Tuple[List[int], List[int], List[int]]:
    """
    A_k(tau), B_k(tau), C_k(tau) for every variable k, indexed over the
    full assignment (inputs first, then aux).
    """
    num_inputs = cs.num_inputs
    total = num_inputs + cs.num_aux
    a = [0] * total
    b = [0] * total
    c = [0] * total

    def index(var) -> int:
        return var.index if var.is_input else num_inputs + var.index

    for j, constraint in enumerate(cs.constraints):
        lj = lagrange[j]
        for var, coeff in constraint.a.terms.items():
            a[index(var)] += coeff * lj
        for var, coeff in constraint.b.terms.items():
            b[index(var)] += coeff * lj
        for var, coeff in constraint.c.terms.items():
            c[index(var)] += coeff * lj

    # Input constraints: input_i * 0 = 0, keeping the IC polynomials independent.
    offset = cs.num_constraints
    for i in range(num_inputs):
        a[i] += lagrange[offset + i]

    return [v % R for v in a], [v % R for v in b], [v % R for v in c]


def generate_parameters(circuit: Circuit, srs: ReferenceString, label: bytes = b"") -> ProvingKey:
    """
    Derive the proving key (which embeds the verifying key) for circuit.

    Raises:
        SetupSizeExceededError: the circuit needs a larger domain than the
            reference string supports
    """
    started = time.monotonic()
    cs = ConstraintSystem(with_witness=False)
    circuit.synthesize(cs)
    domain_size = required_domain_size(cs)
    _check_capacity(domain_size, srs)
    logger.info(
        f"Generating parameters: {cs.num_constraints} constraints, "
        f"{cs.num_inputs} inputs, {cs.num_aux} aux, domain {domain_size}"
    )

    domain = EvaluationDomain(domain_size)
    lagrange = domain.lagrange_at(srs.tau)
    a, b, c = _evaluate_qap(cs, lagrange)

    num_inputs = cs.num_inputs
    gamma_inv = pow(srs.gamma, -1, R)
    delta_inv = pow(srs.delta, -1, R)

    def combined(k: int) -> int:
        return (srs.beta * a[k] + srs.alpha * b[k] + c[k]) % R

    ic_scalars = [combined(k) * gamma_inv % R for k in range(num_inputs)]
    l_scalars = [combined(k) * delta_inv % R for k in range(num_inputs, len(a))]

    z_delta = domain.vanishing_at(srs.tau) * delta_inv % R
    h_scalars = []
    power = z_delta
    for _ in range(domain_size - 1):
        h_scalars.append(power)
        power = power * srs.tau % R

    g1 = FixedBaseTable(G1, Z1)
    g2 = FixedBaseTable(G2, Z2)

    vk = VerifyingKey(
        alpha_g1=g1.mul(srs.alpha),
        beta_g1=g1.mul(srs.beta),
        beta_g2=g2.mul(srs.beta),
        gamma_g2=g2.mul(srs.gamma),
        delta_g1=g1.mul(srs.delta),
        delta_g2=g2.mul(srs.delta),
        ic=tuple(g1.mul_many(ic_scalars)),
        circuit_digest=cs.digest(),
        label=label,
    )
    pk = ProvingKey(
        vk=vk,
        a_query=tuple(g1.mul_many(a)),
        b_g1_query=tuple(g1.mul_many(b)),
        b_g2_query=tuple(g2.mul_many(b)),
        h_query=tuple(g1.mul_many(h_scalars)),
        l_query=tuple(g1.mul_many(l_scalars)),
    )
    logger.info(f"Parameters generated in {time.monotonic() - started:.1f}s")
    return pk


def setup(
    circuit: Circuit,
    max_degree: int = DEFAULT_MAX_DEGREE,
    label: bytes = b"",
) -> Tuple[ProvingKey, VerifyingKey]:
    """One-time setup with a fresh reference string that is dropped afterwards."""
    srs = ReferenceString.generate(max_degree)
    pk = generate_parameters(circuit, srs, label)
    del srs
    return pk, pk.vk
