"""
ConfTx Groth16 Prover

    A = alpha + sum(z_k A_k) + r*delta
    B = beta  + sum(z_k B_k) + s*delta
    C = sum_aux(z_k L_k) + sum(h_i H_i) + s*A + r*B_g1 - r*s*delta

r and s are drawn fresh from the OS CSPRNG on every call. Two proofs
sharing blinding factors leak the witness, so there is no way to pass
them in.
"""

from __future__ import annotations
import logging
import time
from typing import List

from conftx.crypto import field
from conftx.crypto.bn254 import Z1, Z2, add, g1_mul, g2_mul, msm, neg
from conftx.errors import CircuitMismatchError
from conftx.zk.domain import EvaluationDomain
from conftx.zk.groth16.keys import ProvingKey
from conftx.zk.groth16.proof import Proof
from conftx.zk.groth16.setup import Circuit, required_domain_size
from conftx.zk.r1cs import ConstraintSystem

logger = logging.getLogger(__name__)

R = field.R


def synthesize_witness(circuit: Circuit) -> ConstraintSystem:
    """Run the circuit with values; the result can be checked before proving."""
    cs = ConstraintSystem(with_witness=True)
    circuit.synthesize(cs)
    return cs


def compute_h(cs: ConstraintSystem, domain: EvaluationDomain) -> List[int]:
    """
    Coefficients of h(X) = (a(X) b(X) - c(X)) / Z(X), degree < n - 1.

    a, b, c are interpolated from their values on the domain and
    re-evaluated on a coset, where Z is a non-zero constant.
    """
    inputs, aux = cs.assignment()
    a_vals, b_vals, c_vals = [], [], []
    for constraint in cs.constraints:
        a_vals.append(constraint.a.evaluate(inputs, aux))
        b_vals.append(constraint.b.evaluate(inputs, aux))
        c_vals.append(constraint.c.evaluate(inputs, aux))
    # input constraints
    a_vals.extend(inputs)

    a = domain.coset_fft(domain.ifft(a_vals))
    b = domain.coset_fft(domain.ifft(b_vals))
    c = domain.coset_fft(domain.ifft(c_vals))
    z_inv = domain.vanishing_on_coset_inv()
    h = [(ai * bi - ci) * z_inv % R for ai, bi, ci in zip(a, b, c)]
    return domain.icoset_fft(h)[:domain.size - 1]


def prove_assignment(cs: ConstraintSystem, pk: ProvingKey) -> Proof:
    """
    Groth16 proof for a synthesized witness.

    Raises:
        CircuitMismatchError: the constraint system is not the one the
            key was generated for
    """
    if cs.digest() != pk.vk.circuit_digest:
        raise CircuitMismatchError("constraint system digest differs from proving key")
    domain_size = required_domain_size(cs)
    if domain_size != pk.domain_size:
        raise CircuitMismatchError(f"domain {domain_size} != key domain {pk.domain_size}")

    started = time.monotonic()
    domain = EvaluationDomain(domain_size)
    h = compute_h(cs, domain)
    inputs, aux = cs.assignment()
    z = inputs + aux

    r = field.random_element()
    s = field.random_element()
    vk = pk.vk

    a_g1 = add(add(vk.alpha_g1, msm(pk.a_query, z, Z1)), g1_mul(vk.delta_g1, r))
    b_g2 = add(add(vk.beta_g2, msm(pk.b_g2_query, z, Z2)), g2_mul(vk.delta_g2, s))
    b_g1 = add(add(vk.beta_g1, msm(pk.b_g1_query, z, Z1)), g1_mul(vk.delta_g1, s))

    c_g1 = add(msm(pk.l_query, aux, Z1), msm(pk.h_query, h, Z1))
    c_g1 = add(c_g1, g1_mul(a_g1, s))
    c_g1 = add(c_g1, g1_mul(b_g1, r))
    c_g1 = add(c_g1, neg(g1_mul(vk.delta_g1, r * s)))

    logger.debug(f"Proof created in {time.monotonic() - started:.1f}s")
    return Proof(a_g1, b_g2, c_g1)


def create_proof(circuit: Circuit, pk: ProvingKey) -> Proof:
    """
    Synthesize circuit with its witness and prove it.

    No satisfiability check happens here; an unsatisfied assignment
    yields a proof that does not verify.
    """
    return prove_assignment(synthesize_witness(circuit), pk)
