"""
ConfTx Groth16 Verifier

Accepts iff

    e(A, B) * e(IC, -gamma) * e(C, -delta) == e(alpha, beta)

with IC = ic[0] + sum(x_i * ic[i]) over the public inputs x.
"""

from __future__ import annotations
import logging
from typing import Sequence, Union

from conftx.crypto import field
from conftx.crypto.bn254 import Z1, add, final_exponentiate, miller_product, msm
from conftx.zk.groth16.keys import PreparedVerifyingKey, VerifyingKey
from conftx.zk.groth16.proof import Proof

logger = logging.getLogger(__name__)


def verify_proof(
    vk: Union[PreparedVerifyingKey, VerifyingKey],
    proof: Proof,
    public_inputs: Sequence[int],
) -> bool:
    """
    Check a proof against public inputs.

    Returns False on an input count mismatch or unreduced input; never
    raises for well-typed arguments.
    """
    pvk = vk if isinstance(vk, PreparedVerifyingKey) else vk.prepare()
    if len(public_inputs) != pvk.num_public_inputs:
        logger.debug(
            f"Public input count {len(public_inputs)} != {pvk.num_public_inputs}"
        )
        return False
    if any(not 0 <= x < field.R for x in public_inputs):
        logger.debug("Public input not reduced")
        return False

    acc = add(pvk.ic[0], msm(pvk.ic[1:], public_inputs, Z1))
    f = miller_product([
        (proof.a, proof.b),
        (acc, pvk.neg_gamma_g2),
        (proof.c, pvk.neg_delta_g2),
    ])
    return final_exponentiate(f) == pvk.alpha_beta
