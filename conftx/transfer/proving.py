"""
ConfTx Transfer Proofs

setup, prove and verify for the confidential transfer circuit. Keys
carry the circuit parameters in their label, so prove and verify need
nothing but the key.
"""

from __future__ import annotations
import logging
from typing import Tuple, Union

from conftx.constants import DEFAULT_MAX_DEGREE, NUM_PUBLIC_INPUTS
from conftx.errors import CircuitMismatchError, ConfTxError, UnsatisfiedWitnessError
from conftx.transfer.circuit import CircuitParams, ConfidentialTransferCircuit
from conftx.transfer.statement import TransferStatement, TransferWitness
from conftx.zk.groth16 import (
    PreparedVerifyingKey,
    Proof,
    ProvingKey,
    VerifyingKey,
    prove_assignment,
    synthesize_witness,
    verify_proof,
)
from conftx.zk.groth16 import setup as groth16_setup

logger = logging.getLogger(__name__)

AnyVerifyingKey = Union[VerifyingKey, PreparedVerifyingKey]


def setup(
    params: CircuitParams = CircuitParams(),
    max_degree: int = DEFAULT_MAX_DEGREE,
) -> Tuple[ProvingKey, VerifyingKey]:
    """
    Generate transfer keys for params.

    Raises:
        SetupSizeExceededError: the circuit does not fit max_degree
    """
    logger.info(f"Running transfer setup (value_bits={params.value_bits}, scalar_bits={params.scalar_bits})")
    return groth16_setup(ConfidentialTransferCircuit(params), max_degree, params.label())


def key_params(key: Union[ProvingKey, AnyVerifyingKey]) -> CircuitParams:
    """Circuit parameters a key was generated for."""
    vk = key.vk if isinstance(key, ProvingKey) else key
    try:
        return CircuitParams.from_label(vk.label)
    except ConfTxError as e:
        raise CircuitMismatchError("key was not generated for the transfer circuit") from e


def prove(
    witness: TransferWitness,
    statement: TransferStatement,
    proving_key: ProvingKey,
) -> Proof:
    """
    Prove that witness satisfies the transfer circuit for statement.

    The assignment is checked locally first, so an invalid transfer is
    refused here rather than producing a proof that fails on the network.

    Raises:
        UnsatisfiedWitnessError: some constraint fails; only its path is
            reported
        CircuitMismatchError: the key belongs to a different circuit
    """
    params = key_params(proving_key)
    cs = synthesize_witness(ConfidentialTransferCircuit(params, statement, witness))
    failed = cs.which_is_unsatisfied()
    if failed is not None:
        logger.warning(f"Refusing to prove unsatisfied transfer (constraint {failed})")
        raise UnsatisfiedWitnessError(failed)
    return prove_assignment(cs, proving_key)


def verify(
    proof: Union[Proof, bytes],
    statement: Union[TransferStatement, bytes],
    verifying_key: AnyVerifyingKey,
) -> bool:
    """
    Verify a transfer proof.

    Returns False, never raises, on malformed proof or statement bytes,
    points outside the subgroup, a key for another circuit, or a failed
    pairing check.
    """
    try:
        if not isinstance(proof, Proof):
            proof = Proof.from_bytes(bytes(proof))
        if not isinstance(statement, TransferStatement):
            statement = TransferStatement.from_bytes(bytes(statement))
    except (ConfTxError, ValueError) as e:
        logger.debug(f"Rejecting malformed transfer: {e}")
        return False

    if verifying_key.num_public_inputs != NUM_PUBLIC_INPUTS:
        logger.debug("Verifying key has the wrong number of public inputs")
        return False
    try:
        key_params(verifying_key)
    except CircuitMismatchError:
        logger.debug("Verifying key is not a transfer circuit key")
        return False

    return verify_proof(verifying_key, proof, statement.public_inputs())
