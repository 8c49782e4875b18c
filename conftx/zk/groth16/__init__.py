"""
ConfTx Groth16 Proof System (BN254)
"""

from conftx.zk.groth16.keys import PreparedVerifyingKey, ProvingKey, VerifyingKey
from conftx.zk.groth16.proof import Proof
from conftx.zk.groth16.setup import ReferenceString, generate_parameters, setup
from conftx.zk.groth16.prover import create_proof, prove_assignment, synthesize_witness
from conftx.zk.groth16.verifier import verify_proof

__all__ = [
    "PreparedVerifyingKey",
    "ProvingKey",
    "VerifyingKey",
    "Proof",
    "ReferenceString",
    "generate_parameters",
    "setup",
    "create_proof",
    "prove_assignment",
    "synthesize_witness",
    "verify_proof",
]
