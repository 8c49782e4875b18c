"""
ConfTx Confidential Transfers

Transfer statement, circuit, builder and the setup/prove/verify API.
"""

from conftx.transfer.statement import TransferStatement, TransferWitness
from conftx.transfer.circuit import CircuitParams, ConfidentialTransferCircuit
from conftx.transfer.builder import build_transfer
from conftx.transfer.proving import key_params, prove, setup, verify

__all__ = [
    "TransferStatement",
    "TransferWitness",
    "CircuitParams",
    "ConfidentialTransferCircuit",
    "build_transfer",
    "key_params",
    "prove",
    "setup",
    "verify",
]
