"""
ConfTx: Confidential Transfers

Account balances held as additively homomorphic ElGamal ciphertexts on
Baby Jubjub; every transfer carries a Groth16 proof over BN254 that it
preserves value and leaves the sender solvent.
"""

__version__ = "0.1.0"
__author__ = "ConfTx Team"

from conftx.crypto.elgamal import (
    Ciphertext,
    DecryptionKey,
    EncryptionKey,
    add,
    decrypt_bounded,
    encrypt,
    sub,
)
from conftx.keys import KeyPair
from conftx.transfer import (
    CircuitParams,
    TransferStatement,
    TransferWitness,
    build_transfer,
    prove,
    setup,
    verify,
)
from conftx.state import Ledger, TransferReceipt

__all__ = [
    "Ciphertext",
    "DecryptionKey",
    "EncryptionKey",
    "add",
    "decrypt_bounded",
    "encrypt",
    "sub",
    "KeyPair",
    "CircuitParams",
    "TransferStatement",
    "TransferWitness",
    "build_transfer",
    "prove",
    "setup",
    "verify",
    "Ledger",
    "TransferReceipt",
    "__version__",
]
