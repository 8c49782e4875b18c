"""
ConfTx Cryptographic Primitives
"""

from conftx.crypto.jubjub import Point, Scalar, GENERATOR
from conftx.crypto.elgamal import (
    Ciphertext,
    DecryptionKey,
    EncryptionKey,
    add,
    decrypt_bounded,
    encrypt,
    sub,
)
from conftx.crypto.hash import sha3_256, tagged_hash

__all__ = [
    # Curve
    "Point",
    "Scalar",
    "GENERATOR",
    # Encryption
    "Ciphertext",
    "DecryptionKey",
    "EncryptionKey",
    "encrypt",
    "decrypt_bounded",
    "add",
    "sub",
    # Hashing
    "sha3_256",
    "tagged_hash",
]
