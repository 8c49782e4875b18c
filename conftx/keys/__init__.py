"""
ConfTx Key Management
"""

from conftx.keys.keypair import KeyPair
from conftx.keys.keyfile import KeyCiphertext, KeyFile

__all__ = [
    "KeyPair",
    "KeyCiphertext",
    "KeyFile",
]
