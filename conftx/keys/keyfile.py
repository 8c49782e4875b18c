"""
ConfTx Encrypted Keyfiles

Decryption keys at rest, encrypted under a password:

    (left, right) = PBKDF2-HMAC-SHA256(password, salt, iters, 32 bytes)
    ciphertext    = AES-128-CTR(left, iv, secret scalar)
    mac           = Keccak-256(right || ciphertext)

Stored as JSON with hex-encoded binary fields.
"""

from __future__ import annotations
import hmac
import json
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from Crypto.Cipher import AES
from Crypto.Hash import SHA256, keccak
from Crypto.Protocol.KDF import PBKDF2

from conftx.constants import (
    DEFAULT_SCALAR_BITS,
    KEYFILE_DKLEN,
    KEYFILE_IV_SIZE,
    KEYFILE_KDF_ITERATIONS,
    KEYFILE_SALT_SIZE,
    KEYFILE_VERSION,
)
from conftx.crypto.elgamal import EncryptionKey
from conftx.errors import ConfTxError, KeyfileError
from conftx.keys.keypair import KeyPair

logger = logging.getLogger(__name__)


def _derive(password: bytes, salt: bytes, iterations: int) -> tuple[bytes, bytes]:
    derived = PBKDF2(password, salt, dkLen=KEYFILE_DKLEN, count=iterations, hmac_hash_module=SHA256)
    half = KEYFILE_DKLEN // 2
    return derived[:half], derived[half:]


def _mac(key: bytes, ciphertext: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=key + ciphertext).digest()


def _ctr(key: bytes, iv: bytes):
    return AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)


@dataclass(frozen=True)
class KeyCiphertext:
    """Password-encrypted secret scalar."""
    ciphertext: bytes
    mac: bytes
    salt: bytes
    iv: bytes
    iterations: int

    @classmethod
    def encrypt(cls, secret: bytes, password: bytes, iterations: int = KEYFILE_KDF_ITERATIONS) -> KeyCiphertext:
        if iterations <= 0:
            raise KeyfileError("iteration count must be positive")
        salt = secrets.token_bytes(KEYFILE_SALT_SIZE)
        iv = secrets.token_bytes(KEYFILE_IV_SIZE)
        enc_key, mac_key = _derive(password, salt, iterations)
        ciphertext = _ctr(enc_key, iv).encrypt(secret)
        return cls(
            ciphertext=ciphertext,
            mac=_mac(mac_key, ciphertext),
            salt=salt,
            iv=iv,
            iterations=iterations,
        )

    def decrypt(self, password: bytes) -> bytes:
        enc_key, mac_key = _derive(password, self.salt, self.iterations)
        if not hmac.compare_digest(_mac(mac_key, self.ciphertext), self.mac):
            raise KeyfileError("invalid password")
        return _ctr(enc_key, self.iv).decrypt(self.ciphertext)

    def to_dict(self) -> dict:
        return {
            "ciphertext": self.ciphertext.hex(),
            "mac": self.mac.hex(),
            "salt": self.salt.hex(),
            "iv": self.iv.hex(),
            "iters": self.iterations,
        }

    @classmethod
    def from_dict(cls, data: dict) -> KeyCiphertext:
        try:
            return cls(
                ciphertext=bytes.fromhex(data["ciphertext"]),
                mac=bytes.fromhex(data["mac"]),
                salt=bytes.fromhex(data["salt"]),
                iv=bytes.fromhex(data["iv"]),
                iterations=int(data["iters"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise KeyfileError(f"malformed encrypted key: {e}") from e


@dataclass(frozen=True)
class KeyFile:
    """
    Named keyfile holding one encrypted decryption key.
    """
    account_name: str
    address: str
    encrypted_key: KeyCiphertext
    scalar_bits: int = DEFAULT_SCALAR_BITS
    version: int = KEYFILE_VERSION

    @classmethod
    def create(
        cls,
        account_name: str,
        keypair: KeyPair,
        password: bytes,
        iterations: int = KEYFILE_KDF_ITERATIONS,
        scalar_bits: int = DEFAULT_SCALAR_BITS,
    ) -> KeyFile:
        encrypted = KeyCiphertext.encrypt(keypair.secret.serialize(), password, iterations)
        return cls(
            account_name=account_name,
            address=keypair.public.hex(),
            encrypted_key=encrypted,
            scalar_bits=scalar_bits,
        )

    def unlock(self, password: bytes) -> KeyPair:
        """
        Decrypt the key pair.

        Raises:
            KeyfileError: wrong password, or the stored key does not match
                the stored address
        """
        secret = self.encrypted_key.decrypt(password)
        try:
            keypair = KeyPair.from_scalar(int.from_bytes(secret, "little"), self.scalar_bits)
        except ConfTxError as e:
            raise KeyfileError("stored secret is not a valid key") from e
        if keypair.public != EncryptionKey.from_hex(self.address):
            raise KeyfileError("stored secret does not match address")
        return keypair

    def to_dict(self) -> dict:
        return {
            "accountName": self.account_name,
            "address": self.address,
            "scalarBits": self.scalar_bits,
            "version": self.version,
            "encryptedKey": self.encrypted_key.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> KeyFile:
        version = data.get("version")
        if version != KEYFILE_VERSION:
            raise KeyfileError(f"unsupported keyfile version: {version}")
        try:
            return cls(
                account_name=data["accountName"],
                address=data["address"],
                encrypted_key=KeyCiphertext.from_dict(data["encryptedKey"]),
                scalar_bits=int(data.get("scalarBits", DEFAULT_SCALAR_BITS)),
                version=version,
            )
        except (KeyError, TypeError) as e:
            raise KeyfileError(f"missing field: {e}") from e

    def save(self, path: Union[str, Path]) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Keyfile for {self.account_name} saved to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> KeyFile:
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
