"""
ConfTx Account Store

Encrypted account balances with optimistic per-account versioning.
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from conftx.constants import CIPHERTEXT_SIZE, POINT_SIZE
from conftx.core.serialization import ByteReader, ByteWriter
from conftx.crypto.elgamal import Ciphertext, EncryptionKey
from conftx.errors import InvalidParameterError

logger = logging.getLogger(__name__)

ACCOUNT_SIZE = POINT_SIZE + CIPHERTEXT_SIZE + 8 + 8


@dataclass(frozen=True, slots=True)
class Account:
    """
    Account state.

    balance is the ElGamal encryption of the spendable amount under
    encryption_key; nonce counts applied transfers; version changes on
    every commit and guards concurrent updates.

    SIZE: 112 bytes
    SERIALIZATION: key (32) || balance (64) || nonce (u64) || version (u64)
    """
    encryption_key: EncryptionKey
    balance: Ciphertext = field(default_factory=Ciphertext.zero)
    nonce: int = 0
    version: int = 0

    def __post_init__(self):
        if self.nonce < 0:
            raise ValueError(f"nonce must be non-negative, got {self.nonce}")
        if self.version < 0:
            raise ValueError(f"version must be non-negative, got {self.version}")

    @property
    def key_bytes(self) -> bytes:
        return self.encryption_key.serialize()

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_raw(self.encryption_key.serialize())
        writer.write_raw(self.balance.serialize())
        writer.write_u64(self.nonce)
        writer.write_u64(self.version)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Account, int]:
        """Deserialize, return (Account, bytes_consumed)."""
        reader = ByteReader(bytes(data[offset:offset + ACCOUNT_SIZE]), "account")
        key, _ = EncryptionKey.deserialize(reader.read_fixed_bytes(POINT_SIZE))
        balance, _ = Ciphertext.deserialize(reader.read_fixed_bytes(CIPHERTEXT_SIZE))
        nonce = reader.read_u64()
        version = reader.read_u64()
        return cls(key, balance, nonce, version), ACCOUNT_SIZE


# Commit entry: (version the update was computed from, or None for a new
# account; the new account state)
Update = Tuple[Optional[int], Account]


class AccountStore:
    """
    Thread-safe account map.

    Readers get immutable snapshots. Writers compute new states from a
    snapshot and hand them to commit(), which applies all of them or
    none, and only if no touched account changed since the snapshot.
    """

    def __init__(self):
        self._accounts: Dict[bytes, Account] = {}
        self._lock = threading.Lock()

    def get(self, key: EncryptionKey) -> Optional[Account]:
        """Get account snapshot by encryption key."""
        with self._lock:
            return self._accounts.get(key.serialize())

    def exists(self, key: EncryptionKey) -> bool:
        with self._lock:
            return key.serialize() in self._accounts

    def create(self, key: EncryptionKey, balance: Optional[Ciphertext] = None) -> Account:
        """
        Create an account with nonce 0.

        Raises:
            InvalidParameterError: account already exists
        """
        account = Account(key, balance if balance is not None else Ciphertext.zero())
        with self._lock:
            if account.key_bytes in self._accounts:
                raise InvalidParameterError("key", "account already exists")
            self._accounts[account.key_bytes] = account
        logger.debug(f"Created account {key.hex()[:16]}")
        return account

    def commit(self, updates: Iterable[Update]) -> bool:
        """
        Atomically apply updates.

        Each entry names the version it was computed from (None for an
        account that did not exist). If any current version differs the
        store is left untouched and False is returned; otherwise every
        account is written with its version advanced.
        """
        updates = list(updates)
        with self._lock:
            for expected, account in updates:
                current = self._accounts.get(account.key_bytes)
                if expected is None:
                    if current is not None:
                        return False
                elif current is None or current.version != expected:
                    return False

            for expected, account in updates:
                version = 0 if expected is None else expected + 1
                self._accounts[account.key_bytes] = replace(account, version=version)
        return True

    def keys(self) -> List[EncryptionKey]:
        with self._lock:
            return [account.encryption_key for account in self._accounts.values()]

    def __iter__(self) -> Iterator[Account]:
        with self._lock:
            return iter(list(self._accounts.values()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)

    def to_dict(self) -> Dict[str, dict]:
        """Export accounts as {key_hex: {"balance": hex, "nonce": n}}."""
        return {
            account.encryption_key.hex(): {
                "balance": account.balance.serialize().hex(),
                "nonce": account.nonce,
            }
            for account in self
        }

    @classmethod
    def from_dict(cls, data: Dict[str, dict]) -> AccountStore:
        """Import accounts from dictionary."""
        store = cls()
        for key_hex, account_data in data.items():
            key = EncryptionKey.from_hex(key_hex)
            balance, _ = Ciphertext.deserialize(bytes.fromhex(account_data["balance"]))
            account = Account(key, balance, account_data.get("nonce", 0))
            store._accounts[account.key_bytes] = account
        logger.debug(f"Imported {len(store)} accounts")
        return store
