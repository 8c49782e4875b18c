"""
ConfTx Genesis

Initial encrypted balances and ledger construction.

Genesis balances are public, so they are encrypted with randomness 1:
any node rebuilding genesis from the same allocations gets identical
ciphertexts and the same genesis root.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from conftx.core.types import Hash
from conftx.crypto.elgamal import Ciphertext, EncryptionKey, encrypt
from conftx.crypto.hash import HashBuilder
from conftx.crypto.jubjub import Scalar
from conftx.errors import InvalidParameterError
from conftx.node.config import LedgerConfig
from conftx.state.accounts import AccountStore
from conftx.state.machine import Ledger
from conftx.zk.groth16 import PreparedVerifyingKey, VerifyingKey

logger = logging.getLogger(__name__)

GENESIS_RANDOMNESS = Scalar.from_int(1)


@dataclass(frozen=True, slots=True)
class GenesisAllocation:
    """Initial balance of one account."""
    key: EncryptionKey
    balance: Ciphertext

    @classmethod
    def from_amount(cls, key: EncryptionKey, amount: int) -> GenesisAllocation:
        if amount < 0:
            raise InvalidParameterError("amount", "genesis amount must be non-negative")
        return cls(key, encrypt(key, amount, GENESIS_RANDOMNESS))


def _check_unique(allocations: Sequence[GenesisAllocation]) -> None:
    seen = set()
    for allocation in allocations:
        key_bytes = allocation.key.serialize()
        if key_bytes in seen:
            raise InvalidParameterError("allocations", f"duplicate account {allocation.key.hex()[:16]}")
        seen.add(key_bytes)


def create_genesis_store(allocations: Sequence[GenesisAllocation]) -> AccountStore:
    """
    Create the genesis account store.

    Every allocated account starts at nonce 0.

    Raises:
        InvalidParameterError: an account is allocated twice
    """
    _check_unique(allocations)
    store = AccountStore()
    for allocation in allocations:
        store.create(allocation.key, allocation.balance)
    logger.info(f"Created genesis store with {len(allocations)} accounts")
    return store


def create_genesis_ledger(
    verifying_key: Union[VerifyingKey, PreparedVerifyingKey],
    allocations: Sequence[GenesisAllocation],
    config: Optional[LedgerConfig] = None,
) -> Ledger:
    """Create a ledger seeded with the genesis allocations."""
    return Ledger(verifying_key, create_genesis_store(allocations), config)


def compute_genesis_root(allocations: Sequence[GenesisAllocation]) -> Hash:
    """Commitment to the genesis allocations, independent of their order."""
    if not allocations:
        return Hash.zero()

    builder = HashBuilder()
    builder.update(b"CONFTX_GENESIS:")
    for allocation in sorted(allocations, key=lambda a: a.key.serialize()):
        builder.update(allocation.key.serialize())
        builder.update(allocation.balance.serialize())
    return builder.finalize()


def load_genesis_allocations(path: str) -> List[GenesisAllocation]:
    """
    Load allocations from a JSON file.

    Format:
        {"allocations": [{"key": "<hex encryption key>", "amount": 10000}, ...]}
    """
    with open(path, 'r') as f:
        data = json.load(f)

    allocations = [
        GenesisAllocation.from_amount(EncryptionKey.from_hex(entry["key"]), int(entry["amount"]))
        for entry in data.get("allocations", [])
    ]
    logger.info(f"Loaded {len(allocations)} genesis allocations from {path}")
    return allocations
