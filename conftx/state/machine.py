"""
ConfTx Ledger

Admission and application of confidential transfers.

apply_transfer:
1. Sender exists and statement.nonce == sender.nonce + 1
2. statement.balance_before equals the sender's stored ciphertext
3. Fee collector and self-transfer policy
4. Proof verifies against the statement
5. Atomic commit: sender balance := balance_after, nonce += 1;
   recipient += recipient ciphertext; fee collector += fee ciphertext
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Union

from conftx.constants import TRANSFER_ID_TAG
from conftx.core.types import Hash
from conftx.crypto.elgamal import Ciphertext, EncryptionKey
from conftx.crypto.hash import tagged_hash
from conftx.errors import (
    BalanceMismatchError,
    ConcurrentModificationError,
    FeeCollectorMismatchError,
    ProofRejectedError,
    SelfTransferNotAllowedError,
    StaleNonceError,
    TransferRejectedError,
    UnknownAccountError,
)
from conftx.node.config import LedgerConfig
from conftx.state.accounts import Account, AccountStore, Update
from conftx.transfer.proving import verify
from conftx.transfer.statement import TransferStatement
from conftx.zk.groth16 import PreparedVerifyingKey, Proof, VerifyingKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransferReceipt:
    """Result of an applied transfer."""
    transfer_id: Hash
    sender: EncryptionKey
    nonce: int

    @staticmethod
    def compute_id(statement: TransferStatement, proof: Proof) -> Hash:
        """Transfer id: tagged SHA3-256 over statement || proof."""
        return tagged_hash(TRANSFER_ID_TAG, statement.serialize() + proof.serialize())


class Ledger:
    """
    Ledger adapter over an AccountStore.

    Verification runs without holding any lock. The commit is a
    compare-and-swap over every touched account; on conflict the sender
    is re-read and re-validated before trying again.
    """

    def __init__(
        self,
        verifying_key: Union[VerifyingKey, PreparedVerifyingKey],
        store: Optional[AccountStore] = None,
        config: Optional[LedgerConfig] = None,
    ):
        if isinstance(verifying_key, VerifyingKey):
            verifying_key = verifying_key.prepare()
        self.verifying_key = verifying_key
        self.store = store if store is not None else AccountStore()
        self.config = config if config is not None else LedgerConfig()
        self.fee_collector: Optional[EncryptionKey] = None
        if self.config.fee_collector is not None:
            self.fee_collector = EncryptionKey.from_hex(self.config.fee_collector)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def account(self, key: EncryptionKey) -> Optional[Account]:
        return self.store.get(key)

    def balance_of(self, key: EncryptionKey) -> Ciphertext:
        """Encrypted balance; the zero ciphertext for unknown accounts."""
        account = self.store.get(key)
        return account.balance if account else Ciphertext.zero()

    def nonce_of(self, key: EncryptionKey) -> int:
        account = self.store.get(key)
        return account.nonce if account else 0

    # ==========================================================================
    # Admission
    # ==========================================================================

    def _check_sender(self, statement: TransferStatement, account: Optional[Account]) -> Account:
        if account is None:
            raise UnknownAccountError(statement.sender_key.hex())
        expected_nonce = account.nonce + 1
        if statement.nonce != expected_nonce:
            raise StaleNonceError(expected_nonce, statement.nonce)
        if statement.balance_before != account.balance:
            raise BalanceMismatchError()
        return account

    def _check_policy(self, statement: TransferStatement) -> None:
        if self.fee_collector is not None and statement.fee_collector_key != self.fee_collector:
            raise FeeCollectorMismatchError()
        if not self.config.allow_self_transfer and statement.recipient_key == statement.sender_key:
            raise SelfTransferNotAllowedError()

    def verify_transfer(self, statement: TransferStatement, proof: Proof) -> None:
        """
        Run every admission check without touching state.

        Raises:
            TransferRejectedError: subclass naming the failed check
        """
        self._check_sender(statement, self.store.get(statement.sender_key))
        self._check_policy(statement)
        if not verify(proof, statement, self.verifying_key):
            raise ProofRejectedError()

    # ==========================================================================
    # Application
    # ==========================================================================

    def _build_updates(self, statement: TransferStatement, sender: Account) -> List[Update]:
        pending: Dict[bytes, Update] = {
            sender.key_bytes: (
                sender.version,
                replace(sender, balance=statement.balance_after, nonce=statement.nonce),
            ),
        }

        def credit(key: EncryptionKey, amount: Ciphertext) -> None:
            key_bytes = key.serialize()
            if key_bytes in pending:
                expected, account = pending[key_bytes]
            else:
                current = self.store.get(key)
                expected = current.version if current is not None else None
                account = current if current is not None else Account(key)
            pending[key_bytes] = (expected, replace(account, balance=account.balance + amount))

        credit(statement.recipient_key, statement.recipient_ciphertext)
        credit(statement.fee_collector_key, statement.fee_ciphertext)
        return list(pending.values())

    def apply_transfer(self, statement: TransferStatement, proof: Proof) -> TransferReceipt:
        """
        Verify and apply a transfer.

        On any rejection the store is unchanged.

        Raises:
            TransferRejectedError: subclass naming the failed check
        """
        try:
            self.verify_transfer(statement, proof)

            for _ in range(self.config.max_commit_retries):
                sender = self._check_sender(statement, self.store.get(statement.sender_key))
                if self.store.commit(self._build_updates(statement, sender)):
                    break
                logger.debug(f"Commit conflict for {statement.sender_key.hex()[:16]}, retrying")
            else:
                raise ConcurrentModificationError(self.config.max_commit_retries)
        except TransferRejectedError as e:
            logger.warning(f"Transfer from {statement.sender_key.hex()[:16]} rejected: {e.reason}")
            raise

        receipt = TransferReceipt(
            transfer_id=TransferReceipt.compute_id(statement, proof),
            sender=statement.sender_key,
            nonce=statement.nonce,
        )
        logger.info(
            f"Applied transfer {receipt.transfer_id.hex()[:16]} "
            f"from {statement.sender_key.hex()[:16]}, nonce={statement.nonce}"
        )
        return receipt
