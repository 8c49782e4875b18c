"""
ConfTx Ledger State

Encrypted accounts and the transfer ledger.
"""

from conftx.state.accounts import (
    Account,
    AccountStore,
)
from conftx.state.machine import (
    Ledger,
    TransferReceipt,
)

__all__ = [
    # Accounts
    "Account",
    "AccountStore",
    # Ledger
    "Ledger",
    "TransferReceipt",
]
