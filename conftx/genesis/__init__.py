"""
ConfTx Genesis
"""

from conftx.genesis.genesis import (
    GenesisAllocation,
    compute_genesis_root,
    create_genesis_ledger,
    create_genesis_store,
    load_genesis_allocations,
)

__all__ = [
    "GenesisAllocation",
    "compute_genesis_root",
    "create_genesis_ledger",
    "create_genesis_store",
    "load_genesis_allocations",
]
