"""
ConfTx Node Configuration
"""

from conftx.node.config import (
    CircuitConfig,
    LedgerConfig,
    LogConfig,
    ProtocolConfig,
    SetupConfig,
    setup_logging,
)

__all__ = [
    "CircuitConfig",
    "LedgerConfig",
    "LogConfig",
    "ProtocolConfig",
    "SetupConfig",
    "setup_logging",
]
