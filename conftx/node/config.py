"""
ConfTx Protocol Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from conftx.constants import (
    DEFAULT_MAX_COMMIT_RETRIES,
    DEFAULT_MAX_DEGREE,
    DEFAULT_SCALAR_BITS,
    DEFAULT_VALUE_BITS,
    JUBJUB_SCALAR_BITS,
    MAX_DOMAIN_LOG2,
    MAX_VALUE_BITS,
    MIN_BITS,
    POINT_SIZE,
)

logger = logging.getLogger(__name__)


@dataclass
class CircuitConfig:
    """Transfer circuit parameters."""
    value_bits: int = DEFAULT_VALUE_BITS
    scalar_bits: int = DEFAULT_SCALAR_BITS

    def params(self):
        from conftx.transfer.circuit import CircuitParams
        return CircuitParams(self.value_bits, self.scalar_bits)


@dataclass
class SetupConfig:
    """Key generation and key file locations."""
    max_degree: int = DEFAULT_MAX_DEGREE
    proving_key_path: str = "./keys/transfer.pk"
    verifying_key_path: str = "./keys/transfer.vk"


@dataclass
class LedgerConfig:
    """Ledger admission policy."""
    # Hex-encoded encryption key every fee must be paid to; None accepts any
    fee_collector: Optional[str] = None
    allow_self_transfer: bool = True
    max_commit_retries: int = DEFAULT_MAX_COMMIT_RETRIES


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class ProtocolConfig:
    """
    Complete protocol configuration.

    Everything a wallet, a ledger and the setup tool must agree on.
    """
    name: str = "conftx"
    testnet: bool = False

    circuit: CircuitConfig = field(default_factory=CircuitConfig)
    setup: SetupConfig = field(default_factory=SetupConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Circuit validation
        if not MIN_BITS <= self.circuit.value_bits <= MAX_VALUE_BITS:
            errors.append(f"value_bits must be in [{MIN_BITS}, {MAX_VALUE_BITS}]")
        if not MIN_BITS <= self.circuit.scalar_bits <= JUBJUB_SCALAR_BITS:
            errors.append(f"scalar_bits must be in [{MIN_BITS}, {JUBJUB_SCALAR_BITS}]")

        # Setup validation
        if self.setup.max_degree < 2 or self.setup.max_degree > (1 << MAX_DOMAIN_LOG2):
            errors.append(f"max_degree must be in [2, 2^{MAX_DOMAIN_LOG2}]")
        if not self.setup.proving_key_path:
            errors.append("proving_key_path cannot be empty")
        if not self.setup.verifying_key_path:
            errors.append("verifying_key_path cannot be empty")

        # Ledger validation
        if self.ledger.fee_collector is not None:
            try:
                if len(bytes.fromhex(self.ledger.fee_collector)) != POINT_SIZE:
                    errors.append(f"fee_collector must be {POINT_SIZE} bytes")
            except ValueError:
                errors.append("fee_collector is not valid hex")
        if self.ledger.max_commit_retries < 1:
            errors.append("max_commit_retries must be at least 1")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        config_dict = {
            "name": self.name,
            "testnet": self.testnet,
            "circuit": asdict(self.circuit),
            "setup": asdict(self.setup),
            "ledger": asdict(self.ledger),
            "log": asdict(self.log),
        }

        with open(path, 'w') as f:
            json.dump(config_dict, f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ProtocolConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls(
            name=data.get("name", "conftx"),
            testnet=data.get("testnet", False),
        )

        if "circuit" in data:
            config.circuit = CircuitConfig(**data["circuit"])

        if "setup" in data:
            config.setup = SetupConfig(**data["setup"])

        if "ledger" in data:
            config.ledger = LedgerConfig(**data["ledger"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def default_testnet(cls) -> "ProtocolConfig":
        """Create default testnet configuration: narrow circuit, fast setup."""
        config = cls(
            name="conftx-testnet",
            testnet=True,
        )

        config.circuit.value_bits = 16
        config.circuit.scalar_bits = 64
        config.setup.max_degree = 1 << 14
        config.setup.proving_key_path = "./keys-testnet/transfer.pk"
        config.setup.verifying_key_path = "./keys-testnet/transfer.vk"
        config.log.level = "DEBUG"

        return config

    @classmethod
    def default_mainnet(cls) -> "ProtocolConfig":
        """Create default mainnet configuration."""
        config = cls(
            name="conftx-mainnet",
            testnet=False,
        )

        config.ledger.allow_self_transfer = False

        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "name": self.name,
            "testnet": self.testnet,
            "circuit": asdict(self.circuit),
            "setup": asdict(self.setup),
            "ledger": asdict(self.ledger),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
