"""
ConfTx Configuration Tests
"""

import logging

from conftx.node import (
    CircuitConfig,
    LedgerConfig,
    LogConfig,
    ProtocolConfig,
    setup_logging,
)


class TestProtocolConfig:
    """Tests for ProtocolConfig."""

    def test_defaults_valid(self):
        assert ProtocolConfig().validate() == []
        assert ProtocolConfig.default_testnet().validate() == []
        assert ProtocolConfig.default_mainnet().validate() == []

    def test_network_defaults(self):
        testnet = ProtocolConfig.default_testnet()
        assert testnet.testnet
        assert testnet.circuit.value_bits == 16
        assert testnet.circuit.scalar_bits == 64
        mainnet = ProtocolConfig.default_mainnet()
        assert not mainnet.testnet
        assert not mainnet.ledger.allow_self_transfer

    def test_invalid_bits(self):
        config = ProtocolConfig()
        config.circuit.value_bits = 1
        config.circuit.scalar_bits = 300
        errors = config.validate()
        assert len(errors) == 2

    def test_invalid_setup(self):
        config = ProtocolConfig()
        config.setup.max_degree = 1
        config.setup.proving_key_path = ""
        assert len(config.validate()) == 2

    def test_invalid_fee_collector(self):
        config = ProtocolConfig()
        config.ledger.fee_collector = "zz"
        assert config.validate() == ["fee_collector is not valid hex"]
        config.ledger.fee_collector = "00" * 31
        assert config.validate() == ["fee_collector must be 32 bytes"]

    def test_invalid_retries(self):
        config = ProtocolConfig()
        config.ledger.max_commit_retries = 0
        assert config.validate() == ["max_commit_retries must be at least 1"]

    def test_save_load(self, tmp_path, alice):
        """Test JSON persistence."""
        config = ProtocolConfig.default_testnet()
        config.ledger.fee_collector = alice.public.hex()
        path = str(tmp_path / "config.json")
        config.save(path)
        loaded = ProtocolConfig.load(path)
        assert loaded.to_dict() == config.to_dict()
        assert loaded.ledger.fee_collector == alice.public.hex()

    def test_load_partial(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"name": "custom"}')
        loaded = ProtocolConfig.load(str(path))
        assert loaded.name == "custom"
        assert loaded.circuit == CircuitConfig()
        assert loaded.ledger == LedgerConfig()


class TestCircuitConfig:
    """Tests for CircuitConfig."""

    def test_params(self):
        params = CircuitConfig(value_bits=12, scalar_bits=20).params()
        assert params.value_bits == 12
        assert params.scalar_bits == 20


class TestLogging:
    """Tests for setup_logging."""

    def test_file_handler(self, tmp_path):
        path = tmp_path / "conftx.log"
        root = logging.getLogger()
        saved = root.handlers[:]
        saved_level = root.level
        root.handlers = []
        try:
            setup_logging(LogConfig(level="warning", file=str(path)))
            logging.getLogger("conftx.test").warning("hello")
            for handler in root.handlers:
                handler.flush()
            assert root.level == logging.WARNING
            assert "hello" in path.read_text()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved
            root.setLevel(saved_level)
