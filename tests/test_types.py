"""
ConfTx Type and Serialization Tests
"""

import pytest

from conftx.core.types import Hash
from conftx.core.serialization import (
    ByteReader,
    ByteWriter,
    deserialize_u64,
    deserialize_varint,
    serialize_u64,
    serialize_varint,
)
from conftx.crypto.hash import HashBuilder, sha3_256, tagged_hash
from conftx.errors import ErrorCode, InvalidEncodingError, StaleNonceError


class TestHash:
    """Tests for Hash type."""

    def test_hash_creation(self):
        """Test hash creation from bytes."""
        data = bytes(range(32))
        h = Hash(data)
        assert h.data == data

    def test_hash_wrong_size(self):
        """Test hash rejects wrong length."""
        with pytest.raises(ValueError):
            Hash(bytes(31))

    def test_hash_zero(self):
        """Test zero hash."""
        assert Hash.zero().data == bytes(32)

    def test_hash_hex_roundtrip(self):
        """Test hex conversion."""
        h = Hash(bytes([0xAB] * 32))
        assert Hash.from_hex(h.hex()) == h

    def test_hash_equality_with_bytes(self):
        """Test hash compares equal to its raw bytes."""
        data = bytes(range(32))
        assert Hash(data) == data
        assert Hash(data) != Hash.zero()

    def test_hash_serialization(self):
        """Test hash serialization."""
        h = sha3_256(b"conftx")
        restored, consumed = Hash.deserialize(h.serialize())
        assert restored == h
        assert consumed == 32


class TestHashing:
    """Tests for hash helpers."""

    def test_sha3_known_vector(self):
        """Test SHA3-256 of the empty string."""
        assert sha3_256(b"").hex() == (
            "a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a"
        )

    def test_tagged_hash_domain_separation(self):
        """Test different tags give different hashes."""
        assert tagged_hash(b"a", b"data") != tagged_hash(b"b", b"data")

    def test_hash_builder_matches_concatenation(self):
        """Test HashBuilder hashes the concatenated input."""
        built = HashBuilder().update(b"ab").update_u32(7).finalize()
        assert built == sha3_256(b"ab" + (7).to_bytes(4, "big"))


class TestSerialization:
    """Tests for integer and varint encodings."""

    def test_u64_range(self):
        """Test u64 range check."""
        with pytest.raises(ValueError):
            serialize_u64(1 << 64)
        assert deserialize_u64(serialize_u64((1 << 64) - 1))[0] == (1 << 64) - 1

    def test_truncated_integer(self):
        """Test truncated input raises InvalidEncodingError."""
        with pytest.raises(InvalidEncodingError):
            deserialize_u64(bytes(7))

    @pytest.mark.parametrize("value,size", [(0, 1), (0xFC, 1), (0xFD, 3), (0x10000, 5), (1 << 32, 9)])
    def test_varint_sizes(self, value, size):
        """Test varint encoded sizes."""
        data = serialize_varint(value)
        assert len(data) == size
        assert deserialize_varint(data) == (value, size)

    @pytest.mark.parametrize("data", [
        bytes([0xFD, 0x05, 0x00]),
        bytes([0xFD, 0xFC, 0x00]),
        bytes([0xFE, 0xFF, 0xFF, 0x00, 0x00]),
        bytes([0xFF, 0x01]) + bytes(7),
    ])
    def test_varint_non_minimal(self, data):
        """Test a value encoded wider than needed is rejected."""
        with pytest.raises(InvalidEncodingError):
            deserialize_varint(data)

    def test_reader_writer(self):
        """Test sequential writer and reader."""
        writer = ByteWriter()
        writer.write_u8(1).write_u64(3).write_varint(300).write_raw(b"xyz")
        reader = ByteReader(writer.to_bytes())
        assert reader.read_u8() == 1
        assert reader.read_u64() == 3
        assert reader.read_varint() == 300
        assert reader.read_fixed_bytes(3) == b"xyz"
        reader.expect_end()

    def test_reader_rejects_trailing_bytes(self):
        """Test expect_end on leftover data."""
        reader = ByteReader(b"\x00\x01", "thing")
        reader.read_u8()
        with pytest.raises(InvalidEncodingError):
            reader.expect_end()

    def test_reader_rejects_truncation(self):
        """Test read_fixed_bytes past the end."""
        with pytest.raises(InvalidEncodingError):
            ByteReader(b"\x00").read_fixed_bytes(2)


class TestErrors:
    """Tests for error types."""

    def test_error_to_dict(self):
        """Test error serialization carries code and details."""
        err = StaleNonceError(expected=2, got=5)
        data = err.to_dict()
        assert data["code"] == ErrorCode.STALE_NONCE
        assert data["name"] == "STALE_NONCE"
        assert data["details"] == {"expected": 2, "got": 5}
        assert err.reason == "STALE_NONCE"
