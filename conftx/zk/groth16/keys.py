"""
ConfTx Groth16 Keys

Proving and verifying keys, their binary format and the prepared
verifying key used on the hot verification path.

Binary layout (all counts varint, points in the bn254 encodings):

    VerifyingKey:  "CTXVK" || version u8 || circuit digest (32)
                   || label || alpha_g1 || beta_g1 || beta_g2
                   || gamma_g2 || delta_g1 || delta_g2 || ic[]
    ProvingKey:    "CTXPK" || version u8 || VerifyingKey (length-prefixed)
                   || a[] || b_g1[] || b_g2[] || h[] || l[]
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Tuple, Union

from conftx.constants import (
    CIRCUIT_DIGEST_SIZE,
    G1_COMPRESSED_SIZE,
    G2_UNCOMPRESSED_SIZE,
    KEY_FORMAT_VERSION,
    PROVING_KEY_MAGIC,
    VERIFYING_KEY_MAGIC,
)
from conftx.core.serialization import ByteReader, ByteWriter
from conftx.crypto.bn254 import (
    FQ12,
    decode_g1,
    decode_g2,
    encode_g1,
    encode_g2,
    neg,
    pairing_gt,
)
from conftx.errors import InvalidEncodingError

logger = logging.getLogger(__name__)


def _read_header(reader: ByteReader, magic: bytes) -> None:
    if reader.read_fixed_bytes(len(magic)) != magic:
        raise InvalidEncodingError(reader.kind, "bad magic")
    version = reader.read_u8()
    if version != KEY_FORMAT_VERSION:
        raise InvalidEncodingError(reader.kind, f"unsupported version {version}")


def _write_points(writer: ByteWriter, points, encode: Callable) -> None:
    writer.write_varint(len(points))
    for pt in points:
        writer.write_raw(encode(pt))


def _read_points(reader: ByteReader, size: int, decode: Callable) -> Tuple:
    count = reader.read_varint()
    if count * size > reader.remaining():
        raise InvalidEncodingError(reader.kind, "point count exceeds remaining data")
    return tuple(decode(reader.read_fixed_bytes(size)) for _ in range(count))


@dataclass(frozen=True, eq=False)
class VerifyingKey:
    """
    Groth16 verifying key.

    circuit_digest identifies the constraint system the key was made
    for; label is opaque circuit metadata chosen by the caller.
    """
    alpha_g1: Any
    beta_g1: Any
    beta_g2: Any
    gamma_g2: Any
    delta_g1: Any
    delta_g2: Any
    ic: Tuple
    circuit_digest: bytes
    label: bytes = b""

    @property
    def num_public_inputs(self) -> int:
        return len(self.ic) - 1

    def prepare(self) -> PreparedVerifyingKey:
        return PreparedVerifyingKey.from_verifying_key(self)

    def serialize(self) -> bytes:
        writer = ByteWriter()
        writer.write_raw(VERIFYING_KEY_MAGIC).write_u8(KEY_FORMAT_VERSION)
        writer.write_raw(self.circuit_digest)
        writer.write_varint(len(self.label)).write_raw(self.label)
        writer.write_raw(encode_g1(self.alpha_g1))
        writer.write_raw(encode_g1(self.beta_g1))
        writer.write_raw(encode_g2(self.beta_g2))
        writer.write_raw(encode_g2(self.gamma_g2))
        writer.write_raw(encode_g1(self.delta_g1))
        writer.write_raw(encode_g2(self.delta_g2))
        _write_points(writer, self.ic, encode_g1)
        return writer.to_bytes()

    @classmethod
    def _read(cls, reader: ByteReader) -> VerifyingKey:
        _read_header(reader, VERIFYING_KEY_MAGIC)
        digest = reader.read_fixed_bytes(CIRCUIT_DIGEST_SIZE)
        label = reader.read_fixed_bytes(reader.read_varint())
        g1 = lambda: decode_g1(reader.read_fixed_bytes(G1_COMPRESSED_SIZE))
        g2 = lambda: decode_g2(reader.read_fixed_bytes(G2_UNCOMPRESSED_SIZE))
        alpha_g1 = g1()
        beta_g1 = g1()
        beta_g2 = g2()
        gamma_g2 = g2()
        delta_g1 = g1()
        delta_g2 = g2()
        ic = _read_points(reader, G1_COMPRESSED_SIZE, decode_g1)
        if not ic:
            raise InvalidEncodingError(reader.kind, "empty input commitments")
        return cls(alpha_g1, beta_g1, beta_g2, gamma_g2, delta_g1, delta_g2, ic, digest, label)

    @classmethod
    def deserialize(cls, data: bytes) -> VerifyingKey:
        """Decode a verifying key; every G2 element is subgroup-checked."""
        reader = ByteReader(data, "verifying key")
        vk = cls._read(reader)
        reader.expect_end()
        return vk

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_bytes(self.serialize())
        logger.info(f"Verifying key saved to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> VerifyingKey:
        vk = cls.deserialize(Path(path).read_bytes())
        logger.info(f"Verifying key loaded from {path} ({vk.num_public_inputs} public inputs)")
        return vk

    def __repr__(self) -> str:
        return f"VerifyingKey(digest={self.circuit_digest.hex()[:16]}..., inputs={self.num_public_inputs})"


@dataclass(frozen=True, eq=False)
class PreparedVerifyingKey:
    """
    Verifying key with e(alpha, beta) computed and gamma, delta negated,
    so a verification is three Miller loops and one final exponentiation.
    """
    alpha_beta: FQ12
    neg_gamma_g2: Any
    neg_delta_g2: Any
    ic: Tuple
    circuit_digest: bytes
    label: bytes

    @classmethod
    def from_verifying_key(cls, vk: VerifyingKey) -> PreparedVerifyingKey:
        return cls(
            alpha_beta=pairing_gt(vk.alpha_g1, vk.beta_g2),
            neg_gamma_g2=neg(vk.gamma_g2),
            neg_delta_g2=neg(vk.delta_g2),
            ic=vk.ic,
            circuit_digest=vk.circuit_digest,
            label=vk.label,
        )

    @property
    def num_public_inputs(self) -> int:
        return len(self.ic) - 1


@dataclass(frozen=True, eq=False)
class ProvingKey:
    """
    Groth16 proving key.

    a_query, b_g1_query, b_g2_query run over the full assignment,
    l_query over the auxiliary variables and h_query over the powers of
    tau up to domain size - 2.
    """
    vk: VerifyingKey
    a_query: Tuple
    b_g1_query: Tuple
    b_g2_query: Tuple
    h_query: Tuple
    l_query: Tuple

    @property
    def domain_size(self) -> int:
        return len(self.h_query) + 1

    def serialize(self) -> bytes:
        vk_bytes = self.vk.serialize()
        writer = ByteWriter()
        writer.write_raw(PROVING_KEY_MAGIC).write_u8(KEY_FORMAT_VERSION)
        writer.write_varint(len(vk_bytes)).write_raw(vk_bytes)
        _write_points(writer, self.a_query, encode_g1)
        _write_points(writer, self.b_g1_query, encode_g1)
        _write_points(writer, self.b_g2_query, encode_g2)
        _write_points(writer, self.h_query, encode_g1)
        _write_points(writer, self.l_query, encode_g1)
        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes, checked: bool = False) -> ProvingKey:
        """
        Decode a proving key.

        G2 query elements are subgroup-checked only when checked=True;
        curve membership is always checked.
        """
        reader = ByteReader(data, "proving key")
        _read_header(reader, PROVING_KEY_MAGIC)
        vk = VerifyingKey.deserialize(reader.read_fixed_bytes(reader.read_varint()))
        g2 = lambda raw: decode_g2(raw, check_subgroup=checked)
        a_query = _read_points(reader, G1_COMPRESSED_SIZE, decode_g1)
        b_g1_query = _read_points(reader, G1_COMPRESSED_SIZE, decode_g1)
        b_g2_query = _read_points(reader, G2_UNCOMPRESSED_SIZE, g2)
        h_query = _read_points(reader, G1_COMPRESSED_SIZE, decode_g1)
        l_query = _read_points(reader, G1_COMPRESSED_SIZE, decode_g1)
        reader.expect_end()
        if not (len(a_query) == len(b_g1_query) == len(b_g2_query)):
            raise InvalidEncodingError("proving key", "query lengths disagree")
        return cls(vk, a_query, b_g1_query, b_g2_query, h_query, l_query)

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_bytes(self.serialize())
        logger.info(f"Proving key saved to {path}")

    @classmethod
    def load(cls, path: Union[str, Path], checked: bool = False) -> ProvingKey:
        pk = cls.deserialize(Path(path).read_bytes(), checked=checked)
        logger.info(f"Proving key loaded from {path} (domain {pk.domain_size})")
        return pk

    def __repr__(self) -> str:
        return f"ProvingKey(domain={self.domain_size}, vars={len(self.a_query)})"
