"""
ConfTx Constants

All protocol constants defined here for single source of truth.
"""

from typing import Final

# ==============================================================================
# ENCODING
# ==============================================================================

BIG_ENDIAN: Final[str] = "big"
LITTLE_ENDIAN: Final[str] = "little"

# ==============================================================================
# BN254 (alt_bn128) PAIRING CURVE
# ==============================================================================

# Base field of G1/G2
FQ_MODULUS: Final[int] = (
    21888242871839275222246405745257275088696311157297823662689037894645226208583
)

# Scalar field Fr (order of G1, G2 and GT). Baby Jubjub is defined over it.
FR_MODULUS: Final[int] = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
FR_BITS: Final[int] = 254
FR_TWO_ADICITY: Final[int] = 28                 # 2^28 divides r - 1
FR_MULTIPLICATIVE_GENERATOR: Final[int] = 5     # quadratic non-residue mod r

# ==============================================================================
# BABY JUBJUB (twisted Edwards: a*x^2 + y^2 = 1 + d*x^2*y^2 over Fr)
# ==============================================================================

JUBJUB_A: Final[int] = 168700
JUBJUB_D: Final[int] = 168696
JUBJUB_COFACTOR: Final[int] = 8

# Prime order of the subgroup used for keys and ciphertexts
JUBJUB_SUBGROUP_ORDER: Final[int] = (
    2736030358979909402780800718157159386076813972158567259200215660948447373041
)
JUBJUB_SCALAR_BITS: Final[int] = 251

# Generator of the prime-order subgroup
JUBJUB_GENERATOR_X: Final[int] = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553
)
JUBJUB_GENERATOR_Y: Final[int] = (
    16950150798460657717958625567821834550301663161624707787222815936182638968203
)

# ==============================================================================
# WIRE SIZES (bytes)
# ==============================================================================

HASH_SIZE: Final[int] = 32
SCALAR_SIZE: Final[int] = 32
POINT_SIZE: Final[int] = 32
CIPHERTEXT_SIZE: Final[int] = 2 * POINT_SIZE
NONCE_SIZE: Final[int] = 8

G1_COMPRESSED_SIZE: Final[int] = 32
G2_UNCOMPRESSED_SIZE: Final[int] = 128
PROOF_SIZE: Final[int] = 2 * G1_COMPRESSED_SIZE + G2_UNCOMPRESSED_SIZE

# sender, recipient, fee-collector keys; before, after, recipient, fee ciphertexts; nonce
STATEMENT_SIZE: Final[int] = 3 * POINT_SIZE + 4 * CIPHERTEXT_SIZE + NONCE_SIZE

# G1 compressed flags (top two bits of the first byte)
G1_FLAG_Y_ODD: Final[int] = 0x80
G1_FLAG_INFINITY: Final[int] = 0x40
G2_FLAG_INFINITY: Final[int] = 0x40

# Baby Jubjub point encoding: sign of x in the top bit of the last byte
POINT_SIGN_BIT: Final[int] = 0x80

# ==============================================================================
# CIRCUIT
# ==============================================================================

DEFAULT_VALUE_BITS: Final[int] = 32             # width of amounts and balances
DEFAULT_SCALAR_BITS: Final[int] = 251           # width of keys and randomness
MAX_VALUE_BITS: Final[int] = 64
MIN_BITS: Final[int] = 2

# 3 keys + 8 ciphertext points, two coordinates each, plus the nonce
NUM_STATEMENT_POINTS: Final[int] = 11
NUM_PUBLIC_INPUTS: Final[int] = 2 * NUM_STATEMENT_POINTS + 1

# ==============================================================================
# SETUP / GROTH16
# ==============================================================================

MAX_DOMAIN_LOG2: Final[int] = FR_TWO_ADICITY
DEFAULT_MAX_DEGREE: Final[int] = 1 << 16
FIXED_BASE_WINDOW: Final[int] = 8

KEY_FORMAT_VERSION: Final[int] = 1
PROVING_KEY_MAGIC: Final[bytes] = b"CTXPK"
VERIFYING_KEY_MAGIC: Final[bytes] = b"CTXVK"
CIRCUIT_DIGEST_SIZE: Final[int] = 32

# ==============================================================================
# KEYS
# ==============================================================================

# BLAKE2b personalization strings are exactly 16 bytes
KEY_DERIVATION_PERSONALIZATION: Final[bytes] = b"ConfTx_KeyDerive"
SEED_MIN_SIZE: Final[int] = 32

KEYFILE_VERSION: Final[int] = 1
KEYFILE_KDF_ITERATIONS: Final[int] = 262144
KEYFILE_SALT_SIZE: Final[int] = 32
KEYFILE_IV_SIZE: Final[int] = 16
KEYFILE_DKLEN: Final[int] = 32

# ==============================================================================
# LEDGER
# ==============================================================================

TRANSFER_ID_TAG: Final[bytes] = b"conftx/transfer-id"
DEFAULT_MAX_COMMIT_RETRIES: Final[int] = 16
MAX_NONCE: Final[int] = (1 << 64) - 1
