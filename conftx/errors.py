"""
ConfTx Error Handling

All error codes and exception classes.

Messages and details never carry witness values, decryption keys or
blinding randomness.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Protocol error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001
    INTERNAL_ERROR = 1002

    # 2xxx - Encoding errors
    INVALID_ENCODING = 2001
    SUBGROUP_CHECK_FAILED = 2002

    # 3xxx - Encryption and key errors
    DECRYPTION_OUT_OF_RANGE = 3001
    INVALID_KEY = 3002
    KEYFILE_ERROR = 3003

    # 4xxx - Proof system errors
    SETUP_SIZE_EXCEEDED = 4001
    UNSATISFIED_WITNESS = 4002
    CIRCUIT_MISMATCH = 4003
    SYNTHESIS_ERROR = 4004

    # 5xxx - Transfer rejections
    TRANSFER_REJECTED = 5000
    STALE_NONCE = 5001
    BALANCE_MISMATCH = 5002
    PROOF_REJECTED = 5003
    UNKNOWN_ACCOUNT = 5004
    FEE_COLLECTOR_MISMATCH = 5005
    SELF_TRANSFER_NOT_ALLOWED = 5006
    CONCURRENT_MODIFICATION = 5007


class ConfTxError(Exception):
    """Base exception for all ConfTx errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(ConfTxError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


class InternalError(ConfTxError):
    def __init__(self, message: str = "Internal error", details: Any = None):
        super().__init__(ErrorCode.INTERNAL_ERROR, message, details)


# ==============================================================================
# Encoding Errors (2xxx)
# ==============================================================================

class InvalidEncodingError(ConfTxError):
    def __init__(self, kind: str, reason: str):
        super().__init__(
            ErrorCode.INVALID_ENCODING,
            f"Invalid {kind} encoding: {reason}",
            {"kind": kind, "reason": reason}
        )


class SubgroupCheckFailedError(ConfTxError):
    def __init__(self, kind: str):
        super().__init__(
            ErrorCode.SUBGROUP_CHECK_FAILED,
            f"{kind} point is not in the prime-order subgroup",
            {"kind": kind}
        )


# ==============================================================================
# Encryption Errors (3xxx)
# ==============================================================================

class DecryptionOutOfRangeError(ConfTxError):
    def __init__(self, max_value: int):
        super().__init__(
            ErrorCode.DECRYPTION_OUT_OF_RANGE,
            f"Ciphertext does not decrypt to a value in [0, {max_value}]",
            {"max_value": max_value}
        )


class InvalidKeyError(ConfTxError):
    def __init__(self, reason: str):
        super().__init__(ErrorCode.INVALID_KEY, f"Invalid key: {reason}")


class KeyfileError(ConfTxError):
    def __init__(self, reason: str):
        super().__init__(ErrorCode.KEYFILE_ERROR, f"Keyfile error: {reason}")


# ==============================================================================
# Proof System Errors (4xxx)
# ==============================================================================

class SetupSizeExceededError(ConfTxError):
    """Raised when the circuit does not fit the reference string. Fatal."""

    def __init__(self, required: int, available: int):
        super().__init__(
            ErrorCode.SETUP_SIZE_EXCEEDED,
            f"Circuit needs a domain of {required}, reference string supports {available}",
            {"required": required, "available": available}
        )


class UnsatisfiedWitnessError(ConfTxError):
    def __init__(self, constraint: Optional[str] = None):
        # Only the constraint path is reported, never the assignment.
        details = {"constraint": constraint} if constraint else None
        super().__init__(
            ErrorCode.UNSATISFIED_WITNESS,
            "Witness does not satisfy the transfer circuit",
            details
        )


class CircuitMismatchError(ConfTxError):
    def __init__(self, reason: str):
        super().__init__(
            ErrorCode.CIRCUIT_MISMATCH,
            f"Key does not match circuit: {reason}",
            {"reason": reason}
        )


class SynthesisError(ConfTxError):
    def __init__(self, reason: str):
        super().__init__(ErrorCode.SYNTHESIS_ERROR, f"Synthesis error: {reason}")


# ==============================================================================
# Transfer Rejections (5xxx)
# ==============================================================================

class TransferRejectedError(ConfTxError):
    """Base class for every reason the ledger refuses a transfer."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.TRANSFER_REJECTED,
        message: str = "Transfer rejected",
        details: Any = None
    ):
        super().__init__(code, message, details)

    @property
    def reason(self) -> str:
        return self.code.name


class StaleNonceError(TransferRejectedError):
    def __init__(self, expected: int, got: int):
        super().__init__(
            ErrorCode.STALE_NONCE,
            f"Invalid nonce: expected {expected}, got {got}",
            {"expected": expected, "got": got}
        )


class BalanceMismatchError(TransferRejectedError):
    def __init__(self):
        super().__init__(
            ErrorCode.BALANCE_MISMATCH,
            "Statement balance does not match the sender's current ciphertext"
        )


class ProofRejectedError(TransferRejectedError):
    def __init__(self):
        super().__init__(ErrorCode.PROOF_REJECTED, "Proof rejected")


class UnknownAccountError(TransferRejectedError):
    def __init__(self, key_hex: str):
        super().__init__(
            ErrorCode.UNKNOWN_ACCOUNT,
            f"Unknown account: {key_hex[:16]}...",
            {"account": key_hex}
        )


class FeeCollectorMismatchError(TransferRejectedError):
    def __init__(self):
        super().__init__(
            ErrorCode.FEE_COLLECTOR_MISMATCH,
            "Fee ciphertext is not addressed to the configured fee collector"
        )


class SelfTransferNotAllowedError(TransferRejectedError):
    def __init__(self):
        super().__init__(
            ErrorCode.SELF_TRANSFER_NOT_ALLOWED,
            "Sender and recipient are the same account"
        )


class ConcurrentModificationError(TransferRejectedError):
    def __init__(self, attempts: int):
        super().__init__(
            ErrorCode.CONCURRENT_MODIFICATION,
            f"Commit lost {attempts} races in a row",
            {"attempts": attempts}
        )
