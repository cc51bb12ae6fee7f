"""
Provisioning Error Types

Two error families cover every failure the library reports:

- CborError: structural problems with untrusted input (malformed CBOR/COSE,
  a field with the wrong CBOR type, inconsistent kty/alg/crv values).
- CryptoError: missing algorithm support, malformed key material and
  encryption, decryption, signing or verification failures.

Each error carries a machine-checkable reason code plus the field name and
the expected/actual values where they apply, so callers can branch on the
error programmatically instead of parsing messages.
"""

from enum import Enum
from typing import Any, Optional


class CborErrorReason(Enum):
    """Reason codes for structural/decoding errors"""

    DESERIALIZATION_ERROR = 1
    TYPE_MISMATCH = 2
    INCORRECT_COSE_TYPE = 3


class CryptoErrorReason(Enum):
    """Reason codes for cryptographic errors"""

    NO_SUCH_ALGORITHM = 1
    MALFORMED_KEY = 2
    ENCRYPTION_FAILURE = 3
    DECRYPTION_FAILURE = 4
    SIGNING_FAILURE = 5
    VERIFICATION_FAILURE = 6


class ProvisioningError(Exception):
    """
    Base class for all errors raised by the provisioning library.

    Attributes:
        message: Human readable description
        reason: Reason code (CborErrorReason or CryptoErrorReason)
        field: Name of the offending field, if any
        expected: Value or type the field should have had
        actual: Value or type that was found
    """

    def __init__(
        self,
        message: str,
        reason: Enum,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.field = field
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        text = f"{self.message} [{self.reason.name}]"
        if self.field is not None:
            text += f" field={self.field} expected={self.expected!r} actual={self.actual!r}"
        return text


class CborError(ProvisioningError, ValueError):
    """Malformed or inconsistent structured input"""

    def __init__(
        self,
        message: str,
        reason: CborErrorReason = CborErrorReason.DESERIALIZATION_ERROR,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message, reason, field, expected, actual)


class CryptoError(ProvisioningError):
    """Failure of a cryptographic operation"""

    def __init__(
        self,
        message: str,
        reason: CryptoErrorReason,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message, reason, field, expected, actual)
