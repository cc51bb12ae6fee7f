"""
COSE Core Types and Constants

Defines the registry values, enumerations and constants shared by the key
encoding, certificate and key agreement layers of the provisioning library.

Standards Reference:
- RFC 8152 - CBOR Object Signing and Encryption (COSE)
  - Table 21: Key Type Values
  - Table 22: Elliptic Curves
  - Section 8.1: EdDSA, Section 8.1 (ECDSA): ES256
  - Section 11.2: Context Information Structure
- RFC 8949 - Concise Binary Object Representation (CBOR)
"""

from collections.abc import Mapping
from enum import Enum, IntEnum


# ============================================================================
# COSE MESSAGE CONSTANTS (RFC 8152 Section 2, 4.4)
# ============================================================================

# CBOR tag for COSE_Sign1 messages
COSE_SIGN1_TAG = 18

# Context string of the Sig_structure for COSE_Sign1
SIGNATURE1_CONTEXT = "Signature1"

# Header label carrying the algorithm identifier
HEADER_ALGORITHM = 1


# ============================================================================
# ENUMERATIONS
# ============================================================================


class KeyLabel(IntEnum):
    """
    COSE_Key map labels.

    RFC 8152 Section 7.1 (common parameters) and 13.1/13.2 (curve parameters).
    OKP and EC2 keys share the -1/-2 labels for curve and x coordinate.
    """

    KTY = 1
    KID = 2
    ALG = 3
    CRV = -1
    X = -2
    Y = -3
    D = -4


class KeyType(IntEnum):
    """COSE key types (RFC 8152 Table 21)"""

    OKP = 1
    EC2 = 2


class Algorithm(IntEnum):
    """
    COSE algorithm identifiers used by the provisioning protocol.

    RFC 8152 Tables 5, 9 and 15.
    """

    A256GCM = 3
    ES256 = -7
    EDDSA = -8
    ECDH_ES_HKDF_256 = -25


class Curve(IntEnum):
    """COSE elliptic curve identifiers (RFC 8152 Table 22)"""

    P256 = 1
    X25519 = 4
    ED25519 = 6


class CborType(Enum):
    """
    CBOR major types as seen by a type-preserving decoder.

    Used to report the actual type of a field that failed a strict type check.
    """

    INTEGER = "integer"
    BYTE_STRING = "byte string"
    TEXT_STRING = "text string"
    ARRAY = "array"
    MAP = "map"
    TAG = "tag"
    FLOAT = "float"
    SIMPLE_VALUE = "simple value"
    UNDEFINED = "undefined"

    @classmethod
    def of(cls, value) -> "CborType":
        """
        Classify a decoded CBOR value.

        Booleans and None are CBOR simple values, not integers, even though
        Python's bool subclasses int.
        """
        if value is None or isinstance(value, bool):
            return cls.SIMPLE_VALUE
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, (bytes, bytearray)):
            return cls.BYTE_STRING
        if isinstance(value, str):
            return cls.TEXT_STRING
        if isinstance(value, (list, tuple)):
            return cls.ARRAY
        if isinstance(value, Mapping):
            return cls.MAP
        if isinstance(value, float):
            return cls.FLOAT
        if hasattr(value, "tag") and hasattr(value, "value"):
            return cls.TAG
        return cls.UNDEFINED


class Party(Enum):
    """
    Identity labels of the two parties in the key derivation context.

    The device always occupies PartyUInfo and the server PartyVInfo,
    independent of which side performs the derivation.
    """

    DEVICE = "device"
    SERVER = "server"


# ============================================================================
# ALGORITHM / CURVE CONSISTENCY
# ============================================================================

# Algorithm expected for each OKP curve in a well-formed key object
OKP_CURVE_ALGORITHMS = {
    Curve.X25519: Algorithm.ECDH_ES_HKDF_256,
    Curve.ED25519: Algorithm.EDDSA,
}

# Curve expected for each EC2 algorithm
EC2_ALGORITHM_CURVES = {
    Algorithm.ES256: Curve.P256,
}
