"""
COSE Key Encoding Utilities

Converts between raw elliptic-curve key material and COSE_Key objects:
- X25519 agreement keys (OKP, ECDH-ES+HKDF-256)
- Ed25519 signing keys (OKP, EdDSA)
- NIST P-256 keys (EC2, ES256)
- Key identifiers (SHA-256 of the raw public key)

Every decoder validates untrusted key objects field by field: a field with
the wrong CBOR type raises a TYPE_MISMATCH error, a kty/alg/crv value that
disagrees with the expected key raises an INCORRECT_COSE_TYPE error naming
the field and both values.

Standards Reference:
- RFC 8152 Section 13 - Key Object Parameters
- RFC 8037 - CFRG curves in JOSE/COSE (OKP keys)
"""

from collections.abc import Mapping
from typing import Any, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PublicKey

from provisioning.config import CRYPTO_CONSTANTS
from provisioning.core.cose_key import CoseKey
from provisioning.core.crypto import sha256_digest
from provisioning.core.errors import (
    CborError,
    CborErrorReason,
    CryptoError,
    CryptoErrorReason,
)
from provisioning.core.types import Algorithm, CborType, Curve, KeyLabel, KeyType

OkpPublicKey = Union[X25519PublicKey, Ed25519PublicKey]


# ============================================================================
# RAW PUBLIC KEY BYTES
# ============================================================================


def public_key_to_raw(public_key: OkpPublicKey) -> bytes:
    """
    Raw encoding of an OKP public key (32 bytes for X25519 and Ed25519).
    """
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def public_key_digest(public_key: Union[OkpPublicKey, ec.EllipticCurvePublicKey]) -> bytes:
    """
    SHA-256 over the raw encoded public key, used as COSE key identifier.

    OKP keys are hashed in raw form, EC2 keys as uncompressed SEC1 point.

    Args:
        public_key: X25519, Ed25519 or P-256 public key

    Returns:
        bytes: 32-byte digest

    Raises:
        CryptoError: NO_SUCH_ALGORITHM if SHA-256 is unavailable
    """
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        encoded = public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
    else:
        encoded = public_key_to_raw(public_key)
    return sha256_digest(encoded)


def raw_to_x25519_public(data: bytes) -> X25519PublicKey:
    """
    Convert the raw u-coordinate of an X25519 public key to a key object.

    Raises:
        CryptoError: MALFORMED_KEY for input that is not 32 bytes,
            NO_SUCH_ALGORITHM if X25519 is unsupported
    """
    try:
        return X25519PublicKey.from_public_bytes(bytes(data))
    except UnsupportedAlgorithm as e:
        raise CryptoError(
            "X25519 provider not available", CryptoErrorReason.NO_SUCH_ALGORITHM
        ) from e
    except (ValueError, TypeError) as e:
        raise CryptoError(
            "Invalid X25519 public key",
            CryptoErrorReason.MALFORMED_KEY,
            field="x",
            expected=CRYPTO_CONSTANTS.X25519_KEY_LENGTH,
            actual=_safe_len(data),
        ) from e


def raw_to_ed25519_public(data: bytes) -> Ed25519PublicKey:
    """
    Convert the raw encoded point of an Ed25519 public key to a key object.

    Raises:
        CryptoError: MALFORMED_KEY for input that is not 32 bytes,
            NO_SUCH_ALGORITHM if Ed25519 is unsupported
    """
    try:
        return Ed25519PublicKey.from_public_bytes(bytes(data))
    except UnsupportedAlgorithm as e:
        raise CryptoError(
            "Ed25519 provider not available", CryptoErrorReason.NO_SUCH_ALGORITHM
        ) from e
    except (ValueError, TypeError) as e:
        raise CryptoError(
            "Invalid Ed25519 public key",
            CryptoErrorReason.MALFORMED_KEY,
            field="x",
            expected=CRYPTO_CONSTANTS.ED25519_KEY_LENGTH,
            actual=_safe_len(data),
        ) from e


# ============================================================================
# ENCODING (key -> COSE_Key)
# ============================================================================


def encode_x25519_public(public_key: X25519PublicKey) -> CoseKey:
    """
    Convert an X25519 public key to a COSE key object.

    Returns:
        CoseKey: {kty: OKP, kid: SHA-256(x), alg: ECDH-ES+HKDF-256, crv: X25519, x}
    """
    raw = public_key_to_raw(public_key)
    return CoseKey({
        KeyLabel.KTY: KeyType.OKP,
        KeyLabel.KID: sha256_digest(raw),
        KeyLabel.ALG: Algorithm.ECDH_ES_HKDF_256,
        KeyLabel.CRV: Curve.X25519,
        KeyLabel.X: raw,
    })


def cbor_encode_x25519_public(public_key: X25519PublicKey) -> bytes:
    """CBOR encoding of encode_x25519_public(public_key)."""
    return encode_x25519_public(public_key).encode()


def encode_ed25519_public(public_key: Ed25519PublicKey) -> CoseKey:
    """
    Convert an Ed25519 public key to a COSE key object.

    Returns:
        CoseKey: {kty: OKP, kid: SHA-256(x), alg: EdDSA, crv: Ed25519, x}
    """
    raw = public_key_to_raw(public_key)
    return CoseKey({
        KeyLabel.KTY: KeyType.OKP,
        KeyLabel.KID: sha256_digest(raw),
        KeyLabel.ALG: Algorithm.EDDSA,
        KeyLabel.CRV: Curve.ED25519,
        KeyLabel.X: raw,
    })


def encode_p256_public(public_key: ec.EllipticCurvePublicKey) -> CoseKey:
    """
    Convert a P-256 public key to a COSE key object.

    Coordinates are unsigned big-endian, left-padded to 32 bytes.

    Raises:
        ValueError: If the key is not on P-256
    """
    if not isinstance(public_key.curve, ec.SECP256R1):
        raise ValueError(f"Only NIST P-256 (SECP256R1) is supported, got {public_key.curve.name}")

    numbers = public_key.public_numbers()
    size = CRYPTO_CONSTANTS.P256_COORDINATE_LENGTH
    return CoseKey({
        KeyLabel.KTY: KeyType.EC2,
        KeyLabel.KID: public_key_digest(public_key),
        KeyLabel.ALG: Algorithm.ES256,
        KeyLabel.CRV: Curve.P256,
        KeyLabel.X: numbers.x.to_bytes(size, byteorder='big'),
        KeyLabel.Y: numbers.y.to_bytes(size, byteorder='big'),
    })


def to_cose_key(key: Any) -> CoseKey:
    """
    Public COSE key for an X25519, Ed25519 or P-256 public key, or for an
    existing COSE key / decoded map (private parameters are stripped).

    Raises:
        TypeError: For unsupported key objects
    """
    if isinstance(key, X25519PublicKey):
        return encode_x25519_public(key)
    if isinstance(key, Ed25519PublicKey):
        return encode_ed25519_public(key)
    if isinstance(key, ec.EllipticCurvePublicKey):
        return encode_p256_public(key)
    if isinstance(key, (CoseKey, Mapping)):
        return CoseKey.decode(key).public_key()
    raise TypeError(f"Unsupported public key type: {type(key).__name__}")


# ============================================================================
# DECODING (COSE_Key -> key), strict validation
# ============================================================================


def decode_p256_public(key: Union[CoseKey, bytes, dict]) -> ec.EllipticCurvePublicKey:
    """
    Convert a COSE key object to a P-256 public key.

    Checks kty == EC2, alg == ES256 and crv == P-256, each reported
    independently, then rebuilds the point from the x/y coordinates.

    Args:
        key: COSE key (object, decoded map or CBOR bytes)

    Returns:
        EllipticCurvePublicKey: Reconstructed P-256 public key

    Raises:
        CborError: TYPE_MISMATCH for a field with the wrong CBOR type,
            INCORRECT_COSE_TYPE if kty/alg/crv disagree with EC2/ES256/P-256
        CryptoError: MALFORMED_KEY if the point is not on the curve,
            NO_SUCH_ALGORITHM if P-256 is unsupported
    """
    key = CoseKey.decode(key)

    _expect_value(key, KeyLabel.KTY, "kty", KeyType.EC2, "Key has unexpected key type (kty)")
    _expect_value(key, KeyLabel.ALG, "alg", Algorithm.ES256, "Key has unexpected algorithm")
    _expect_value(key, KeyLabel.CRV, "crv", Curve.P256, "Key has unexpected curve")

    x = _require_bytes(key, KeyLabel.X, "x")
    y = _require_bytes(key, KeyLabel.Y, "y")

    try:
        numbers = ec.EllipticCurvePublicNumbers(
            int.from_bytes(x, byteorder='big'),
            int.from_bytes(y, byteorder='big'),
            ec.SECP256R1(),
        )
        return numbers.public_key()
    except UnsupportedAlgorithm as e:
        raise CryptoError("No support for P256.", CryptoErrorReason.NO_SUCH_ALGORITHM) from e
    except ValueError as e:
        raise CryptoError("Point is not on P-256", CryptoErrorReason.MALFORMED_KEY) from e


def decode_x25519_public(key: Union[CoseKey, bytes, dict]) -> X25519PublicKey:
    """
    Convert a COSE key object to an X25519 public key.

    Raises:
        CborError: On type mismatch or if crv/alg are not X25519/ECDH-ES+HKDF-256
        CryptoError: MALFORMED_KEY if x is not a valid X25519 key
    """
    key = CoseKey.decode(key)
    _validate_okp_key(key, Curve.X25519, Algorithm.ECDH_ES_HKDF_256)
    return raw_to_x25519_public(_require_bytes(key, KeyLabel.X, "x"))


def decode_ed25519_public(key: Union[CoseKey, bytes, dict]) -> Ed25519PublicKey:
    """
    Convert a COSE key object to an Ed25519 public key.

    Raises:
        CborError: On type mismatch or if crv/alg are not Ed25519/EdDSA
        CryptoError: MALFORMED_KEY if x is not a valid Ed25519 key
    """
    key = CoseKey.decode(key)
    _validate_okp_key(key, Curve.ED25519, Algorithm.EDDSA)
    return raw_to_ed25519_public(_require_bytes(key, KeyLabel.X, "x"))


def _validate_okp_key(key: CoseKey, curve: Curve, algorithm: Algorithm) -> None:
    # Types first, so a wrongly typed field is never compared by value
    _require_int(key, KeyLabel.CRV, "crv")
    _require_int(key, KeyLabel.KTY, "kty")
    _require_int(key, KeyLabel.ALG, "alg")

    _expect_value(key, KeyLabel.KTY, "kty", KeyType.OKP, "Key has unexpected key type (kty)")
    _expect_value(key, KeyLabel.CRV, "crv", curve, "Key has unexpected curve")
    _expect_value(key, KeyLabel.ALG, "alg", algorithm, "Algorithm does not match the curve")


# ============================================================================
# FIELD CHECKS
# ============================================================================


def _require_int(key: CoseKey, label: KeyLabel, name: str) -> int:
    value = key.get(label)
    if CborType.of(value) is not CborType.INTEGER:
        raise CborError(
            f"{name} field does not have expected type",
            CborErrorReason.TYPE_MISMATCH,
            field=name,
            expected=CborType.INTEGER,
            actual=CborType.of(value),
        )
    return value


def _require_bytes(key: CoseKey, label: KeyLabel, name: str) -> bytes:
    value = key.get(label)
    if CborType.of(value) is not CborType.BYTE_STRING:
        raise CborError(
            f"{name} field does not have expected type",
            CborErrorReason.TYPE_MISMATCH,
            field=name,
            expected=CborType.BYTE_STRING,
            actual=CborType.of(value),
        )
    return bytes(value)


def _expect_value(key: CoseKey, label: KeyLabel, name: str, expected: int, message: str) -> None:
    actual = _require_int(key, label, name)
    if actual != expected:
        raise CborError(
            message,
            CborErrorReason.INCORRECT_COSE_TYPE,
            field=name,
            expected=int(expected),
            actual=actual,
        )


def _safe_len(data: Any):
    try:
        return len(data)
    except TypeError:
        return None
