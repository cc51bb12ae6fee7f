"""
Signed Public-Key Certificates

A certificate is a COSE_Sign1 whose payload is the encoded COSE key being
certified. Certificates bind the X25519 agreement keys and Ed25519 identity
keys exchanged during provisioning to a signing key.

Operations:
- sign_public_key: certify an X25519 / Ed25519 / P-256 key or a COSE key
- verify_certificate: check a certificate against the key certified by
  another certificate, optionally pinning the certified key
- extract_x25519_public / extract_ed25519_public: strict extraction of the
  certified key

Error Semantics:
- Any structural decoding failure raises CborError
- An invalid signature returns False
- An unusable verifying key, unsupported algorithm or expected-key mismatch
  raises CryptoError(VERIFICATION_FAILURE)
"""

from typing import Any, Optional, Union

import cbor2
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PublicKey

from provisioning.certificates.algorithms import CryptoProvider, get_default_provider
from provisioning.certificates.sign1 import Sign1Message
from provisioning.core.cose_key import CoseKey
from provisioning.core.errors import (
    CborError,
    CborErrorReason,
    CryptoError,
    CryptoErrorReason,
    ProvisioningError,
)
from provisioning.core.primitives import (
    decode_ed25519_public,
    decode_x25519_public,
    to_cose_key,
)
from provisioning.core.types import CborType
from provisioning.utils.logger import get_logger

logger = get_logger(__name__)

CertificateInput = Union[Sign1Message, bytes, cbor2.CBORTag, list]


def sign_public_key(
    signing_key: Any,
    target_public: Any,
    provider: Optional[CryptoProvider] = None,
) -> Sign1Message:
    """
    Create a COSE_Sign1 certificate over a public key.

    Args:
        signing_key: Ed25519 private key (P-256 private keys sign with ES256)
        target_public: Key to certify: X25519/Ed25519/P-256 public key or a
            COSE key (private parameters are never included)
        provider: Signature capability object (default provider if None)

    Returns:
        Sign1Message: Certificate with protected header {alg: EdDSA}

    Raises:
        CryptoError: SIGNING_FAILURE if the certificate cannot be signed
    """
    if provider is None:
        provider = get_default_provider()

    try:
        payload = to_cose_key(target_public).encode()
    except (TypeError, ValueError) as e:
        raise CryptoError(
            "Cannot encode key to be certified", CryptoErrorReason.SIGNING_FAILURE
        ) from e

    certificate = provider.sign(payload, signing_key)
    logger.debug("Signed certificate with alg %s", certificate.algorithm)
    return certificate


# Alternate name for certificate builders
create_certificate = sign_public_key


def verify_certificate(
    verifying_cert: CertificateInput,
    cert_to_verify: CertificateInput,
    expected_key: Any = None,
    provider: Optional[CryptoProvider] = None,
) -> bool:
    """
    Check that cert_to_verify is signed by the key certified in verifying_cert.

    Args:
        verifying_cert: Certificate whose payload is the verifying key
        cert_to_verify: Certificate to check
        expected_key: Optional key (COSE key, its CBOR encoding or a public
            key object) that the payload of cert_to_verify must contain
        provider: Signature capability object (default provider if None)

    Returns:
        bool: True if verification succeeds, False if the signature is invalid

    Raises:
        CborError: DESERIALIZATION_ERROR if either certificate or its content
            cannot be decoded
        CryptoError: VERIFICATION_FAILURE if the signature cannot be checked
            or the certified key differs from expected_key
    """
    if provider is None:
        provider = get_default_provider()

    certificate = Sign1Message.decode(cert_to_verify)
    verifying_key = CoseKey.decode(Sign1Message.decode(verifying_cert).payload)

    try:
        if not provider.verify(certificate, verifying_key):
            return False
    except ProvisioningError as e:
        raise CryptoError(
            "Failed to validate certificate chain", CryptoErrorReason.VERIFICATION_FAILURE
        ) from e

    if expected_key is not None:
        _check_expected_key(certificate, expected_key)

    return True


# Short alias
verify = verify_certificate


def _check_expected_key(certificate: Sign1Message, expected_key: Any) -> None:
    verified_key = CoseKey.decode(certificate.payload)
    try:
        if isinstance(expected_key, (bytes, bytearray)):
            expected_key = CoseKey.decode(expected_key)
        expected = to_cose_key(expected_key)
    except TypeError as e:
        raise CborError(
            "Expected key cannot be converted to a COSE key",
            CborErrorReason.DESERIALIZATION_ERROR,
        ) from e

    for name, key in (("certified", verified_key), ("expected", expected)):
        if CborType.of(key.x) is not CborType.BYTE_STRING:
            raise CborError(
                f"{name} key x field does not have expected type",
                CborErrorReason.TYPE_MISMATCH,
                field="x",
                expected=CborType.BYTE_STRING,
                actual=CborType.of(key.x),
            )

    if verified_key.x != expected.x:
        logger.warning("Certified key does not match the expected key")
        raise CryptoError(
            "Key in certificate does not match the expected key",
            CryptoErrorReason.VERIFICATION_FAILURE,
            field="x",
            expected=expected.x,
            actual=verified_key.x,
        )


def extract_x25519_public(certificate: CertificateInput) -> X25519PublicKey:
    """
    Retrieve the X25519 key certified by a COSE_Sign1.

    The payload must be an OKP key with crv X25519 and alg
    ECDH-ES+HKDF-256; each deviating field raises its own error.

    Raises:
        CborError: DESERIALIZATION_ERROR for malformed input, TYPE_MISMATCH or
            INCORRECT_COSE_TYPE naming the offending field
        CryptoError: MALFORMED_KEY if x is not a valid X25519 key
    """
    message = Sign1Message.decode(certificate)
    return decode_x25519_public(CoseKey.decode(message.payload))


def extract_ed25519_public(certificate: CertificateInput) -> Ed25519PublicKey:
    """
    Retrieve the Ed25519 key certified by a COSE_Sign1.

    The payload must be an OKP key with crv Ed25519 and alg EdDSA.

    Raises:
        CborError: DESERIALIZATION_ERROR for malformed input, TYPE_MISMATCH or
            INCORRECT_COSE_TYPE naming the offending field
        CryptoError: MALFORMED_KEY if x is not a valid Ed25519 key
    """
    message = Sign1Message.decode(certificate)
    return decode_ed25519_public(CoseKey.decode(message.payload))
