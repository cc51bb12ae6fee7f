"""
Core Cryptographic Operations

Provides the primitive operations the provisioning layers are built on:
- HKDF-SHA256 key derivation
- SHA-256 digests of public keys
- X25519 shared secret computation
- Ed25519 and ECDSA-P256 raw signature generation and verification

Standards Reference:
- RFC 5869 - HKDF
- RFC 7748 - X25519
- RFC 8032 - Ed25519
- RFC 8152 Section 8.1 - ECDSA signatures as fixed-length r || s
"""

from typing import Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from provisioning.config import CRYPTO_CONSTANTS
from provisioning.core.errors import CryptoError, CryptoErrorReason


# ============================================================================
# HKDF KEY DERIVATION (RFC 5869)
# ============================================================================


def derive_key_hkdf(
    input_key_material: bytes,
    length: int,
    info: bytes,
    salt: Optional[bytes] = None
) -> bytes:
    """
    Derive key using HKDF-SHA256.

    RFC 5869: HMAC-based Extract-and-Expand Key Derivation Function.
    A missing or empty salt is replaced by HashLen zero bytes (Section 2.2).

    Args:
        input_key_material: Input keying material (e.g., ECDH shared secret);
            a bytearray is used in place, not copied
        length: Desired output key length in bytes
        info: Context-specific information
        salt: Optional salt value (None or b"" = zero block)

    Returns:
        bytes: Derived key material

    Raises:
        ValueError: If length is outside 1..255*HashLen
        CryptoError: NO_SUCH_ALGORITHM if HMAC-SHA256 is unavailable
    """
    max_length = 255 * CRYPTO_CONSTANTS.HKDF_HASH_LENGTH
    if length < 1 or length > max_length:
        raise ValueError(f"Invalid output length: {length} (must be 1-{max_length})")

    if not salt:
        salt = None

    try:
        kdf = HKDF(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            info=info,
        )
        return kdf.derive(input_key_material)
    except UnsupportedAlgorithm as e:
        raise CryptoError(
            "HMAC-SHA256 not available for HKDF", CryptoErrorReason.NO_SUCH_ALGORITHM
        ) from e


# ============================================================================
# DIGESTS
# ============================================================================


def sha256_digest(data: bytes) -> bytes:
    """
    Compute SHA-256 over data.

    Raises:
        CryptoError: NO_SUCH_ALGORITHM if the digest provider is missing
    """
    try:
        digest = hashes.Hash(hashes.SHA256())
    except UnsupportedAlgorithm as e:
        raise CryptoError(
            "SHA-256 digest not available", CryptoErrorReason.NO_SUCH_ALGORITHM
        ) from e
    digest.update(data)
    return digest.finalize()


# ============================================================================
# X25519 (RFC 7748)
# ============================================================================


def compute_x25519_shared_secret(
    private_key: X25519PrivateKey,
    public_key: X25519PublicKey
) -> bytes:
    """
    Compute the raw X25519 shared secret.

    Args:
        private_key: Local X25519 private key
        public_key: Remote X25519 public key

    Returns:
        bytes: Shared secret (32 bytes)

    Raises:
        CryptoError: MALFORMED_KEY if the peer key yields an all-zero secret
            or the inputs are not X25519 keys, NO_SUCH_ALGORITHM if X25519
            is unsupported by the backend
    """
    if not isinstance(private_key, X25519PrivateKey) or not isinstance(public_key, X25519PublicKey):
        raise CryptoError(
            "X25519 agreement requires X25519 keys", CryptoErrorReason.MALFORMED_KEY
        )
    try:
        return private_key.exchange(public_key)
    except UnsupportedAlgorithm as e:
        raise CryptoError(
            "Missing ECDH algorithm provider", CryptoErrorReason.NO_SUCH_ALGORITHM
        ) from e
    except ValueError as e:
        raise CryptoError(
            "Derived ECDH key is malformed", CryptoErrorReason.MALFORMED_KEY
        ) from e


# ============================================================================
# SIGNATURE OPERATIONS
# ============================================================================


def sign_data_ed25519(data: bytes, private_key: Ed25519PrivateKey) -> bytes:
    """
    Sign data with Ed25519 (PureEdDSA).

    Returns:
        bytes: 64-byte signature
    """
    return private_key.sign(data)


def verify_signature_ed25519(
    data: bytes,
    signature: bytes,
    public_key: Ed25519PublicKey
) -> bool:
    """
    Verify an Ed25519 signature.

    Returns:
        bool: True if signature is valid, False otherwise
    """
    try:
        public_key.verify(signature, data)
        return True
    except InvalidSignature:
        return False


def sign_data_ecdsa_sha256(data: bytes, private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """
    Sign data using ECDSA with SHA-256.

    COSE carries ECDSA signatures as r || s, each left-padded to the
    coordinate size, instead of DER.

    Args:
        data: Data to sign
        private_key: ECDSA private key (NIST P-256)

    Returns:
        bytes: Raw ECDSA signature (64 bytes: r || s)
    """
    der_signature = private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der_signature)
    size = CRYPTO_CONSTANTS.P256_COORDINATE_LENGTH
    return r.to_bytes(size, byteorder='big') + s.to_bytes(size, byteorder='big')


def verify_signature_ecdsa_sha256(
    data: bytes,
    signature: bytes,
    public_key: ec.EllipticCurvePublicKey
) -> bool:
    """
    Verify ECDSA-SHA256 signature in raw r || s format.

    Returns:
        bool: True if signature is valid, False otherwise
    """
    size = CRYPTO_CONSTANTS.P256_COORDINATE_LENGTH
    if len(signature) != 2 * size:
        return False

    r = int.from_bytes(signature[:size], byteorder='big')
    s = int.from_bytes(signature[size:], byteorder='big')
    if r == 0 or s == 0:
        return False

    try:
        public_key.verify(encode_dss_signature(r, s), data, ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False


def wipe(buffer: Union[bytearray, memoryview]) -> None:
    """Overwrite a mutable secret buffer with zeros."""
    for i in range(len(buffer)):
        buffer[i] = 0
