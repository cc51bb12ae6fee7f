"""
Provisioning Core Types and Utilities

This module provides the foundational types, constants, key encoding and
cryptographic primitives of the provisioning library.

Submodules:
- types: COSE registry values and enumerations
- errors: CborError / CryptoError with reason codes
- cose_key: CoseKey structured key object
- primitives: COSE key encoding and strict decoding
- crypto: HKDF, digests, X25519, Ed25519 and ECDSA primitives

Standards Reference:
- RFC 8152 - CBOR Object Signing and Encryption (COSE)
- RFC 5869 - HKDF
"""

# Re-export all core functionality for convenience
from .types import (
    # Constants
    COSE_SIGN1_TAG,
    SIGNATURE1_CONTEXT,
    HEADER_ALGORITHM,

    # Enums
    KeyLabel,
    KeyType,
    Algorithm,
    Curve,
    CborType,
    Party,
)

from .errors import (
    ProvisioningError,
    CborError,
    CborErrorReason,
    CryptoError,
    CryptoErrorReason,
)

from .cose_key import CoseKey

from .primitives import (
    public_key_to_raw,
    public_key_digest,
    raw_to_x25519_public,
    raw_to_ed25519_public,
    encode_x25519_public,
    cbor_encode_x25519_public,
    encode_ed25519_public,
    encode_p256_public,
    to_cose_key,
    decode_p256_public,
    decode_x25519_public,
    decode_ed25519_public,
)

from .crypto import (
    derive_key_hkdf,
    sha256_digest,
    compute_x25519_shared_secret,
    sign_data_ed25519,
    verify_signature_ed25519,
    sign_data_ecdsa_sha256,
    verify_signature_ecdsa_sha256,
    wipe,
)

__all__ = [
    # Constants
    "COSE_SIGN1_TAG",
    "SIGNATURE1_CONTEXT",
    "HEADER_ALGORITHM",

    # Enums
    "KeyLabel",
    "KeyType",
    "Algorithm",
    "Curve",
    "CborType",
    "Party",

    # Errors
    "ProvisioningError",
    "CborError",
    "CborErrorReason",
    "CryptoError",
    "CryptoErrorReason",

    # Key encoding
    "CoseKey",
    "public_key_to_raw",
    "public_key_digest",
    "raw_to_x25519_public",
    "raw_to_ed25519_public",
    "encode_x25519_public",
    "cbor_encode_x25519_public",
    "encode_ed25519_public",
    "encode_p256_public",
    "to_cose_key",
    "decode_p256_public",
    "decode_x25519_public",
    "decode_ed25519_public",

    # Crypto
    "derive_key_hkdf",
    "sha256_digest",
    "compute_x25519_shared_secret",
    "sign_data_ed25519",
    "verify_signature_ed25519",
    "sign_data_ecdsa_sha256",
    "verify_signature_ecdsa_sha256",
    "wipe",
]
