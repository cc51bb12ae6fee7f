"""
Provisioning Certificates Module

COSE_Sign1 public-key certificates and boot certificate chain validation.

Modules:
- sign1: COSE_Sign1 message model and wire codec
- algorithms: Signature algorithms and the CryptoProvider capability object
- signed_certificate: Certificate signing, verification and key extraction
- bcc: Boot certificate chain construction and validation

Standards Reference:
- RFC 8152 Section 4.2 - Signing with One Signer
"""

from .sign1 import (
    Sign1Message,
    build_sig_structure,
    encode_protected_header,
    decode_protected_header,
)
from .algorithms import (
    SignatureAlgorithm,
    EdDSA,
    ES256,
    CryptoProvider,
    get_default_provider,
)
from .signed_certificate import (
    sign_public_key,
    create_certificate,
    verify_certificate,
    verify,
    extract_x25519_public,
    extract_ed25519_public,
)
from .bcc import (
    validate_chain,
    validate_bcc,
    build_chain,
    encode_chain,
)

__all__ = [
    # COSE_Sign1
    'Sign1Message',
    'build_sig_structure',
    'encode_protected_header',
    'decode_protected_header',

    # Capability object
    'SignatureAlgorithm',
    'EdDSA',
    'ES256',
    'CryptoProvider',
    'get_default_provider',

    # Certificates
    'sign_public_key',
    'create_certificate',
    'verify_certificate',
    'verify',
    'extract_x25519_public',
    'extract_ed25519_public',

    # Boot certificate chain
    'validate_chain',
    'validate_bcc',
    'build_chain',
    'encode_chain',
]
