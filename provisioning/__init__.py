"""
Remote provisioning trust-establishment library.

Key agreement and directional key derivation, AES-GCM payload protection,
COSE key encoding, COSE_Sign1 public-key certificates and boot certificate
chain validation.

Subpackages:
- core: COSE types, errors, key encoding and primitives
- security: X25519 key agreement and AES-GCM
- certificates: COSE_Sign1 certificates and BCC validation
- config: Protocol constants and logging settings
- utils: Logging
"""

__version__ = "0.1.0"

from provisioning.core import (
    CborError,
    CborErrorReason,
    CoseKey,
    CryptoError,
    CryptoErrorReason,
    ProvisioningError,
    decode_ed25519_public,
    decode_p256_public,
    decode_x25519_public,
    encode_ed25519_public,
    encode_p256_public,
    encode_x25519_public,
    public_key_digest,
    raw_to_ed25519_public,
    raw_to_x25519_public,
)
from provisioning.security import (
    X25519KeyPair,
    decrypt,
    derive_receive_key,
    derive_send_key,
    derive_shared_secret,
    encrypt,
    generate_x25519_keypair,
)
from provisioning.certificates import (
    CryptoProvider,
    Sign1Message,
    build_chain,
    extract_ed25519_public,
    extract_x25519_public,
    sign_public_key,
    validate_chain,
    verify_certificate,
)

__all__ = [
    "__version__",
    "CborError",
    "CborErrorReason",
    "CoseKey",
    "CryptoError",
    "CryptoErrorReason",
    "ProvisioningError",
    "decode_ed25519_public",
    "decode_p256_public",
    "decode_x25519_public",
    "encode_ed25519_public",
    "encode_p256_public",
    "encode_x25519_public",
    "public_key_digest",
    "raw_to_ed25519_public",
    "raw_to_x25519_public",
    "X25519KeyPair",
    "decrypt",
    "derive_receive_key",
    "derive_send_key",
    "derive_shared_secret",
    "encrypt",
    "generate_x25519_keypair",
    "CryptoProvider",
    "Sign1Message",
    "build_chain",
    "extract_ed25519_public",
    "extract_x25519_public",
    "sign_public_key",
    "validate_chain",
    "verify_certificate",
]
