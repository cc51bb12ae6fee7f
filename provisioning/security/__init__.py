"""
Provisioning Security Operations

This module provides the session-key operations of the provisioning protocol:
- X25519 key agreement with directional (send/receive) key derivation
- AES-GCM authenticated encryption/decryption

Standards Reference:
- RFC 7748 - Elliptic Curves for Security (X25519)
- RFC 5869 - HKDF
- NIST SP 800-38D - Galois/Counter Mode
"""

from .key_agreement import (
    X25519KeyPair,
    generate_x25519_keypair,
    derive_shared_secret,
    build_party,
    build_kdf_context,
    derive_send_key,
    derive_receive_key,
)
from .aead import encrypt, decrypt

__all__ = [
    # Key agreement
    "X25519KeyPair",
    "generate_x25519_keypair",
    "derive_shared_secret",
    "build_party",
    "build_kdf_context",
    "derive_send_key",
    "derive_receive_key",

    # AES-GCM
    "encrypt",
    "decrypt",
]
