"""
Pytest Configuration and Shared Fixtures

Provides key material shared by all tests:
- X25519 key pairs for the device and the server
- Ed25519 root and device signing keys
- P-256 key pair for legacy ES256 paths
- A root-signed device certificate and boot certificate chain
"""

import os
import sys

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from provisioning.certificates import CryptoProvider, build_chain, sign_public_key
from provisioning.core import encode_ed25519_public
from provisioning.security import generate_x25519_keypair


@pytest.fixture
def device_keypair():
    """X25519 key pair of the device (new for every test)"""
    return generate_x25519_keypair()


@pytest.fixture
def server_keypair():
    """X25519 key pair of the server (new for every test)"""
    return generate_x25519_keypair()


@pytest.fixture
def root_signing_key():
    """Ed25519 root signing key"""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def other_signing_key():
    """Ed25519 key unrelated to the root"""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def p256_private_key():
    """NIST P-256 private key"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def provider():
    """Explicit capability object, as callers are expected to build it"""
    return CryptoProvider()


@pytest.fixture
def root_cert(root_signing_key, provider):
    """Self-signed root certificate whose payload is the root Ed25519 key"""
    return sign_public_key(
        root_signing_key,
        encode_ed25519_public(root_signing_key.public_key()),
        provider=provider,
    )


@pytest.fixture
def device_cert(root_signing_key, device_keypair, provider):
    """Device X25519 key certified by the root"""
    return sign_public_key(root_signing_key, device_keypair.public_key, provider=provider)


@pytest.fixture
def boot_chain(root_signing_key, device_keypair, provider):
    """Two-element boot certificate chain [root key, device certificate]"""
    return build_chain(root_signing_key, device_keypair.public_key, provider=provider)
