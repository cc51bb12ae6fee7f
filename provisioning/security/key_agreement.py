"""
X25519 Key Agreement with Directional Key Derivation.

Derives separate sender and receiver AES keys from one X25519 exchange.

Derivation Flow:
1. Compute the X25519 shared secret
2. Build a COSE_KDF_Context whose PartyUInfo is always the device key and
   whose PartyVInfo is always the server key
3. HKDF-SHA256 (zero salt) over the shared secret with the encoded context
   as info

The send key puts the caller's key in the device slot, the receive key puts
the peer's key there. What one side derives as its send key is therefore the
other side's receive key, the two sides never have to partition a nonce
space, and a message cannot be reflected back to the party that sent it.

Context Format (RFC 8152 Section 11.2):
    [ AlgorithmID: 3 (A256GCM),
      PartyUInfo: ["device", h'', device_public_key],
      PartyVInfo: ["server", h'', server_public_key],
      SuppPubInfo: [256, h''] ]
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import cbor2
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)

from provisioning.config import CRYPTO_CONSTANTS
from provisioning.core.crypto import compute_x25519_shared_secret, derive_key_hkdf, wipe
from provisioning.core.errors import CryptoError, CryptoErrorReason
from provisioning.core.primitives import public_key_digest, public_key_to_raw
from provisioning.core.types import Algorithm, Party
from provisioning.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class X25519KeyPair:
    """
    X25519 key pair used for one key agreement.

    The private key is excluded from repr().
    """

    private_key: X25519PrivateKey = field(repr=False)
    public_key: X25519PublicKey

    @classmethod
    def generate(cls) -> "X25519KeyPair":
        """Generate a fresh pair from the operating system CSPRNG."""
        try:
            private_key = X25519PrivateKey.generate()
        except UnsupportedAlgorithm as e:
            raise CryptoError(
                "X25519 provider not available", CryptoErrorReason.NO_SUCH_ALGORITHM
            ) from e
        return cls(private_key=private_key, public_key=private_key.public_key())

    @classmethod
    def from_private_key(cls, private_key: X25519PrivateKey) -> "X25519KeyPair":
        return cls(private_key=private_key, public_key=private_key.public_key())

    @property
    def public_bytes(self) -> bytes:
        return public_key_to_raw(self.public_key)


def generate_x25519_keypair() -> X25519KeyPair:
    """
    Generate an X25519 ECDH key pair.

    Returns:
        X25519KeyPair: Fresh key pair, nothing is persisted
    """
    return X25519KeyPair.generate()


def derive_shared_secret(own_private: X25519PrivateKey, peer_public: X25519PublicKey) -> bytes:
    """
    Generate the shared key material from ECDH.

    Args:
        own_private: Caller's X25519 private key
        peer_public: Other party's X25519 public key

    Returns:
        bytes: 32-byte shared secret for use in a KDF

    Raises:
        CryptoError: MALFORMED_KEY if the peer key is rejected,
            NO_SUCH_ALGORITHM if X25519 is unavailable
    """
    return compute_x25519_shared_secret(own_private, peer_public)


# ============================================================================
# KDF CONTEXT
# ============================================================================


def build_party(identity: str, public_key: bytes) -> List:
    """
    Build a PartyInfo entry: [identity, nonce (empty), other (public key)].
    """
    return [identity, b"", bytes(public_key)]


def build_kdf_context(party_u: List, party_v: List) -> bytes:
    """
    Encode the COSE_KDF_Context used as HKDF info.

    Args:
        party_u: PartyUInfo (device)
        party_v: PartyVInfo (server)

    Returns:
        bytes: Deterministic CBOR encoding of the context
    """
    context = [
        int(Algorithm.A256GCM),
        party_u,
        party_v,
        [CRYPTO_CONSTANTS.KDF_CONTEXT_KEY_BITS, b""],
    ]
    return cbor2.dumps(context, canonical=True)


# ============================================================================
# DIRECTIONAL KEYS
# ============================================================================


def derive_send_key(
    own_pair: X25519KeyPair,
    peer_public: X25519PublicKey,
    length: Optional[int] = None
) -> bytes:
    """
    Derive the sender key for an ECDH key agreement.

    The caller's public key goes into the device party, the other party's
    key into the server party.

    Args:
        own_pair: Caller's X25519 key pair
        peer_public: Other party's X25519 public key
        length: Output length in bytes (default: CRYPTO_CONSTANTS.DERIVED_KEY_LENGTH)

    Returns:
        bytes: Sender key

    Raises:
        CryptoError: If the agreement fails
    """
    context = build_kdf_context(
        build_party(Party.DEVICE.value, public_key_to_raw(own_pair.public_key)),
        build_party(Party.SERVER.value, public_key_to_raw(peer_public)),
    )
    return _derive_directional_key(own_pair, peer_public, context, length, "send")


def derive_receive_key(
    own_pair: X25519KeyPair,
    peer_public: X25519PublicKey,
    length: Optional[int] = None
) -> bytes:
    """
    Derive the receiver key for an ECDH key agreement.

    The other party's public key goes into the device party, the caller's
    key into the server party.

    Args:
        own_pair: Caller's X25519 key pair
        peer_public: Other party's X25519 public key
        length: Output length in bytes (default: CRYPTO_CONSTANTS.DERIVED_KEY_LENGTH)

    Returns:
        bytes: Receiver key

    Raises:
        CryptoError: If the agreement fails
    """
    context = build_kdf_context(
        build_party(Party.DEVICE.value, public_key_to_raw(peer_public)),
        build_party(Party.SERVER.value, public_key_to_raw(own_pair.public_key)),
    )
    return _derive_directional_key(own_pair, peer_public, context, length, "receive")


def _derive_directional_key(
    own_pair: X25519KeyPair,
    peer_public: X25519PublicKey,
    context: bytes,
    length: Optional[int],
    direction: str,
) -> bytes:
    if length is None:
        length = CRYPTO_CONSTANTS.DERIVED_KEY_LENGTH

    # Best effort: the bytes returned by exchange() cannot be cleared, only this copy
    key_material = bytearray(derive_shared_secret(own_pair.private_key, peer_public))
    try:
        key = derive_key_hkdf(key_material, length, context, salt=None)
    finally:
        wipe(key_material)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Derived %s key (%d bytes) for peer %s",
            direction,
            length,
            public_key_digest(peer_public)[:8].hex(),
        )
    return key
