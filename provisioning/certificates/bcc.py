"""
Boot Certificate Chain (BCC) Validation

A BCC anchors a device key to a root key:

    Bcc = [
        root_key : COSE_Key,      -- self-declared root signing key
        device_cert : COSE_Sign1  -- payload: device public key, signed by root_key
    ]

Only this single link is validated. Chains made of further signed CWT
entries are rejected rather than partially checked.
"""

from typing import Any, List, Optional, Sequence, Union

import cbor2

from provisioning.certificates.algorithms import CryptoProvider, get_default_provider
from provisioning.certificates.signed_certificate import sign_public_key
from provisioning.certificates.sign1 import Sign1Message
from provisioning.config import CRYPTO_CONSTANTS
from provisioning.core.cose_key import CoseKey
from provisioning.core.errors import (
    CborError,
    CryptoError,
    CryptoErrorReason,
    ProvisioningError,
)
from provisioning.core.primitives import to_cose_key
from provisioning.core.types import CborType
from provisioning.utils.logger import get_logger

logger = get_logger(__name__)


def validate_chain(
    chain: Union[bytes, Sequence[Any]],
    provider: Optional[CryptoProvider] = None,
) -> bool:
    """
    Validate the root -> device link of a boot certificate chain.

    Args:
        chain: CBOR-encoded chain or decoded sequence [root COSE key, COSE_Sign1]
        provider: Signature capability object (default provider if None)

    Returns:
        bool: True if chain[1] is signed by chain[0], False on signature mismatch

    Raises:
        CryptoError: VERIFICATION_FAILURE for malformed chains, including any
            chain whose length is not 2
    """
    if provider is None:
        provider = get_default_provider()

    try:
        entries = _decode_chain(chain)
    except ProvisioningError as e:
        raise CryptoError(
            "Failed to decode boot certificate chain", CryptoErrorReason.VERIFICATION_FAILURE
        ) from e

    if len(entries) != CRYPTO_CONSTANTS.BCC_LENGTH:
        logger.warning("Rejecting boot certificate chain of length %d", len(entries))
        raise CryptoError(
            "Unsupported boot certificate chain length",
            CryptoErrorReason.VERIFICATION_FAILURE,
            field="chain",
            expected=CRYPTO_CONSTANTS.BCC_LENGTH,
            actual=len(entries),
        )

    try:
        root_key = CoseKey.decode(entries[0])
        device_cert = Sign1Message.decode(entries[1])
        valid = provider.verify(device_cert, root_key)
    except ProvisioningError as e:
        raise CryptoError(
            "Failed to validate first BCC cert with key", CryptoErrorReason.VERIFICATION_FAILURE
        ) from e

    if not valid:
        logger.warning("Boot certificate chain signature mismatch")
    return valid


# Shorter name kept for BCC call sites
validate_bcc = validate_chain


def build_chain(
    root_signing_key: Any,
    device_public: Any,
    root_public: Any = None,
    provider: Optional[CryptoProvider] = None,
) -> List[Any]:
    """
    Build a boot certificate chain on the device side.

    Args:
        root_signing_key: Root private key (Ed25519, or P-256 for ES256)
        device_public: Device key to certify (public key object or COSE key)
        root_public: Root COSE key to publish (derived from root_signing_key if None)
        provider: Signature capability object (default provider if None)

    Returns:
        list: [root COSE key map, COSE_Sign1 as CBOR tag], ready for cbor2.dumps
    """
    if root_public is None:
        root_public = root_signing_key.public_key()
    root_key = to_cose_key(root_public)
    device_cert = sign_public_key(root_signing_key, device_public, provider=provider)
    return [root_key.to_dict(), device_cert.to_cbor()]


def encode_chain(chain: Sequence[Any]) -> bytes:
    """CBOR-encode a chain built by build_chain()."""
    return cbor2.dumps(list(chain))


def _decode_chain(chain: Union[bytes, Sequence[Any]]) -> Sequence[Any]:
    if isinstance(chain, (bytes, bytearray)):
        try:
            chain = cbor2.loads(bytes(chain))
        except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
            raise CborError("Failed to decode boot certificate chain") from e
    if not isinstance(chain, (list, tuple)):
        raise CborError(
            "Boot certificate chain is not an array",
            field="chain",
            expected=CborType.ARRAY,
            actual=CborType.of(chain),
        )
    return chain
