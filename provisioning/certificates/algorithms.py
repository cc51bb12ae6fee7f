"""
Signature Algorithms and the Crypto Provider

A CryptoProvider is an explicit capability object listing the COSE
signature algorithms available for signing and verifying certificates.
Callers construct it once and pass it to the certificate operations; no
process-wide algorithm registration takes place.

Supported algorithms:
- EdDSA (-8) on Ed25519: certificate signing and verification
- ES256 (-7) on P-256: legacy verification (and signing)
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from provisioning.certificates.sign1 import (
    Sign1Message,
    build_sig_structure,
    encode_protected_header,
)
from provisioning.core.cose_key import CoseKey
from provisioning.core.crypto import (
    sign_data_ecdsa_sha256,
    sign_data_ed25519,
    verify_signature_ecdsa_sha256,
    verify_signature_ed25519,
)
from provisioning.core.errors import CryptoError, CryptoErrorReason
from provisioning.core.primitives import decode_ed25519_public, decode_p256_public
from provisioning.core.types import HEADER_ALGORITHM, Algorithm, KeyLabel
from provisioning.utils.logger import get_logger

logger = get_logger(__name__)


class SignatureAlgorithm(ABC):
    """A COSE signature algorithm bound to one key type"""

    value: Algorithm

    @abstractmethod
    def accepts_private_key(self, private_key: Any) -> bool:
        """True if private_key can sign with this algorithm"""

    @abstractmethod
    def sign(self, data: bytes, private_key: Any) -> bytes:
        """Return the COSE signature of data"""

    @abstractmethod
    def verify(self, data: bytes, signature: bytes, public_key: Any) -> bool:
        """Return True if signature is valid for data"""

    @abstractmethod
    def public_key_from_cose(self, key: CoseKey) -> Any:
        """
        Build the verification key from a COSE key, or raise CborError /
        CryptoError if the key does not belong to this algorithm.
        """

    def _with_default_algorithm(self, key: CoseKey) -> CoseKey:
        # alg is optional on verification keys; when absent it is implied by the message
        if KeyLabel.ALG in key:
            return key
        params = key.to_dict()
        params[int(KeyLabel.ALG)] = int(self.value)
        return CoseKey(params)


class EdDSA(SignatureAlgorithm):
    value = Algorithm.EDDSA

    def accepts_private_key(self, private_key):
        return isinstance(private_key, Ed25519PrivateKey)

    def sign(self, data, private_key):
        return sign_data_ed25519(data, private_key)

    def verify(self, data, signature, public_key):
        return verify_signature_ed25519(data, signature, public_key)

    def public_key_from_cose(self, key):
        return decode_ed25519_public(self._with_default_algorithm(key))


class ES256(SignatureAlgorithm):
    value = Algorithm.ES256

    def accepts_private_key(self, private_key):
        return isinstance(private_key, ec.EllipticCurvePrivateKey) and isinstance(
            private_key.curve, ec.SECP256R1
        )

    def sign(self, data, private_key):
        return sign_data_ecdsa_sha256(data, private_key)

    def verify(self, data, signature, public_key):
        return verify_signature_ecdsa_sha256(data, signature, public_key)

    def public_key_from_cose(self, key):
        return decode_p256_public(self._with_default_algorithm(key))


class CryptoProvider:
    """
    Explicit set of signature algorithms used for COSE_Sign1 operations.

    Example:
        >>> provider = CryptoProvider()
        >>> cert = sign_public_key(root_key, device_public, provider=provider)
        >>> provider.verify(cert, root_cose_key)
        True
    """

    def __init__(self, algorithms: Optional[Iterable[SignatureAlgorithm]] = None):
        if algorithms is None:
            algorithms = (EdDSA(), ES256())
        self._algorithms: Dict[int, SignatureAlgorithm] = {
            int(algorithm.value): algorithm for algorithm in algorithms
        }

    @property
    def supported_algorithms(self):
        return sorted(self._algorithms)

    def get(self, algorithm_id: Any) -> SignatureAlgorithm:
        """
        Look up a signature algorithm by COSE identifier.

        Raises:
            CryptoError: NO_SUCH_ALGORITHM if the algorithm is not available
        """
        algorithm = None
        if isinstance(algorithm_id, int) and not isinstance(algorithm_id, bool):
            algorithm = self._algorithms.get(int(algorithm_id))
        if algorithm is None:
            raise CryptoError(
                "Unsupported signature algorithm",
                CryptoErrorReason.NO_SUCH_ALGORITHM,
                field="alg",
                expected=self.supported_algorithms,
                actual=algorithm_id,
            )
        return algorithm

    def for_private_key(self, private_key: Any) -> SignatureAlgorithm:
        """
        Select the algorithm matching a signing key.

        Raises:
            CryptoError: SIGNING_FAILURE for unsupported key types
        """
        for algorithm in self._algorithms.values():
            if algorithm.accepts_private_key(private_key):
                return algorithm
        raise CryptoError(
            "No signature algorithm for signing key",
            CryptoErrorReason.SIGNING_FAILURE,
            field="signing_key",
            expected=self.supported_algorithms,
            actual=type(private_key).__name__,
        )

    def sign(self, payload: bytes, private_key: Any) -> Sign1Message:
        """
        Create a COSE_Sign1 over payload.

        The protected header carries only the algorithm identifier.

        Raises:
            CryptoError: SIGNING_FAILURE if the key cannot sign
        """
        algorithm = self.for_private_key(private_key)
        protected = encode_protected_header({HEADER_ALGORITHM: int(algorithm.value)})
        try:
            signature = algorithm.sign(build_sig_structure(protected, payload), private_key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CryptoError("Failed to sign certificate", CryptoErrorReason.SIGNING_FAILURE) from e
        return Sign1Message(protected=protected, unprotected={}, payload=payload, signature=signature)

    def verify(self, message: Sign1Message, key: CoseKey) -> bool:
        """
        Check the signature of message against a COSE verification key.

        Returns:
            bool: False if the signature does not verify

        Raises:
            CborError: If the verification key is malformed or does not match
                the message algorithm
            CryptoError: If the algorithm is unavailable or the key unusable
        """
        algorithm = self.get(message.algorithm)
        public_key = algorithm.public_key_from_cose(CoseKey.decode(key))
        valid = algorithm.verify(message.to_be_signed(), message.signature, public_key)
        if not valid:
            logger.warning("COSE_Sign1 signature did not verify (alg %s)", int(algorithm.value))
        return valid


# Process-wide default, created once on first use
_default_provider = None
_default_provider_lock = threading.Lock()


def get_default_provider() -> CryptoProvider:
    """Get or create the shared default CryptoProvider."""
    global _default_provider
    if _default_provider is None:
        with _default_provider_lock:
            if _default_provider is None:
                _default_provider = CryptoProvider()
    return _default_provider
