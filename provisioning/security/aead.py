"""
AES-GCM Authenticated Encryption.

Encrypts provisioning payloads under keys from the directional key agreement.

Security Properties:
- Authenticated Encryption: AES-GCM with a 128-bit tag
- Associated data is authenticated but not encrypted
- Decryption failures are reported as one undifferentiated error and never
  return partial plaintext

Output Format:
    ciphertext || auth_tag (16 bytes)

IV uniqueness per key is the caller's responsibility.
"""

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from provisioning.config import CRYPTO_CONSTANTS
from provisioning.core.errors import CryptoError, CryptoErrorReason
from provisioning.utils.logger import get_logger

logger = get_logger(__name__)


def _check_parameters(key: bytes, iv: bytes) -> None:
    if len(key) not in CRYPTO_CONSTANTS.AES_KEY_LENGTHS:
        raise ValueError(f"Invalid AES key length: {len(key)}")
    if len(iv) != CRYPTO_CONSTANTS.AES_GCM_IV_LENGTH:
        raise ValueError(
            f"Invalid IV length: {len(iv)} (expected {CRYPTO_CONSTANTS.AES_GCM_IV_LENGTH})"
        )


def encrypt(plaintext: bytes, aad: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Encrypt content with aad as associated authenticated data using AES-GCM.

    Args:
        plaintext: Data to encrypt
        aad: Associated data bound to the ciphertext
        key: AES key (16, 24 or 32 bytes)
        iv: 12-byte nonce, unique per key

    Returns:
        bytes: ciphertext || tag (16 bytes)

    Raises:
        CryptoError: ENCRYPTION_FAILURE on any cipher error

    Example:
        >>> key = bytes(32)
        >>> iv = bytes(12)
        >>> len(encrypt(b"secret", b"header", key, iv)) == len(b"secret") + 16
        True
    """
    try:
        _check_parameters(key, iv)
        return AESGCM(bytes(key)).encrypt(bytes(iv), bytes(plaintext), bytes(aad))
    except (ValueError, TypeError, OverflowError) as e:
        raise CryptoError("Encryption failure", CryptoErrorReason.ENCRYPTION_FAILURE) from e


def decrypt(ciphertext: bytes, aad: bytes, key: bytes, iv: bytes) -> bytes:
    """
    Decrypt content with aad as associated authenticated data using AES-GCM.

    Args:
        ciphertext: ciphertext || tag as produced by encrypt()
        aad: Associated data used at encryption time
        key: AES key (16, 24 or 32 bytes)
        iv: 12-byte nonce used at encryption time

    Returns:
        bytes: Decrypted plaintext

    Raises:
        CryptoError: DECRYPTION_FAILURE on authentication failure or
            malformed input. Callers must treat it as an integrity violation.
    """
    try:
        _check_parameters(key, iv)
        if len(ciphertext) < CRYPTO_CONSTANTS.AES_GCM_TAG_LENGTH:
            raise ValueError("Ciphertext shorter than the authentication tag")
        return AESGCM(bytes(key)).decrypt(bytes(iv), bytes(ciphertext), bytes(aad))
    except (InvalidTag, ValueError, TypeError, OverflowError) as e:
        logger.debug("AES-GCM decryption failed")
        raise CryptoError("Decryption failure", CryptoErrorReason.DECRYPTION_FAILURE) from e
