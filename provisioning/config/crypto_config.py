"""
Provisioning Configuration - centralized constants

Collects the sizes, lengths and labels used throughout the library so that
interoperability parameters are changed in one place.

Usage:
    from provisioning.config import CRYPTO_CONSTANTS

    key = derive_send_key(pair, peer_public, length=CRYPTO_CONSTANTS.DERIVED_KEY_LENGTH)
"""

import logging
import os
import warnings
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class CryptoConstants:
    """
    Cryptographic parameters of the provisioning protocol.

    Attributes:
        DERIVED_KEY_LENGTH: Bytes produced by the directional key derivation.
            The peer derives 16 bytes on the wire, although the context
            advertises a 256-bit AES-GCM key.
        KDF_CONTEXT_KEY_BITS: keyDataLength carried in SuppPubInfo
        HKDF_HASH_LENGTH: Output size of the HKDF hash (SHA-256)
        AES_GCM_IV_LENGTH: Required IV size for AES-GCM
        AES_GCM_TAG_LENGTH: Authentication tag size appended to ciphertexts
        AES_KEY_LENGTHS: Accepted AES key sizes
        X25519_KEY_LENGTH: Raw X25519 public key size
        ED25519_KEY_LENGTH: Raw Ed25519 public key size
        P256_COORDINATE_LENGTH: Size of an EC2 x or y coordinate on P-256
        BCC_LENGTH: Number of entries in a supported boot certificate chain
    """

    DERIVED_KEY_LENGTH: int = 16
    KDF_CONTEXT_KEY_BITS: int = 256
    HKDF_HASH_LENGTH: int = 32

    AES_GCM_IV_LENGTH: int = 12
    AES_GCM_TAG_LENGTH: int = 16
    AES_KEY_LENGTHS: Tuple[int, ...] = (16, 24, 32)

    X25519_KEY_LENGTH: int = 32
    ED25519_KEY_LENGTH: int = 32
    P256_COORDINATE_LENGTH: int = 32

    BCC_LENGTH: int = 2


CRYPTO_CONSTANTS = CryptoConstants()


@dataclass(frozen=True)
class LoggingSettings:
    """
    Logger defaults used by ProvisioningLogger.

    Attributes:
        LEVEL: Minimum level for library loggers
        LOG_DIR: Directory for per-logger files (None disables file output)
        CONSOLE_OUTPUT: Write to stdout in addition to propagating
        FORMAT: Record format
        DATE_FORMAT: Timestamp format
    """

    LEVEL: int = logging.WARNING
    LOG_DIR: Optional[str] = None
    CONSOLE_OUTPUT: bool = False
    FORMAT: str = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def load_logging_settings(
    environ: Optional[Mapping[str, str]] = None,
    strict: bool = False,
) -> LoggingSettings:
    """
    Build LoggingSettings from environment variables.

    Recognized variables:
        PROVISIONING_LOG_LEVEL: Level name (DEBUG, INFO, ...) or number
        PROVISIONING_LOG_DIR: Directory for log files
        PROVISIONING_LOG_CONSOLE: "1"/"true"/"yes" to enable stdout output

    Args:
        environ: Mapping to read from (default: os.environ)
        strict: Raise on an unknown level instead of warning and keeping
            the default level

    Returns:
        LoggingSettings: Settings with defaults for unset variables

    Raises:
        ValueError: If strict and PROVISIONING_LOG_LEVEL is not a known level
    """
    if environ is None:
        environ = os.environ

    defaults = LoggingSettings()

    level = defaults.LEVEL
    raw_level = environ.get("PROVISIONING_LOG_LEVEL")
    if raw_level:
        if raw_level.isdigit():
            level = int(raw_level)
        else:
            parsed = logging.getLevelName(raw_level.upper())
            if isinstance(parsed, int):
                level = parsed
            elif strict:
                raise ValueError(f"Unknown log level: {raw_level}")
            else:
                warnings.warn(
                    f"Unknown log level {raw_level!r} in PROVISIONING_LOG_LEVEL, using "
                    f"{logging.getLevelName(defaults.LEVEL)}",
                    RuntimeWarning,
                    stacklevel=2,
                )

    console = environ.get("PROVISIONING_LOG_CONSOLE", "0").lower() in ("1", "true", "yes")

    return LoggingSettings(
        LEVEL=level,
        LOG_DIR=environ.get("PROVISIONING_LOG_DIR") or None,
        CONSOLE_OUTPUT=console,
    )


LOGGING_SETTINGS = load_logging_settings()
