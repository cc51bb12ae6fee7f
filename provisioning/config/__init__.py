"""
Provisioning Configuration Package

Centralizes protocol constants and logging settings.
"""

from .crypto_config import (
    CRYPTO_CONSTANTS,
    LOGGING_SETTINGS,
    CryptoConstants,
    LoggingSettings,
    load_logging_settings,
)

__all__ = [
    'CRYPTO_CONSTANTS',
    'LOGGING_SETTINGS',
    'CryptoConstants',
    'LoggingSettings',
    'load_logging_settings',
]
