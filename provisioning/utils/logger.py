"""
Centralized logger for the provisioning library.

Provides configurable logging with file and console output,
level filtering, and consistent formatting.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from provisioning.config import LOGGING_SETTINGS


class ProvisioningLogger:
    """
    Centralized logger factory with optional file and console output.
    """

    _loggers = {}

    @staticmethod
    def get_logger(
        name: str,
        log_dir: Optional[str] = None,
        level: Optional[int] = None,
        console_output: Optional[bool] = None,
    ) -> logging.Logger:
        """
        Get or create a configured logger.

        Without console or file output the logger keeps propagating, so the
        host application's logging configuration decides where records go.

        Args:
            name: Logger name (e.g. "provisioning.security.key_agreement")
            log_dir: Directory for log files (default: LOGGING_SETTINGS.LOG_DIR)
            level: Minimum level (default: LOGGING_SETTINGS.LEVEL)
            console_output: Also print to stdout (default: LOGGING_SETTINGS.CONSOLE_OUTPUT)

        Returns:
            Configured logger ready for use
        """
        if name in ProvisioningLogger._loggers:
            return ProvisioningLogger._loggers[name]

        if log_dir is None:
            log_dir = LOGGING_SETTINGS.LOG_DIR
        if level is None:
            level = LOGGING_SETTINGS.LEVEL
        if console_output is None:
            console_output = LOGGING_SETTINGS.CONSOLE_OUTPUT

        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()

        # [2026-10-19 14:30:45] [provisioning.core.crypto] [DEBUG] message
        formatter = logging.Formatter(
            fmt=LOGGING_SETTINGS.FORMAT, datefmt=LOGGING_SETTINGS.DATE_FORMAT
        )

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_path / f"{name}.log", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # Own handlers replace propagation to avoid duplicate records
        logger.propagate = not logger.handlers

        ProvisioningLogger._loggers[name] = logger
        return logger

    @staticmethod
    def set_level(name: str, level: int):
        """Changes log level for an existing logger."""
        if name in ProvisioningLogger._loggers:
            logger = ProvisioningLogger._loggers[name]
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)

    @staticmethod
    def clear_cache():
        """Clears logger cache."""
        ProvisioningLogger._loggers.clear()


def get_logger(name: str) -> logging.Logger:
    """Shortcut for ProvisioningLogger.get_logger with default settings."""
    return ProvisioningLogger.get_logger(name)
