from .logger import ProvisioningLogger, get_logger

__all__ = [
    'ProvisioningLogger',
    'get_logger',
]
