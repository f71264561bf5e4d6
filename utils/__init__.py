from .logger import setup_logger
from .validators import InputValidator

__all__ = [
    'setup_logger',
    'InputValidator',
]
