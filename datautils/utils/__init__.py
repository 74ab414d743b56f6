"""
Утилиты datautils.
"""
from .logger_config import configure_logging, get_logger
from .config_manager import ConfigManager

__all__ = [
    'configure_logging',
    'get_logger',
    'ConfigManager',
]
