"""Helper modules and utilities for VolumeUp."""

from .config import VolumeUpConfig
from .constants import VERSION, DEFAULT_CONFIG_PATHS
from .logging import get_logger, log_manager
from .system_utils import SystemUtils

__all__ = [
    'VolumeUpConfig',
    'VERSION',
    'DEFAULT_CONFIG_PATHS',
    'get_logger',
    'log_manager',
    'SystemUtils',
]
