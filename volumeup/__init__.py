################################################################################
# VOLUMEUP
#
# @file:        __init__.py
# @module:      volumeup
# @description: Exposes version, errors, and the backup/restore managers.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
################################################################################

"""
VolumeUp: back up and restore Docker volumes through a throwaway container.
"""

from .helpers.constants import VERSION

__version__ = VERSION

from .errors import (
    VolumeUpError,
    VolumeNotFoundError,
    BackupError,
    RestoreError,
    VolumeAlreadyExistsError,
    RuntimeUnavailableError,
    ConfigError,
)
from .types import VolumeInfo, MountSpec, ExecResult, BackupResult, RestoreResult
from .helpers.config import VolumeUpConfig
from .helpers.logging import get_logger, log_manager
from .cores import BackupManager, RestoreManager, DockerGateway, EphemeralWorker

__all__ = [
    "VERSION",
    "VolumeUpError",
    "VolumeNotFoundError",
    "BackupError",
    "RestoreError",
    "VolumeAlreadyExistsError",
    "RuntimeUnavailableError",
    "ConfigError",
    "VolumeInfo",
    "MountSpec",
    "ExecResult",
    "BackupResult",
    "RestoreResult",
    "VolumeUpConfig",
    "BackupManager",
    "RestoreManager",
    "DockerGateway",
    "EphemeralWorker",
    "get_logger",
    "log_manager",
]
