"""Core business logic modules for VolumeUp."""

from .archive_naming import derive_filename, resolve_backup_path
from .backup_manager import BackupManager
from .ephemeral_worker import EphemeralWorker, WorkerState
from .restore_manager import RestoreManager
from .runtime_gateway import DockerGateway

__all__ = [
    'BackupManager',
    'DockerGateway',
    'EphemeralWorker',
    'RestoreManager',
    'WorkerState',
    'derive_filename',
    'resolve_backup_path',
]
