################################################################################
# VOLUMEUP
#
# @file:        backup_manager.py
# @module:      volumeup.cores.backup_manager
# @description: Archives a Docker volume to a .tar.gz file on the host.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
# ==============================================================================
# Notes:
# - Volume is mounted read-only into the worker
# - Archive is written to a temp file next to the target, then os.replace'd
# - Worker is released on every exit path via the context manager
################################################################################

"""
Backup workflow for VolumeUp.

validate volume -> start worker (ro) -> tar inside worker -> copy out to a
host temp file -> atomic move to target -> release worker.
"""

import os
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..errors import BackupError, RuntimeUnavailableError, VolumeNotFoundError
from ..helpers.config import VolumeUpConfig
from ..helpers.constants import (
    BACKUP_MOUNT_PATH,
    CONTAINER_ARCHIVE_PATH,
    HOST_TEMP_PREFIX,
    HOST_TEMP_SUFFIX,
)
from ..helpers.logging import get_logger
from ..helpers.system_utils import SystemUtils
from ..types import BackupResult
from .archive_naming import derive_filename, resolve_backup_path
from .ephemeral_worker import EphemeralWorker
from .runtime_gateway import DockerGateway

logger = get_logger(__name__)


class BackupManager:
    """Backs up one named volume per call through an ephemeral worker."""

    def __init__(self, gateway: DockerGateway, config: Optional[VolumeUpConfig] = None):
        self.gateway = gateway
        self.config = config or VolumeUpConfig()

    def backup_volume(
        self,
        volume_name: str,
        backup_directory: Path,
        custom_name: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> BackupResult:
        """
        Archive the contents of volume_name into backup_directory.

        Args:
            volume_name: Docker volume to back up
            backup_directory: Host directory for the archive (created if missing)
            custom_name: Optional base name for the archive file
            timestamp: Override for the name timestamp (defaults to now)

        Returns:
            BackupResult with the final archive path

        Raises:
            VolumeNotFoundError: Volume does not exist (nothing is created)
            BackupError: Archiving, copying or a Docker call failed
        """
        start = time.monotonic()

        try:
            exists = self.gateway.volume_exists(volume_name)
        except RuntimeUnavailableError as e:
            raise BackupError(f"Failed to check volume '{volume_name}': {e}") from e
        if not exists:
            raise VolumeNotFoundError(f"Volume '{volume_name}' not found")

        backup_directory = Path(backup_directory).expanduser()
        target = resolve_backup_path(
            backup_directory, derive_filename(volume_name, custom_name, timestamp)
        )
        logger.info(
            f"Starting backup of volume '{volume_name}' to '{target}'",
            extra={"volume": volume_name, "target": str(target)},
        )
        self._check_free_space(backup_directory)

        try:
            with EphemeralWorker.acquire(
                self.gateway,
                volume_name,
                BACKUP_MOUNT_PATH,
                read_only=True,
                settings=self.config.worker,
            ) as worker:
                backup_directory.mkdir(parents=True, exist_ok=True)
                self._create_archive(worker)
                try:
                    self._copy_archive_out(worker, target)
                finally:
                    self._remove_container_archive(worker)
        except RuntimeUnavailableError as e:
            raise BackupError(f"Backup of volume '{volume_name}' failed: {e}") from e

        size = target.stat().st_size
        duration = time.monotonic() - start
        logger.info(
            f"Backup completed: {target} ({SystemUtils.format_bytes(size)})",
            extra={"volume": volume_name, "size_bytes": size},
        )
        return BackupResult(
            volume_name=volume_name,
            archive_path=target,
            size_bytes=size,
            duration_seconds=duration,
        )

    def _create_archive(self, worker: EphemeralWorker) -> None:
        logger.info("Creating backup archive...")
        result = worker.exec(
            ["tar", "-czf", CONTAINER_ARCHIVE_PATH, "-C", BACKUP_MOUNT_PATH, "."]
        )
        if not result.ok:
            raise BackupError(f"Failed to create tar archive: {result.stderr.strip()}")

    def _copy_archive_out(self, worker: EphemeralWorker, target: Path) -> None:
        """Copy the archive to a temp file beside target, then rename it into place."""
        logger.info("Copying backup to host...")
        fd, temp_name = tempfile.mkstemp(
            dir=target.parent, prefix=HOST_TEMP_PREFIX, suffix=HOST_TEMP_SUFFIX
        )
        os.close(fd)
        temp_path = Path(temp_name)
        try:
            self.gateway.copy_to_host(worker.container, CONTAINER_ARCHIVE_PATH, temp_path)
            if not temp_path.is_file() or temp_path.stat().st_size == 0:
                raise BackupError("Failed to copy backup file from container")
            os.replace(temp_path, target)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def _remove_container_archive(self, worker: EphemeralWorker) -> None:
        try:
            worker.exec(["rm", "-f", CONTAINER_ARCHIVE_PATH])
        except RuntimeUnavailableError as e:
            logger.debug(f"Could not remove {CONTAINER_ARCHIVE_PATH} in worker: {e}")

    def _check_free_space(self, directory: Path) -> None:
        threshold = self.config.backup.min_free_mb
        if not threshold:
            return
        free_mb = SystemUtils.get_available_disk_space_mb(directory)
        if free_mb is not None and free_mb < threshold:
            logger.warning(
                f"Only {free_mb:.0f} MB free at {directory} (threshold {threshold} MB)"
            )
