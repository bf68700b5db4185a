"""
Restore workflow for VolumeUp.

Recreates a Docker volume from a .tar.gz archive produced by the backup
workflow. The archive is extracted into a staging directory inside the
worker first, so a corrupt archive never touches the volume. Only after a
clean extraction is the volume cleared and the staged tree copied in.
"""

import os
import time
from pathlib import Path
from typing import Optional

from ..errors import RestoreError, RuntimeUnavailableError, VolumeAlreadyExistsError
from ..helpers.config import VolumeUpConfig
from ..helpers.constants import (
    CONTAINER_ARCHIVE_PATH,
    CONTAINER_STAGING_PATH,
    RESTORE_MOUNT_PATH,
)
from ..helpers.logging import get_logger
from ..types import RestoreResult
from .ephemeral_worker import EphemeralWorker
from .runtime_gateway import DockerGateway

logger = get_logger(__name__)


class RestoreManager:
    """Restores one archive into one named volume per call."""

    def __init__(self, gateway: DockerGateway, config: Optional[VolumeUpConfig] = None):
        self.gateway = gateway
        self.config = config or VolumeUpConfig()

    def restore_volume(self, backup_file: Path, volume_name: str, force: bool = False) -> RestoreResult:
        """
        Replace the contents of volume_name with the archive backup_file.

        Args:
            backup_file: Path to a .tar.gz created by a backup
            volume_name: Target volume (created if missing)
            force: Allow restoring into an existing volume

        Raises:
            RestoreError: Archive unreadable, volume creation, copy or extraction failed
            VolumeAlreadyExistsError: Volume exists and force is False
        """
        start = time.monotonic()
        backup_file = Path(backup_file).expanduser()
        self._validate_backup_file(backup_file)

        try:
            exists = self.gateway.volume_exists(volume_name)
        except RuntimeUnavailableError as e:
            raise RestoreError(f"Failed to check volume '{volume_name}': {e}") from e
        if exists and not force:
            raise VolumeAlreadyExistsError(
                f"Volume '{volume_name}' already exists. Use --force to overwrite."
            )

        logger.info(
            f"Starting restore of volume '{volume_name}' from '{backup_file}'",
            extra={"volume": volume_name, "archive": str(backup_file), "force": force},
        )

        created = False
        if not exists:
            logger.info(f"Creating volume '{volume_name}'...")
            try:
                self.gateway.create_volume(volume_name)
            except RuntimeUnavailableError as e:
                raise RestoreError(f"Failed to create volume: {e}") from e
            created = True

        try:
            with EphemeralWorker.acquire(
                self.gateway,
                volume_name,
                RESTORE_MOUNT_PATH,
                read_only=False,
                settings=self.config.worker,
            ) as worker:
                try:
                    self._copy_archive_in(worker, backup_file)
                    self._extract_archive(worker)
                finally:
                    self._remove_container_archive(worker)
        except RuntimeUnavailableError as e:
            raise RestoreError(f"Restore of volume '{volume_name}' failed: {e}") from e

        duration = time.monotonic() - start
        logger.info(
            f"Volume '{volume_name}' has been restored",
            extra={"volume": volume_name, "duration_seconds": round(duration, 2)},
        )
        return RestoreResult(
            volume_name=volume_name,
            archive_path=backup_file,
            volume_created=created,
            duration_seconds=duration,
        )

    @staticmethod
    def _validate_backup_file(backup_file: Path) -> None:
        if not backup_file.exists():
            raise RestoreError(f"Backup file '{backup_file}' not found")
        if not backup_file.is_file():
            raise RestoreError(f"Backup file '{backup_file}' is not a regular file")
        if not os.access(backup_file, os.R_OK):
            raise RestoreError(f"Backup file '{backup_file}' is not readable")

    def _copy_archive_in(self, worker: EphemeralWorker, backup_file: Path) -> None:
        logger.info("Copying backup to container...")
        self.gateway.copy_from_host(worker.container, backup_file, CONTAINER_ARCHIVE_PATH)

        result = worker.exec(["test", "-f", CONTAINER_ARCHIVE_PATH])
        if not result.ok:
            raise RestoreError("Failed to copy backup file to container")

    def _extract_archive(self, worker: EphemeralWorker) -> None:
        logger.info("Extracting backup...")
        steps = [
            (["mkdir", "-p", CONTAINER_STAGING_PATH], "prepare staging directory"),
            (["tar", "-xzf", CONTAINER_ARCHIVE_PATH, "-C", CONTAINER_STAGING_PATH], "extract backup"),
            # volume is untouched up to here
            (["find", RESTORE_MOUNT_PATH, "-mindepth", "1", "-delete"], "clear volume"),
            (["cp", "-a", f"{CONTAINER_STAGING_PATH}/.", f"{RESTORE_MOUNT_PATH}/"], "copy restored files"),
        ]
        for argv, description in steps:
            logger.debug(f"Restore step: {description}")
            result = worker.exec(argv)
            if not result.ok:
                raise RestoreError(f"Failed to {description}: {result.stderr.strip()}")

    def _remove_container_archive(self, worker: EphemeralWorker) -> None:
        try:
            worker.exec(["rm", "-rf", CONTAINER_ARCHIVE_PATH, CONTAINER_STAGING_PATH])
        except RuntimeUnavailableError as e:
            logger.debug(f"Could not remove temporary files in worker: {e}")
