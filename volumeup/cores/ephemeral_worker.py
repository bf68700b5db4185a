################################################################################
# VOLUMEUP
#
# @file:        ephemeral_worker.py
# @module:      volumeup.cores.ephemeral_worker
# @description: Scoped lifecycle of the short-lived helper container.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
################################################################################

"""
Ephemeral worker container.

One worker is created per backup/restore call, bound to a single volume,
and kept alive by a long sleep while the workflow execs into it. Use it
as a context manager so release() runs on every exit path:

    with EphemeralWorker.acquire(gateway, "data", "/backup_volume", read_only=True) as worker:
        worker.exec(["tar", "-czf", ...])
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from docker.models.containers import Container

from ..errors import RuntimeUnavailableError
from ..helpers.config import WorkerSettings
from ..helpers.constants import WORKER_LABEL, WORKER_VOLUME_LABEL
from ..helpers.logging import get_logger
from ..types import ExecResult, MountSpec
from .runtime_gateway import DockerGateway

logger = get_logger(__name__)


class WorkerState(str, Enum):
    UNSTARTED = "unstarted"
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"
    REMOVED = "removed"
    FAILED = "failed"


class EphemeralWorker:
    """Short-lived container owned by exactly one workflow call."""

    def __init__(self, gateway: DockerGateway, mount: MountSpec, settings: WorkerSettings):
        self.gateway = gateway
        self.mount = mount
        self.settings = settings
        self.container: Optional[Container] = None
        self.state = WorkerState.UNSTARTED
        self._released = False

    @property
    def id(self) -> Optional[str]:
        return self.container.id if self.container is not None else None

    @classmethod
    def acquire(
        cls,
        gateway: DockerGateway,
        volume_name: str,
        mount_path: str,
        read_only: bool,
        settings: Optional[WorkerSettings] = None,
    ) -> EphemeralWorker:
        """
        Create and start a worker with the volume mounted at mount_path.

        Raises:
            RuntimeUnavailableError: If the image, create or start step fails.
                A container that was created but failed to start is removed
                before the error propagates.
        """
        worker = cls(gateway, MountSpec(volume_name, mount_path, read_only), settings or WorkerSettings())
        worker._start()
        return worker

    def _start(self) -> None:
        settings = self.settings
        logger.info(
            f"Creating temporary container for volume '{self.mount.volume_name}'",
            extra={"volume": self.mount.volume_name, "mode": self.mount.mode},
        )
        try:
            self.gateway.ensure_image(settings.image, pull=settings.pull_missing_image)
            self.container = self.gateway.create_container(
                settings.image,
                ["sleep", str(settings.keepalive_seconds)],
                self.mount,
                labels={WORKER_LABEL: "true", WORKER_VOLUME_LABEL: self.mount.volume_name},
            )
        except RuntimeUnavailableError:
            self.state = WorkerState.FAILED
            raise
        self.state = WorkerState.CREATED

        try:
            self.gateway.start_container(self.container)
        except Exception:
            self.state = WorkerState.FAILED
            self._remove_quietly()
            raise
        self.state = WorkerState.RUNNING
        logger.debug(f"Worker {self.container.short_id} running")

    def exec(self, argv: List[str]) -> ExecResult:
        """Run argv inside the worker; the caller interprets exit_code."""
        if self.state is not WorkerState.RUNNING:
            raise RuntimeUnavailableError(f"Worker is not running (state: {self.state.value})")
        try:
            return self.gateway.exec(self.container, argv)
        except RuntimeUnavailableError:
            self.state = WorkerState.FAILED
            raise

    def release(self) -> None:
        """
        Stop and remove the container. Never raises.

        Failures are logged as warnings so they cannot mask the outcome of
        the workflow. Calling release() again is a no-op.
        """
        if self.container is None or self._released:
            return
        self._released = True

        short_id = self.container.short_id
        logger.info(f"Cleaning up temporary container {short_id}")
        try:
            self.gateway.stop_container(self.container, timeout=self.settings.stop_timeout)
            self.state = WorkerState.STOPPED
        except Exception as e:
            logger.warning(f"Failed to stop temporary container {short_id}: {e}")

        self._remove_quietly()

    def _remove_quietly(self) -> None:
        short_id = self.container.short_id
        try:
            self.gateway.remove_container(self.container)
            self.state = WorkerState.REMOVED
        except Exception as e:
            self.state = WorkerState.FAILED
            logger.warning(f"Failed to remove temporary container {short_id}: {e}")

    def __enter__(self) -> EphemeralWorker:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False
