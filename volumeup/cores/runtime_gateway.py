################################################################################
# VOLUMEUP
#
# @file:        runtime_gateway.py
# @module:      volumeup.cores.runtime_gateway
# @description: Minimal Docker SDK surface used by the backup/restore workflows.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
# ==============================================================================
# Notes:
# - Every daemon failure is re-raised as RuntimeUnavailableError
# - Commands are passed as argv lists, never through a shell string
# - Files cross the host/container boundary via the archive API
################################################################################

"""
Docker gateway for VolumeUp.

Thin, synchronous wrapper around the Docker SDK exposing only what the
workflows need: volume lookup/creation, container lifecycle, exec and
single-file copies in both directions.
"""

from __future__ import annotations

import io
import os
import posixpath
import shutil
import tarfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional

import docker
import requests
from docker.errors import DockerException, ImageNotFound, NotFound
from docker.models.containers import Container

from ..errors import RuntimeUnavailableError
from ..helpers.constants import DOCKER_CLIENT_TIMEOUT, TRANSFER_CHUNK_SIZE
from ..helpers.logging import get_logger
from ..types import ExecResult, MountSpec, VolumeInfo

logger = get_logger(__name__)

_DAEMON_ERRORS = (DockerException, requests.exceptions.RequestException)


@contextmanager
def _daemon_call(action: str) -> Iterator[None]:
    """Translate SDK and transport errors into RuntimeUnavailableError."""
    try:
        yield
    except _DAEMON_ERRORS as e:
        logger.debug(f"Docker call failed ({action}): {e}")
        raise RuntimeUnavailableError(f"Docker failed to {action}: {e}") from e


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class _ChunkReader(io.RawIOBase):
    """Read-only file view over the chunk iterator returned by get_archive."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def _single_file_tar(source: BinaryIO, name: str) -> Iterator[bytes]:
    """
    Stream an uncompressed tar holding one regular file.

    The member is built from the open file descriptor, so a symlinked
    host path contributes the bytes of its target.
    """
    st = os.fstat(source.fileno())
    info = tarfile.TarInfo(name=name)
    info.size = st.st_size
    info.mode = st.st_mode & 0o7777
    info.mtime = int(st.st_mtime)
    yield info.tobuf(format=tarfile.PAX_FORMAT)

    remaining = info.size
    while remaining:
        chunk = source.read(min(TRANSFER_CHUNK_SIZE, remaining))
        if not chunk:
            raise RuntimeUnavailableError(f"{name} shrank while it was being copied")
        remaining -= len(chunk)
        yield chunk

    padding = -info.size % tarfile.BLOCKSIZE
    # data padding plus the two zero blocks closing the archive
    yield tarfile.NUL * (padding + 2 * tarfile.BLOCKSIZE)


class DockerGateway:
    """
    Capability surface over the Docker daemon.

    Args:
        client: Pre-built DockerClient (tests, custom transports)
        base_url: Daemon URL; None reads DOCKER_HOST and friends
        timeout: API request timeout in seconds
    """

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        base_url: Optional[str] = None,
        timeout: int = DOCKER_CLIENT_TIMEOUT,
    ):
        with _daemon_call("connect to the daemon"):
            if client is None:
                if base_url:
                    client = docker.DockerClient(base_url=base_url, timeout=timeout)
                else:
                    client = docker.from_env(timeout=timeout)
            client.ping()
        self.client = client
        logger.debug("Connected to Docker daemon")

    # --------------- Volumes ---------------

    def volume_exists(self, name: str) -> bool:
        """True iff a volume with exactly this name is registered."""
        with _daemon_call(f"inspect volume '{name}'"):
            try:
                volume = self.client.volumes.get(name)
            except NotFound:
                return False
        # volumes.get also resolves by id prefix on some daemons
        return volume.name == name

    def create_volume(self, name: str) -> VolumeInfo:
        with _daemon_call(f"create volume '{name}'"):
            volume = self.client.volumes.create(name=name)
        logger.info(f"Created volume '{name}'")
        return VolumeInfo.from_attrs(volume.attrs)

    def list_volumes(self) -> List[VolumeInfo]:
        with _daemon_call("list volumes"):
            volumes = self.client.volumes.list()
        return [VolumeInfo.from_attrs(v.attrs) for v in volumes]

    # --------------- Images ---------------

    def ensure_image(self, image: str, pull: bool = True) -> None:
        """
        Make sure the image is available locally.

        Raises:
            RuntimeUnavailableError: If missing and pull is disabled or fails
        """
        with _daemon_call(f"prepare image '{image}'"):
            try:
                self.client.images.get(image)
                return
            except ImageNotFound:
                if not pull:
                    raise
            logger.info(f"Pulling image '{image}'...")
            self.client.images.pull(image)

    # --------------- Containers ---------------

    def create_container(
        self,
        image: str,
        command: List[str],
        mount: MountSpec,
        labels: Optional[Dict[str, str]] = None,
    ) -> Container:
        """Allocate (but do not start) a container with one volume mount."""
        with _daemon_call(f"create container from '{image}'"):
            container = self.client.containers.create(
                image,
                command=command,
                volumes=mount.to_volumes(),
                labels=labels or {},
            )
        logger.debug(
            f"Created container {container.short_id} "
            f"({mount.volume_name}:{mount.container_path}:{mount.mode})"
        )
        return container

    def start_container(self, container: Container) -> None:
        with _daemon_call(f"start container {container.short_id}"):
            container.start()

    def stop_container(self, container: Container, timeout: int) -> None:
        with _daemon_call(f"stop container {container.short_id}"):
            container.stop(timeout=timeout)

    def remove_container(self, container: Container) -> None:
        with _daemon_call(f"remove container {container.short_id}"):
            container.remove(force=True)

    def exec(self, container: Container, argv: List[str]) -> ExecResult:
        """
        Run argv inside a running container and wait for it to exit.

        A non-zero exit code is returned, not raised.
        """
        with _daemon_call(f"exec {argv[0]!r} in container {container.short_id}"):
            exit_code, output = container.exec_run(argv, demux=True)
        stdout, stderr = output if output else (None, None)
        result = ExecResult(
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_code=exit_code if exit_code is not None else -1,
        )
        logger.debug(f"exec {argv} -> {result.exit_code}")
        return result

    # --------------- File transfer ---------------

    def copy_to_host(self, container: Container, container_path: str, host_path: Path) -> None:
        """
        Copy a single file out of the container, byte for byte.

        The tar stream from the daemon is unpacked as it arrives; nothing is
        spooled outside host_path.

        Raises:
            RuntimeUnavailableError: If the path is missing, not a regular file,
                or the daemon sends an unreadable archive
        """
        host_path = Path(host_path)
        with _daemon_call(f"copy {container_path} from container {container.short_id}"):
            stream, _stat = container.get_archive(container_path)
            try:
                with tarfile.open(fileobj=_ChunkReader(stream), mode="r|") as tar:
                    member = tar.next()
                    if member is None or not member.isfile():
                        raise RuntimeUnavailableError(
                            f"{container_path} in container {container.short_id} is not a regular file"
                        )
                    with open(host_path, "wb") as target:
                        shutil.copyfileobj(tar.extractfile(member), target, TRANSFER_CHUNK_SIZE)
            except tarfile.TarError as e:
                raise RuntimeUnavailableError(
                    f"Unreadable archive for {container_path} from container {container.short_id}: {e}"
                ) from e
        logger.debug(f"Copied {container.short_id}:{container_path} -> {host_path}")

    def copy_from_host(self, container: Container, host_path: Path, container_path: str) -> None:
        """
        Copy a single host file into the container at container_path.

        Symlinks are followed. The file is streamed to the daemon as a
        one-member tar.
        """
        directory, name = posixpath.split(container_path)
        with open(host_path, "rb") as source:
            with _daemon_call(f"copy {host_path} into container {container.short_id}"):
                accepted = container.put_archive(directory or "/", _single_file_tar(source, name))
        if not accepted:
            raise RuntimeUnavailableError(
                f"Docker rejected copy of {host_path} into container {container.short_id}"
            )
        logger.debug(f"Copied {host_path} -> {container.short_id}:{container_path}")
