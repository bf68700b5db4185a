"""
Shared pytest fixtures for VolumeUp tests.

Provides a fake Docker gateway so workflows run without a daemon.
"""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from volumeup.cores.runtime_gateway import DockerGateway
from volumeup.helpers.config import VolumeUpConfig
from volumeup.helpers.logging import ROOT_LOGGER_NAME, log_manager
from volumeup.types import ExecResult

ARCHIVE_BYTES = b"\x1f\x8b\x08\x00fake-gzip-tar-payload"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep real config files and handler state out of every test."""
    monkeypatch.delenv("VOLUMEUP_CONFIG", raising=False)
    with patch.object(
        VolumeUpConfig, "get_default_path", return_value=tmp_path / "no-such-config.json"
    ):
        yield
    log_manager.reset()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def cli_runner():
    """Typer CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.id = "abc123def456" * 4
    container.short_id = "abc123def456"
    return container


@pytest.fixture
def fake_gateway(mock_container):
    """
    DockerGateway double.

    Defaults: every volume exists, every exec succeeds, copy_to_host
    writes ARCHIVE_BYTES and copy_from_host records the bytes it was given.
    """
    gateway = MagicMock(spec=DockerGateway)
    gateway.volume_exists.return_value = True
    gateway.create_container.return_value = mock_container
    gateway.exec.return_value = ExecResult(stdout="", stderr="", exit_code=0)
    gateway.copied_in = []

    def _copy_to_host(container, container_path, host_path):
        Path(host_path).write_bytes(ARCHIVE_BYTES)

    def _copy_from_host(container, host_path, container_path):
        gateway.copied_in.append(Path(host_path).read_bytes())

    gateway.copy_to_host.side_effect = _copy_to_host
    gateway.copy_from_host.side_effect = _copy_from_host
    return gateway


@pytest.fixture
def exec_argvs(fake_gateway):
    """Return a callable listing the argv of every exec issued so far."""
    def _argvs():
        return [c.args[1] for c in fake_gateway.exec.call_args_list]
    return _argvs


@pytest.fixture
def mock_docker_client():
    """Mock Docker SDK client for DockerGateway tests."""
    client = MagicMock()
    client.ping.return_value = True
    client.volumes.list.return_value = []
    return client


@pytest.fixture
def archive_bytes():
    """Payload the fake gateway hands out as the copied archive."""
    return ARCHIVE_BYTES
