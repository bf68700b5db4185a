"""Unit tests for DockerGateway against a mocked Docker SDK client."""

import io
import tarfile
from unittest.mock import MagicMock, patch

import pytest
import requests
from docker.errors import APIError, DockerException, ImageNotFound, NotFound

from volumeup.cores.runtime_gateway import DockerGateway
from volumeup.errors import RuntimeUnavailableError
from volumeup.types import MountSpec


def tar_bytes(name: str, payload: bytes) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        info = tarfile.TarInfo(name=name)
        info.size = len(payload)
        tar.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


@pytest.fixture
def gateway(mock_docker_client):
    return DockerGateway(client=mock_docker_client)


@pytest.mark.unit
class TestConnection:

    def test_pings_on_init(self, mock_docker_client):
        DockerGateway(client=mock_docker_client)
        mock_docker_client.ping.assert_called_once()

    def test_unreachable_daemon(self, mock_docker_client):
        mock_docker_client.ping.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(RuntimeUnavailableError, match="connect to the daemon"):
            DockerGateway(client=mock_docker_client)

    def test_from_env_failure(self):
        with patch("docker.from_env", side_effect=DockerException("socket missing")):
            with pytest.raises(RuntimeUnavailableError, match="socket missing"):
                DockerGateway()

    def test_base_url_builds_client(self, mock_docker_client):
        with patch("docker.DockerClient", return_value=mock_docker_client) as factory:
            DockerGateway(base_url="unix:///run/docker.sock", timeout=5)

        factory.assert_called_once_with(base_url="unix:///run/docker.sock", timeout=5)


@pytest.mark.unit
class TestVolumes:

    def test_volume_exists(self, gateway, mock_docker_client):
        mock_docker_client.volumes.get.return_value = MagicMock(name="vol")
        mock_docker_client.volumes.get.return_value.name = "data"

        assert gateway.volume_exists("data") is True

    def test_volume_missing(self, gateway, mock_docker_client):
        mock_docker_client.volumes.get.side_effect = NotFound("no such volume")

        assert gateway.volume_exists("data") is False

    def test_volume_check_daemon_error(self, gateway, mock_docker_client):
        mock_docker_client.volumes.get.side_effect = APIError("server error")

        with pytest.raises(RuntimeUnavailableError):
            gateway.volume_exists("data")

    def test_create_volume(self, gateway, mock_docker_client):
        mock_docker_client.volumes.create.return_value.attrs = {"Name": "data", "Driver": "local"}

        info = gateway.create_volume("data")

        mock_docker_client.volumes.create.assert_called_once_with(name="data")
        assert info.name == "data"
        assert info.driver == "local"

    def test_create_volume_rejected(self, gateway, mock_docker_client):
        mock_docker_client.volumes.create.side_effect = APIError("conflict")

        with pytest.raises(RuntimeUnavailableError, match="create volume 'data'"):
            gateway.create_volume("data")

    def test_list_volumes(self, gateway, mock_docker_client):
        vol = MagicMock()
        vol.attrs = {"Name": "a" * 64, "Driver": "local"}
        mock_docker_client.volumes.list.return_value = [vol]

        volumes = gateway.list_volumes()

        assert volumes[0].is_anonymous


@pytest.mark.unit
class TestImages:

    def test_present_image_is_not_pulled(self, gateway, mock_docker_client):
        gateway.ensure_image("alpine:latest")
        mock_docker_client.images.pull.assert_not_called()

    def test_missing_image_is_pulled(self, gateway, mock_docker_client):
        mock_docker_client.images.get.side_effect = ImageNotFound("missing")

        gateway.ensure_image("alpine:latest")

        mock_docker_client.images.pull.assert_called_once_with("alpine:latest")

    def test_missing_image_without_pull(self, gateway, mock_docker_client):
        mock_docker_client.images.get.side_effect = ImageNotFound("missing")

        with pytest.raises(RuntimeUnavailableError):
            gateway.ensure_image("alpine:latest", pull=False)


@pytest.mark.unit
class TestContainers:

    def test_create_container_mount(self, gateway, mock_docker_client):
        gateway.create_container(
            "alpine:latest", ["sleep", "3600"], MountSpec("data", "/backup_volume", True), {"k": "v"}
        )

        mock_docker_client.containers.create.assert_called_once_with(
            "alpine:latest",
            command=["sleep", "3600"],
            volumes={"data": {"bind": "/backup_volume", "mode": "ro"}},
            labels={"k": "v"},
        )

    def test_lifecycle_calls(self, gateway):
        container = MagicMock()

        gateway.start_container(container)
        gateway.stop_container(container, timeout=3)
        gateway.remove_container(container)

        container.start.assert_called_once()
        container.stop.assert_called_once_with(timeout=3)
        container.remove.assert_called_once_with(force=True)

    def test_lifecycle_error_is_wrapped(self, gateway):
        container = MagicMock()
        container.stop.side_effect = APIError("already stopped")

        with pytest.raises(RuntimeUnavailableError) as exc_info:
            gateway.stop_container(container, timeout=3)

        assert isinstance(exc_info.value.__cause__, APIError)

    def test_exec_returns_decoded_result(self, gateway):
        container = MagicMock()
        container.exec_run.return_value = (1, (b"out", b"tar: error"))

        result = gateway.exec(container, ["tar", "-czf", "/tmp/x"])

        container.exec_run.assert_called_once_with(["tar", "-czf", "/tmp/x"], demux=True)
        assert result.stdout == "out"
        assert result.stderr == "tar: error"
        assert result.exit_code == 1
        assert not result.ok

    def test_exec_without_output(self, gateway):
        container = MagicMock()
        container.exec_run.return_value = (0, None)

        result = gateway.exec(container, ["true"])

        assert result.ok
        assert result.stdout == ""
        assert result.stderr == ""


@pytest.mark.unit
class TestFileTransfer:

    def test_copy_to_host_is_byte_exact(self, gateway, tmp_path):
        payload = bytes(range(256)) * 100
        data = tar_bytes("backup.tar.gz", payload)
        container = MagicMock()
        container.get_archive.return_value = (iter([data[:1000], data[1000:]]), {})
        target = tmp_path / "out.tar.gz"

        gateway.copy_to_host(container, "/tmp/backup.tar.gz", target)

        container.get_archive.assert_called_once_with("/tmp/backup.tar.gz")
        assert target.read_bytes() == payload

    def test_copy_to_host_missing_path(self, gateway, tmp_path):
        container = MagicMock()
        container.get_archive.side_effect = NotFound("no such file")

        with pytest.raises(RuntimeUnavailableError):
            gateway.copy_to_host(container, "/tmp/backup.tar.gz", tmp_path / "out")

        assert not (tmp_path / "out").exists()

    def test_copy_to_host_rejects_directories(self, gateway, tmp_path):
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w") as tar:
            info = tarfile.TarInfo(name="tmp")
            info.type = tarfile.DIRTYPE
            tar.addfile(info)
        container = MagicMock()
        container.get_archive.return_value = (iter([buf.getvalue()]), {})

        with pytest.raises(RuntimeUnavailableError, match="not a regular file"):
            gateway.copy_to_host(container, "/tmp", tmp_path / "out")

    def test_copy_to_host_unreadable_stream(self, gateway, tmp_path):
        container = MagicMock()
        container.get_archive.return_value = (iter([b"not a tar stream at all"]), {})

        with pytest.raises(RuntimeUnavailableError, match="Unreadable archive") as exc_info:
            gateway.copy_to_host(container, "/tmp/backup.tar.gz", tmp_path / "out")

        assert isinstance(exc_info.value.__cause__, tarfile.TarError)
        assert not (tmp_path / "out").exists()

    def test_copy_to_host_truncated_member(self, gateway, tmp_path):
        data = tar_bytes("backup.tar.gz", b"x" * 4096)
        container = MagicMock()
        container.get_archive.return_value = (iter([data[:1024]]), {})

        with pytest.raises(RuntimeUnavailableError, match="Unreadable archive"):
            gateway.copy_to_host(container, "/tmp/backup.tar.gz", tmp_path / "out")

    @staticmethod
    def _recording_put_archive(received):
        def _put_archive(path, data):
            payload = b"".join(data)
            with tarfile.open(fileobj=io.BytesIO(payload), mode="r:") as tar:
                member = tar.next()
                received["path"] = path
                received["name"] = member.name
                received["type"] = "file" if member.isfile() else "other"
                received["payload"] = tar.extractfile(member).read()
            return True
        return _put_archive

    def test_copy_from_host(self, gateway, tmp_path):
        source = tmp_path / "archive.tar.gz"
        source.write_bytes(b"archive-bytes")
        received = {}
        container = MagicMock()
        container.put_archive.side_effect = self._recording_put_archive(received)

        gateway.copy_from_host(container, source, "/tmp/backup.tar.gz")

        assert received == {
            "path": "/tmp",
            "name": "backup.tar.gz",
            "type": "file",
            "payload": b"archive-bytes",
        }

    def test_copy_from_host_follows_symlink(self, gateway, tmp_path):
        payload = bytes(range(256)) * 9
        real = tmp_path / "data_20240102_030405.tar.gz"
        real.write_bytes(payload)
        latest = tmp_path / "latest.tar.gz"
        latest.symlink_to(real)
        received = {}
        container = MagicMock()
        container.put_archive.side_effect = self._recording_put_archive(received)

        gateway.copy_from_host(container, latest, "/tmp/backup.tar.gz")

        assert received["type"] == "file"
        assert received["payload"] == payload

    def test_copy_from_host_daemon_error(self, gateway, tmp_path):
        source = tmp_path / "archive.tar.gz"
        source.write_bytes(b"x")
        container = MagicMock()
        container.put_archive.side_effect = APIError("no such container")

        with pytest.raises(RuntimeUnavailableError, match="into container"):
            gateway.copy_from_host(container, source, "/tmp/backup.tar.gz")

    def test_copy_from_host_rejected(self, gateway, tmp_path):
        source = tmp_path / "archive.tar.gz"
        source.write_bytes(b"x")
        container = MagicMock()
        container.put_archive.return_value = False

        with pytest.raises(RuntimeUnavailableError, match="rejected"):
            gateway.copy_from_host(container, source, "/tmp/backup.tar.gz")
