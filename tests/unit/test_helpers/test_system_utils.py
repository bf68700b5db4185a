"""Unit tests for SystemUtils."""

from collections import namedtuple
from unittest.mock import patch

import pytest

from volumeup.helpers.system_utils import SystemUtils

DiskUsage = namedtuple("DiskUsage", "total used free percent")


@pytest.mark.unit
class TestDiskSpace:

    def test_uses_nearest_existing_parent(self, tmp_path):
        missing = tmp_path / "a" / "b"

        assert SystemUtils.nearest_existing_parent(missing) == tmp_path

    @patch("volumeup.helpers.system_utils.psutil.disk_usage")
    def test_free_space_in_mb(self, mock_usage, tmp_path):
        mock_usage.return_value = DiskUsage(0, 0, 3 * 1024 ** 2, 0)

        assert SystemUtils.get_available_disk_space_mb(tmp_path / "new") == 3.0
        mock_usage.assert_called_once_with(str(tmp_path))

    @patch("volumeup.helpers.system_utils.psutil.disk_usage", side_effect=OSError("denied"))
    def test_error_returns_none(self, _mock_usage, tmp_path):
        assert SystemUtils.get_available_disk_space_mb(tmp_path) is None


@pytest.mark.unit
class TestFormatting:

    @pytest.mark.parametrize("size,expected", [
        (0, "0.00 B"),
        (1536, "1.50 KB"),
        (5 * 1024 ** 3, "5.00 GB"),
    ])
    def test_format_bytes(self, size, expected):
        assert SystemUtils.format_bytes(size) == expected

    @pytest.mark.parametrize("seconds,expected", [
        (0.2, "0s"),
        (75, "1m 15s"),
        (3600, "1h"),
    ])
    def test_format_duration(self, seconds, expected):
        assert SystemUtils.format_duration(seconds) == expected
