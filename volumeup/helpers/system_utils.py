"""
System utilities module for VolumeUp.

Disk space checks and human-readable formatting for CLI output.
"""

from pathlib import Path
from typing import Optional

import psutil

from .logging import get_logger

logger = get_logger(__name__)


class SystemUtils:
    """
    System utilities for resource checks and formatting.
    """

    @staticmethod
    def nearest_existing_parent(path: Path) -> Path:
        """Return path itself or its closest ancestor that exists."""
        path = Path(path).expanduser().absolute()
        for candidate in (path, *path.parents):
            if candidate.exists():
                return candidate
        return Path(path.anchor or '/')

    @staticmethod
    def get_available_disk_space_mb(path: Path) -> Optional[float]:
        """
        Get available disk space in megabytes.

        Args:
            path: Path to check disk space for; may not exist yet

        Returns:
            Free space in MB, or None if it cannot be determined
        """
        target = SystemUtils.nearest_existing_parent(path)
        try:
            usage = psutil.disk_usage(str(target))
            return usage.free / (1024 ** 2)
        except OSError as e:
            logger.debug(f"Failed to get disk space for {target}: {e}")
            return None

    @staticmethod
    def format_bytes(size_bytes: float) -> str:
        """
        Format bytes into human-readable string.

        Args:
            size_bytes: Size in bytes

        Returns:
            Formatted string (e.g., "1.50 GB")
        """
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size_bytes < 1024.0:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024.0
        return f"{size_bytes:.2f} PB"

    @staticmethod
    def format_duration(seconds: float) -> str:
        """
        Format duration into human-readable string.

        Args:
            seconds: Duration in seconds

        Returns:
            Formatted string (e.g., "2h 15m 30s")
        """
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)

        parts = []
        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
        if secs > 0 or not parts:
            parts.append(f"{secs}s")

        return " ".join(parts)
