################################################################################
# VOLUMEUP
#
# @file:        types.py
# @module:      volumeup.types
# @description: Shared data models for volumes, mounts, exec results and outcomes.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
# ==============================================================================
# Notes:
# - VolumeInfo captures a Docker volume snapshot from the daemon
# - MountSpec describes the single bind mount of a worker container
# - BackupResult and RestoreResult are returned by the workflows
################################################################################

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from .helpers.constants import ANONYMOUS_VOLUME_PATTERN


# ---- Runtime DTOs ----

@dataclass
class VolumeInfo:
    name: str
    driver: str = "local"
    mountpoint: Optional[str] = None
    created_at: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def is_anonymous(self) -> bool:
        """True for volumes Docker named with a generated hex id."""
        return bool(ANONYMOUS_VOLUME_PATTERN.match(self.name))

    @classmethod
    def from_attrs(cls, attrs: Dict[str, Any]) -> "VolumeInfo":
        return cls(
            name=attrs.get("Name", ""),
            driver=attrs.get("Driver", "local"),
            mountpoint=attrs.get("Mountpoint"),
            created_at=attrs.get("CreatedAt"),
            labels=attrs.get("Labels") or {},
        )


@dataclass(frozen=True)
class MountSpec:
    volume_name: str
    container_path: str
    read_only: bool = False

    @property
    def mode(self) -> str:
        return "ro" if self.read_only else "rw"

    def to_volumes(self) -> Dict[str, Dict[str, str]]:
        """Docker SDK `volumes=` mapping for this mount."""
        return {self.volume_name: {"bind": self.container_path, "mode": self.mode}}


@dataclass
class ExecResult:
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


# ---- Workflow outcomes ----

@dataclass
class BackupResult:
    volume_name: str
    archive_path: Path
    size_bytes: int
    duration_seconds: float


@dataclass
class RestoreResult:
    volume_name: str
    archive_path: Path
    volume_created: bool
    duration_seconds: float
