#!/usr/bin/env python3
################################################################################
# VOLUMEUP
#
# @file:        config.py
# @module:      volumeup.helpers.config
# @description: Pydantic configuration models with JSON persistence
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
################################################################################

"""
Configuration for VolumeUp.

Type-safe, validated JSON configuration. Every section has defaults, so
running without a config file is the normal case.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_CONFIG_PATHS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_WORKER_IMAGE,
    DOCKER_CLIENT_TIMEOUT,
    MIN_FREE_SPACE_MB,
    WORKER_KEEPALIVE_SECONDS,
    WORKER_STOP_TIMEOUT,
)
from .logging import get_logger
from ..errors import ConfigError

logger = get_logger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class DockerSettings(BaseModel):
    """Connection to the Docker daemon"""

    base_url: Optional[str] = Field(
        default=None,
        description="Daemon URL (e.g. unix:///var/run/docker.sock); None = from environment"
    )
    timeout: int = Field(
        default=DOCKER_CLIENT_TIMEOUT,
        ge=1,
        description="API request timeout in seconds"
    )


class WorkerSettings(BaseModel):
    """Ephemeral worker container"""

    image: str = Field(
        default=DEFAULT_WORKER_IMAGE,
        description="Image providing sh, tar, find and cp"
    )
    keepalive_seconds: int = Field(
        default=WORKER_KEEPALIVE_SECONDS,
        ge=60,
        description="Duration of the keep-alive sleep inside the worker"
    )
    stop_timeout: int = Field(
        default=WORKER_STOP_TIMEOUT,
        ge=0,
        description="Seconds to wait for the worker to stop before it is killed"
    )
    pull_missing_image: bool = Field(
        default=True,
        description="Pull the worker image if it is not present locally"
    )

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: str) -> str:
        """Reject empty image references"""
        if not v or not v.strip():
            raise ValueError("Worker image cannot be empty")
        return v.strip()


class BackupSettings(BaseModel):
    """Backup behaviour"""

    min_free_mb: int = Field(
        default=MIN_FREE_SPACE_MB,
        ge=0,
        description="Warn when the destination has less free space (0 = disabled)"
    )


class LoggingSettings(BaseModel):
    """Logging configuration"""

    level: str = Field(default=DEFAULT_LOG_LEVEL)
    file: Optional[Path] = Field(default=None, description="Optional rotating log file")
    max_size_mb: int = Field(default=10, ge=1)
    backup_count: int = Field(default=3, ge=0)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate log level"""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: Any) -> Optional[Path]:
        """Convert string to Path, empty string to None"""
        if v in (None, ""):
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        return v


class VolumeUpConfig(BaseModel):
    """Main VolumeUp configuration"""

    version: str = Field(default="1.0", description="Config file version")
    docker: DockerSettings = Field(default_factory=DockerSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    backup: BackupSettings = Field(default_factory=BackupSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path) -> VolumeUpConfig:
        """
        Load configuration from JSON file.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            config = cls.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e
        logger.debug(f"Configuration loaded from {path}")
        return config

    @classmethod
    def get_default_path(cls) -> Path:
        """Get default configuration path"""
        if os.geteuid() == 0:  # Running as root
            return DEFAULT_CONFIG_PATHS['root']
        return DEFAULT_CONFIG_PATHS['user']

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> VolumeUpConfig:
        """
        Resolve the configuration to use.

        An explicit path must exist. Without one, the default location is
        used if present, otherwise built-in defaults apply.
        """
        if path is not None:
            return cls.load(Path(path).expanduser())

        default_path = cls.get_default_path()
        if default_path.exists():
            return cls.load(default_path)

        logger.debug("No configuration file found, using defaults")
        return cls()
