################################################################################
# VOLUMEUP
#
# @file:        logging.py
# @module:      volumeup.helpers.logging
# @description: Central logger factory and handler configuration.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
################################################################################

"""
Logging setup for VolumeUp.

Modules obtain their logger via get_logger(__name__). The CLI calls
log_manager.configure() once at startup; until then records propagate
to the root logger untouched.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .constants import LOG_FORMAT, LOG_DATE_FORMAT, DEFAULT_LOG_LEVEL

ROOT_LOGGER_NAME = "volumeup"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the package root logger.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class LogManager:
    """Owns the handlers attached to the package root logger."""

    def __init__(self):
        self._handlers = []
        self.level = logging.getLevelName(DEFAULT_LOG_LEVEL)

    @property
    def root(self) -> logging.Logger:
        return logging.getLogger(ROOT_LOGGER_NAME)

    def configure(
        self,
        level: Union[str, int] = DEFAULT_LOG_LEVEL,
        log_file: Optional[Path] = None,
        max_size_mb: int = 10,
        backup_count: int = 3,
    ) -> None:
        """
        (Re)configure console and optional file logging.

        Args:
            level: Level name (DEBUG, INFO, WARNING, ERROR) or number
            log_file: Optional path for a rotating log file
            max_size_mb: Rotation size of the log file
            backup_count: Number of rotated files to keep

        Raises:
            ValueError: If the level name is unknown
        """
        numeric = self._parse_level(level)
        self.reset()

        root = self.root
        root.setLevel(numeric)
        root.propagate = False

        console_handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=numeric <= logging.DEBUG,
        )
        console_handler.setLevel(numeric)
        self._attach(console_handler)

        if log_file:
            log_file = Path(log_file).expanduser()
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
            # File always gets the full detail
            file_handler.setLevel(logging.DEBUG)
            root.setLevel(logging.DEBUG)
            self._attach(file_handler)

        self.level = numeric
        root.debug(f"Logging configured (level={logging.getLevelName(numeric)})")

    def reset(self) -> None:
        """Detach and close all handlers installed by configure()."""
        root = self.root
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.close()
        self._handlers = []

    def _attach(self, handler: logging.Handler) -> None:
        self.root.addHandler(handler)
        self._handlers.append(handler)

    @staticmethod
    def _parse_level(level: Union[str, int]) -> int:
        if isinstance(level, int):
            return level
        numeric = logging.getLevelName(str(level).upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        return numeric


log_manager = LogManager()
