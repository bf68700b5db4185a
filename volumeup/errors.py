################################################################################
# VOLUMEUP
#
# @file:        errors.py
# @module:      volumeup.errors
# @description: Exception hierarchy raised by the backup and restore workflows.
# @repository:  https://github.com/volumeup/volumeup
# @version:     1.0.0
#
# ------------------------------------------------------------------------------
# MIT License: see LICENSE or https://opensource.org/licenses/MIT
################################################################################

"""
Exceptions for VolumeUp.

Every error the workflows surface derives from VolumeUpError so the CLI
can catch one base class and exit with code 1.
"""


class VolumeUpError(Exception):
    """Base class for all VolumeUp errors."""


class VolumeNotFoundError(VolumeUpError):
    """The volume to back up does not exist."""


class BackupError(VolumeUpError):
    """Archive creation or the copy out of the worker failed."""


class RestoreError(VolumeUpError):
    """Archive validation, copy-in or extraction failed."""


class VolumeAlreadyExistsError(RestoreError):
    """Restore target exists and --force was not given."""


class RuntimeUnavailableError(VolumeUpError):
    """The Docker daemon could not be reached or rejected a call."""


class ConfigError(VolumeUpError):
    """The configuration file is missing or invalid."""
