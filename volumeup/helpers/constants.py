"""
Constants used throughout the VolumeUp application.

This module defines all constant values used across different modules
to ensure consistency and ease of maintenance.
"""

import re
from pathlib import Path

# Version information
VERSION = "1.0.0"

# Default config paths
DEFAULT_CONFIG_PATHS = {
    'root': Path('/etc/volumeup/config.json'),
    'user': Path.home() / '.config' / 'volumeup' / 'config.json'
}
CONFIG_ENV_VAR = 'VOLUMEUP_CONFIG'

# Worker container
DEFAULT_WORKER_IMAGE = 'alpine:latest'
WORKER_KEEPALIVE_SECONDS = 3600
WORKER_STOP_TIMEOUT = 5
WORKER_LABEL = 'io.volumeup.worker'
WORKER_VOLUME_LABEL = 'io.volumeup.volume'

# Mount points inside the worker
BACKUP_MOUNT_PATH = '/backup_volume'
RESTORE_MOUNT_PATH = '/restore_volume'
CONTAINER_ARCHIVE_PATH = '/tmp/backup.tar.gz'
CONTAINER_STAGING_PATH = '/tmp/volumeup_staging'

# Archive naming
ARCHIVE_SUFFIX = '.tar.gz'
ARCHIVE_TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
HOST_TEMP_PREFIX = '.volumeup-'
HOST_TEMP_SUFFIX = '.partial'

# Anonymous volumes are named with a 64-char hex id
ANONYMOUS_VOLUME_PATTERN = re.compile(r'^[a-f0-9]{64}$')

# Docker client
DOCKER_CLIENT_TIMEOUT = 60
TRANSFER_CHUNK_SIZE = 1024 * 1024

# Disk space warning threshold (MB)
MIN_FREE_SPACE_MB = 512

# Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_LEVEL = 'WARNING'
