"""
Backup file naming for VolumeUp.

Names are `<base>_<YYYYMMDD_HHMMSS>.tar.gz` where base is the custom name
if given, else the volume name. Base names are used verbatim.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from ..helpers.constants import ARCHIVE_SUFFIX, ARCHIVE_TIMESTAMP_FORMAT
from ..helpers.logging import get_logger

logger = get_logger(__name__)


def derive_filename(
    volume_name: str,
    custom_name: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> str:
    """
    Build the archive file name for a backup.

    Args:
        volume_name: Name of the volume being backed up
        custom_name: Optional base name replacing the volume name
        timestamp: Backup time (defaults to now, one second resolution)

    Returns:
        File name, e.g. "data_20240102_030405.tar.gz"
    """
    if timestamp is None:
        timestamp = datetime.now()
    base = custom_name or volume_name
    return f"{base}_{timestamp.strftime(ARCHIVE_TIMESTAMP_FORMAT)}{ARCHIVE_SUFFIX}"


def resolve_backup_path(directory: Path, filename: str) -> Path:
    """
    Join directory and filename, never pointing at an existing file.

    Two backups within the same second would otherwise collide; a numeric
    suffix (_1, _2, ...) is inserted before the extension instead.
    """
    directory = Path(directory)
    candidate = directory / filename
    if not candidate.exists():
        return candidate

    stem = filename[:-len(ARCHIVE_SUFFIX)] if filename.endswith(ARCHIVE_SUFFIX) else filename
    suffix = ARCHIVE_SUFFIX if filename.endswith(ARCHIVE_SUFFIX) else ""
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1

    logger.warning(f"{directory / filename} already exists, using {candidate.name}")
    return candidate
