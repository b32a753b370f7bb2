"""Timestamped backups of env files and retention pruning."""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from dotenv_editor.exceptions import BackupDirectoryError
from dotenv_editor.models import BACKUP_TIME_FORMAT, BackupRecord

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_COUNT = 5


def _timestamp() -> str:
    return datetime.now().strftime(BACKUP_TIME_FORMAT)


def _backup_pattern(basename: str) -> re.Pattern:
    return re.compile(re.escape(basename) + r"\.\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2}")


def ensure_backup_dir(directory: Path) -> Path:
    """Create the backup directory if needed. Raises BackupDirectoryError."""
    directory = Path(directory)
    try:
        directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise BackupDirectoryError(directory, e.strerror or str(e)) from e
    if not directory.is_dir():
        raise BackupDirectoryError(directory, "not a directory")
    return directory


def create_backup(source: Path, directory: Path) -> Path:
    """Copy the on-disk source file to <directory>/<name>.<timestamp>."""
    target = Path(directory) / f"{source.name}.{_timestamp()}"
    shutil.copyfile(source, target)
    logger.info("Backed up %s to %s", source, target)
    return target


def list_backups(basename: str, directory: Path) -> list[BackupRecord]:
    """Backups of `basename` in `directory`, newest first."""
    pattern = _backup_pattern(basename)
    records = []
    for entry in Path(directory).iterdir():
        if not entry.is_file() or not pattern.fullmatch(entry.name):
            continue
        records.append(BackupRecord(path=entry, modified=entry.stat().st_mtime))
    # Names carry the timestamp, so they break ties between equal mtimes
    records.sort(key=lambda r: (r.modified, r.name), reverse=True)
    return records


def prune_backups(basename: str, directory: Path, keep: int) -> list[Path]:
    """Delete all but the `keep` most recent backups. Returns deleted paths."""
    records = list_backups(basename, directory)
    removed = []
    for record in records[keep:]:
        record.path.unlink()
        removed.append(record.path)
    if removed:
        logger.info("Removed %d old backup(s) of %s from %s", len(removed), basename, directory)
    return removed
