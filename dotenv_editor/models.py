"""Data models for the .env editor."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

BACKUP_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"


@dataclass
class BackupRecord:
    """A timestamped copy of an env file on disk."""

    path: Path
    modified: float

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def timestamp(self) -> datetime | None:
        """Parse the trailing 'YYYY-MM-DD-HH-MM-SS' suffix of the file name."""
        suffix = self.path.name.rsplit(".", 1)[-1]
        try:
            return datetime.strptime(suffix, BACKUP_TIME_FORMAT)
        except ValueError:
            return None

    def as_dict(self) -> dict:
        ts = self.timestamp
        return {
            "name": self.name,
            "modified": self.modified,
            "timestamp": ts.isoformat() if ts else None,
        }
