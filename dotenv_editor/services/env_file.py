"""Read, edit and write a .env configuration file in place.

`EnvStore` keeps the file's original text and only rewrites the lines of
keys that were staged with `set()`; comments, blank lines and every other
line come back byte-identical. New keys are appended at the end.

Keys passed to `get`, `set`, `remove` and `only` are normalized: dots become
underscores and the result is upper-cased, so `db.host` and `DB_HOST` name
the same variable. Keys read from the file are kept exactly as written.

There is no locking. Two stores writing the same file (or the same backup
directory) at once can race, and a store must not be shared between threads.
"""

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from dotenv_editor.exceptions import EnvFileNotFoundError
from dotenv_editor.models import BackupRecord
from dotenv_editor.services.backup import (
    DEFAULT_BACKUP_COUNT,
    create_backup,
    ensure_backup_dir,
    list_backups,
    prune_backups,
)

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """`db.host` -> `DB_HOST`."""
    return key.replace(".", "_").upper()


def cast_value(value: Any) -> str:
    """Render a staged value the way it is written to the file."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, str) and (
        " " in value or (value.startswith("${") and value.endswith("}"))
    ):
        return f'"{value}"'
    return str(value)


def parse_env(raw: str) -> dict[str, str | None]:
    """Parse raw file content into an ordered {key: raw value} dict.

    Lines are split on "\\n" only. Empty lines and lines starting with "#"
    are skipped; a line without "=" maps to None. Later keys win.
    """
    result: dict[str, str | None] = {}
    for line in raw.split("\n"):
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        result[key] = value if sep else None
    return result


class EnvStore:
    """Staged editor for a single .env file."""

    def __init__(self, path: Path, keep_backup: bool = True):
        self.path = Path(path)
        self.keep_backup = keep_backup
        self.backup_count = DEFAULT_BACKUP_COUNT
        self._backup_dir: Path | None = None
        self._new_env: dict[str, Any] = {}
        self._read()

    @classmethod
    def load(cls, path, keep_backup: bool = True) -> "EnvStore":
        return cls(path, keep_backup=keep_backup)

    @classmethod
    def from_settings(cls, settings) -> "EnvStore":
        """Build a store for `settings.env_file` with its backup options applied."""
        store = cls(settings.env_file, keep_backup=settings.keep_backup)
        store.set_backup_count(settings.backup_count)
        if settings.backup_dir is not None:
            store.set_backup_dir(settings.backup_dir)
        return store

    def _read(self) -> None:
        if not self.path.is_file():
            raise EnvFileNotFoundError(self.path)
        # newline="" and surrogateescape keep untouched bytes exactly as read,
        # including "\r\n" and bytes that are not valid UTF-8
        with open(self.path, encoding="utf-8", errors="surrogateescape", newline="") as fh:
            self._raw = fh.read()
        self._env = parse_env(self._raw)
        logger.info("Loaded %d variable(s) from %s", len(self._env), self.path)

    def reload(self) -> "EnvStore":
        """Re-read the file from disk and drop everything staged."""
        self._new_env.clear()
        self._read()
        return self

    @property
    def raw(self) -> str:
        """File content as it was when loaded."""
        return self._raw

    @property
    def staged(self) -> dict[str, Any]:
        return dict(self._new_env)

    # --- Backup configuration ---

    def set_backup_dir(self, directory) -> "EnvStore":
        """Store backups in `directory`, creating it if needed.

        Raises BackupDirectoryError when it cannot be created.
        """
        self._backup_dir = ensure_backup_dir(Path(directory))
        return self

    @property
    def backup_dir(self) -> Path:
        if self._backup_dir is not None:
            return self._backup_dir
        return self.path.parent

    def set_backup_count(self, count: int) -> "EnvStore":
        if count < 1:
            raise ValueError("backup count must be at least 1")
        self.backup_count = count
        return self

    # --- Queries ---

    def get(self, key: str) -> Any:
        key = normalize_key(key)
        if key in self._new_env:
            return self._new_env[key]
        return self._env.get(key)

    def all(self) -> dict[str, Any]:
        """File variables in file order, staged values winning, new keys last."""
        merged = {key: self._new_env.get(key, value) for key, value in self._env.items()}
        for key, value in self._new_env.items():
            merged.setdefault(key, value)
        return merged

    def only(self, keys: Iterable[str]) -> dict[str, Any]:
        wanted = {normalize_key(k) for k in keys}
        return {k: v for k, v in self.all().items() if k in wanted}

    def has(self, key: str) -> bool:
        key = normalize_key(key)
        return key in self._new_env or key in self._env

    __contains__ = has

    # --- Mutations ---

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> "EnvStore":
        """Stage one variable, or every pair of a mapping."""
        if isinstance(key, Mapping):
            for k, v in key.items():
                self.set(k, v)
            return self
        key = normalize_key(key)
        self._new_env[key] = value
        logger.debug("Staged %s", key)
        return self

    def remove(self, key: str) -> "EnvStore":
        """Forget a variable in memory.

        Only the in-memory view changes. The key's line stays in the written
        file unless the key is set again, since rendering replaces staged keys
        and never deletes lines.
        """
        key = normalize_key(key)
        self._new_env.pop(key, None)
        self._env.pop(key, None)
        logger.debug("Removed %s", key)
        return self

    # --- Rendering and persistence ---

    def render(self) -> str:
        """Merge staged values into the original text."""
        replace: list[tuple[str, str]] = []
        append: list[str] = []
        for key, value in self._new_env.items():
            line = f"{key}={cast_value(value)}"
            if key in self._env:
                replace.append((f"{key}={self._env[key] or ''}", line))
            else:
                append.append(line)

        # Plain substring replacement, not anchored to line starts
        text = self._raw
        for old, new in replace:
            text = text.replace(old, new)

        if append:
            text += "\n" + "\n".join(append) + "\n"
        return text

    def write(self) -> bool:
        """Back up the current file, then overwrite it with `render()`.

        Returns False (and logs) when the backup or the write fails. A backup
        taken before a failed write is kept.
        """
        text = self.render()

        if self.keep_backup and self.path.exists():
            try:
                create_backup(self.path, self.backup_dir)
                self.clear_old_backups()
            except OSError:
                logger.exception("Could not back up %s, not writing", self.path)
                return False

        try:
            self._write_text(text)
        except OSError:
            logger.exception("Failed to write %s", self.path)
            return False

        logger.info("Wrote %d staged variable(s) to %s", len(self._new_env), self.path)
        return True

    def _write_text(self, text: str) -> None:
        # Replace the symlink target, not the link itself
        target = self.path.resolve()
        tmp = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                errors="surrogateescape",
                newline="",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp = Path(fh.name)
                fh.write(text)
            if target.exists():
                shutil.copymode(target, tmp)
            os.replace(tmp, target)
        except OSError:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise

    def backups(self) -> list[BackupRecord]:
        """Backups of this file in the backup directory, newest first."""
        return list_backups(self.path.name, self.backup_dir)

    def clear_old_backups(self) -> list[Path]:
        """Keep only the newest `backup_count` backups.

        Only applies to an explicitly configured backup directory; backups
        written next to the env file are never pruned.
        """
        if self._backup_dir is None:
            return []
        return prune_backups(self.path.name, self._backup_dir, self.backup_count)
