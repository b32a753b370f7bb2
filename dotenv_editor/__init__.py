"""Edit .env files in place, keeping comments and layout."""

from dotenv_editor.exceptions import BackupDirectoryError, EnvEditorError, EnvFileNotFoundError
from dotenv_editor.services.env_file import EnvStore, cast_value, normalize_key

__all__ = [
    "BackupDirectoryError",
    "EnvEditorError",
    "EnvFileNotFoundError",
    "EnvStore",
    "cast_value",
    "normalize_key",
]
