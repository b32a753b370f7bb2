"""Errors raised by the .env editor."""


class EnvEditorError(Exception):
    """Base class for editor errors."""


class EnvFileNotFoundError(EnvEditorError, FileNotFoundError):
    """The .env file to edit does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"The .env file does not exist at {path}")


class BackupDirectoryError(EnvEditorError, OSError):
    """The backup directory is missing and could not be created."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        msg = f"The backup directory does not exist at {path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
