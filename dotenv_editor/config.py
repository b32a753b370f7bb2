"""Runtime configuration for the editor service, read from ENV_EDITOR_* variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from dotenv_editor.services.backup import DEFAULT_BACKUP_COUNT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ENV_EDITOR_", extra="ignore")

    env_file: Path = Path(".env")
    keep_backup: bool = True
    backup_dir: Path | None = None
    backup_count: int = DEFAULT_BACKUP_COUNT

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    auth_enabled: bool = False
    auth_username: str = "admin"
    auth_password: str = ""

    @property
    def is_auth_configured(self) -> bool:
        return self.auth_enabled and bool(self.auth_username) and bool(self.auth_password)


@lru_cache
def get_settings() -> Settings:
    return Settings()
