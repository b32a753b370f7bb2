"""Shared fixtures: a sample .env file and API clients around it."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dotenv_editor.auth_utils import hash_password
from dotenv_editor.config import Settings
from dotenv_editor.main import create_app

SAMPLE_ENV = """\
# Application
APP_NAME=demo
APP_DEBUG=false

# Database
DB_HOST=localhost
DB_PORT=5432
DB_PASSWORD="s3cret"
"""


def make_settings(**kwargs) -> Settings:
    """Create a Settings instance that ignores any real settings file."""
    return Settings(_env_file="/dev/null", **kwargs)


@pytest.fixture
def env_path(tmp_path):
    path = tmp_path / ".env"
    path.write_text(SAMPLE_ENV)
    return path


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def stamps(monkeypatch):
    """Give every backup a distinct, increasing timestamp."""
    counter = iter(range(100))
    monkeypatch.setattr(
        "dotenv_editor.services.backup._timestamp",
        lambda: f"2026-01-01-00-00-{next(counter):02d}",
    )


@pytest_asyncio.fixture
async def client(env_path, backup_dir):
    app = create_app(make_settings(env_file=env_path, backup_dir=backup_dir))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def client_missing_file(tmp_path):
    app = create_app(make_settings(env_file=tmp_path / "missing.env"))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def client_with_auth(env_path):
    app = create_app(make_settings(
        env_file=env_path,
        keep_backup=False,
        auth_enabled=True,
        auth_username="admin",
        auth_password=hash_password("secret123"),
    ))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
