import logging

from fastapi import FastAPI

from dotenv_editor.config import Settings, get_settings
from dotenv_editor.exceptions import EnvFileNotFoundError
from dotenv_editor.middleware import BasicAuthMiddleware
from dotenv_editor.routers import env
from dotenv_editor.services.env_file import EnvStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API around one EnvStore loaded from settings."""
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="dotenv-editor")
    app.state.settings = settings
    try:
        app.state.env_store = EnvStore.from_settings(settings)
    except EnvFileNotFoundError as e:
        logger.warning("%s; API calls will return 404 until it exists", e)
        app.state.env_store = None

    app.add_middleware(BasicAuthMiddleware, get_settings_fn=lambda: app.state.settings)
    app.include_router(env.router)
    return app
