import base64
import binascii
import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dotenv_editor.auth_utils import verify_password


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Optional HTTP Basic Auth in front of the editor API. The ping endpoint stays open."""

    PUBLIC_PATHS = {"/api/ping"}

    def __init__(self, app, get_settings_fn):
        super().__init__(app)
        self._get_settings = get_settings_fn

    def _authorized(self, header: str, settings) -> bool:
        if not header.startswith("Basic "):
            return False
        try:
            decoded = base64.b64decode(header[6:]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return False
        username, sep, password = decoded.partition(":")
        if not sep:
            return False
        return secrets.compare_digest(
            username.encode(), settings.auth_username.encode()
        ) and verify_password(password, settings.auth_password)

    async def dispatch(self, request: Request, call_next) -> Response:
        settings = self._get_settings()

        if not settings.is_auth_configured or request.url.path in self.PUBLIC_PATHS:
            return await call_next(request)

        if self._authorized(request.headers.get("Authorization", ""), settings):
            return await call_next(request)

        return Response(
            status_code=401,
            headers={"WWW-Authenticate": 'Basic realm="dotenv-editor"'},
            content="Unauthorized",
        )
