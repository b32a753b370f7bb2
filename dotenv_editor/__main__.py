import uvicorn

from dotenv_editor.config import get_settings
from dotenv_editor.main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
