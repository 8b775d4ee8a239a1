import uvicorn

from geminirelay.app import create_app
from geminirelay.config import get_settings


def main():
    settings = get_settings()
    # The app gets the same settings the server binds with
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
