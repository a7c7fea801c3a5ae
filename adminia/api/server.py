import uvicorn

from adminia.api.app import create_app
from adminia.api.container import build_container
from adminia.config.settings import Settings
from adminia.logging.logger import Log


def main() -> None:
    """Entry point: build services -> serve the API until interrupted."""
    settings = Settings()
    Log.configure(settings.log_level)
    container = build_container(settings)

    try:
        Log.info(f"API listening on {settings.api_host}:{settings.api_port}")
        uvicorn.run(
            create_app(container),
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower(),
        )
    finally:
        container.close()


if __name__ == "__main__":
    main()
