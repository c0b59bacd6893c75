"""Chapter API main entry point."""

import uvicorn
from loguru import logger

from .common.config.logging_config import configure_logging
from .common.config.settings import get_settings
from .app import create_app

settings = get_settings()

# Configure logging based on settings
configure_logging(settings)

# Create the FastAPI application
app = create_app(settings)


def main() -> None:
    """Run the application."""
    logger.info(f"Starting Chapter API on {settings.host}:{settings.port}")

    uvicorn.run(
        "chapter_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers if not settings.reload else 1,
        log_level=settings.log_level.lower(),
        log_config=None,  # stdlib logging is routed through loguru
        access_log=False,  # TimingMiddleware logs every request
    )


if __name__ == "__main__":
    main()
