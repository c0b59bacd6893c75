"""Chapter API application factory.

Database and cache handles are built from settings (or injected, e.g. by tests),
stored on ``app.state`` and opened/closed by the lifespan handler.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .__version__ import __version__
from .common.cache.client import CacheManager
from .common.config.settings import Settings, get_settings
from .common.database.connection import DatabaseManager
from .common.exception_handlers import register_exception_handlers
from .common.middleware.rate_limit import RateLimitMiddleware
from .common.middleware.timing import TimingMiddleware
from .features.chapters.repositories.chapter_repository import ChapterRepository


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and cache handles on startup, close them on shutdown."""
    settings: Settings = app.state.settings
    database: DatabaseManager = app.state.database
    cache: CacheManager = app.state.cache

    app.state.started_at = time.monotonic()
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")
    logger.debug(f"Effective configuration: {settings.get_service_specific_config()}")

    await database.create_pool()
    if settings.db_auto_migrate:
        await ChapterRepository(database).ensure_schema()
        logger.info("Chapter schema is up to date")

    # Cache is optional; connect() logs and returns None when unavailable
    await cache.connect()

    try:
        yield
    finally:
        await cache.disconnect()
        await database.close_pool()
        logger.info(f"{settings.app_name} stopped")


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[DatabaseManager] = None,
    cache: Optional[CacheManager] = None
) -> FastAPI:
    """Create the Chapter API application.

    Args:
        settings: Application settings (defaults to environment settings)
        database: Database manager (defaults to one built from settings)
        cache: Cache manager (defaults to one built from settings)
    """
    settings = settings or get_settings()
    database = database or DatabaseManager.from_settings(settings)
    cache = cache or CacheManager(settings)

    app = FastAPI(
        title="Chapter Performance API",
        version=__version__,
        description="Chapter tracking with cached listings, analytics and bulk upload",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.cache = cache

    register_exception_handlers(app, is_production=settings.is_production)

    # Added last runs first: CORS, then timing, then rate limiting
    app.add_middleware(
        RateLimitMiddleware,
        cache=cache,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        exclude_paths=[f"{settings.api_prefix}/health", "/docs", "/redoc", "/openapi.json"],
        enabled=settings.rate_limit_enabled,
    )
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    from .features.system.routers.v1 import root_router, router as system_router
    app.include_router(root_router)
    app.include_router(system_router, prefix=settings.api_prefix)

    from .features.chapters.routers.v1 import router as chapters_router
    app.include_router(chapters_router, prefix=settings.api_prefix)

    logger.info(f"Created {settings.app_name} application")
    return app
