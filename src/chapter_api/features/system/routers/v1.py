"""System endpoints: service banner, API index and health."""

import time

from fastapi import Depends, Request

from ....common.cache.client import CacheManager
from ....common.config.settings import Settings
from ....common.database.connection import DatabaseManager
from ....common.dependencies import get_app_settings, get_cache, get_database
from ....common.models.base import APIResponse, HealthStatus
from ....common.routers.base import ChapterAPIRouter

# Mounted without a prefix
root_router = ChapterAPIRouter(tags=["System"])

# Mounted under the API prefix
router = ChapterAPIRouter(tags=["System"])


@root_router.get("/", summary="Service banner")
async def service_banner(settings: Settings = Depends(get_app_settings)):
    return APIResponse.success_response(
        data={
            "version": settings.app_version,
            "documentation": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        },
        message="Chapter Performance Dashboard API"
    ).to_response()


@router.get("/", summary="API index")
async def api_index(settings: Settings = Depends(get_app_settings)):
    prefix = settings.api_prefix
    return APIResponse.success_response(
        data={
            "version": settings.app_version,
            "endpoints": {
                "chapters": f"{prefix}/chapters",
                "analytics": f"{prefix}/chapters/analytics",
                "filters": f"{prefix}/chapters/filters",
                "health": f"{prefix}/health",
            },
        },
        message=f"Chapter Performance API v{settings.app_version}"
    ).to_response()


@router.get("/health", summary="Health check")
async def health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    database: DatabaseManager = Depends(get_database),
    cache: CacheManager = Depends(get_cache)
):
    """Report database and cache health.

    The cache is optional, so an unavailable cache only marks the service as
    degraded when the database is fine.
    """
    database_ok = await database.health_check()
    cache_ok = await cache.health_check()
    cache_status = cache.get_cache_status()

    if not database_ok:
        overall = HealthStatus.UNHEALTHY
    elif cache_status["status"] != "not_configured" and not cache_ok:
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.HEALTHY

    started_at = getattr(request.app.state, "started_at", None)
    uptime = round(time.monotonic() - started_at, 3) if started_at else 0.0

    return APIResponse.success_response(
        data={
            "status": overall.value,
            "uptime": uptime,
            "environment": settings.environment,
            "version": settings.app_version,
            "database": {"status": "healthy" if database_ok else "unhealthy"},
            "cache": {**cache_status, "healthy": cache_ok},
        }
    ).to_response()
