"""Common FastAPI dependencies.

Infrastructure handles live on ``app.state`` (see ``chapter_api.app``);
services are assembled per request from them.
"""

import hmac
from typing import Optional

from fastapi import Depends, Request
from loguru import logger

from .cache.client import CacheManager
from .config.settings import Settings
from .database.connection import DatabaseManager
from .exceptions import UnauthorizedError, ForbiddenError

MISSING_TOKEN_MESSAGE = "Access denied. No token provided. Use Bearer token in Authorization header."
INVALID_TOKEN_MESSAGE = "Access denied. Invalid admin token."


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_database(request: Request) -> DatabaseManager:
    """Get the application's database manager."""
    return request.app.state.database


def get_cache(request: Request) -> CacheManager:
    """Get the application's cache manager."""
    return request.app.state.cache


def get_chapter_repository(db: DatabaseManager = Depends(get_database)):
    """Dependency to get the chapter repository."""
    from ..features.chapters.repositories.chapter_repository import ChapterRepository
    return ChapterRepository(db)


def get_chapter_service(
    repository=Depends(get_chapter_repository),
    cache: CacheManager = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Dependency to get the chapter service."""
    from ..features.chapters.services.chapter_service import ChapterService
    return ChapterService(repository, cache, settings)


def get_analytics_service(
    repository=Depends(get_chapter_repository),
    cache: CacheManager = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Dependency to get the analytics service."""
    from ..features.chapters.services.analytics_service import AnalyticsService
    return AnalyticsService(repository, cache, settings)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        return None
    return token


async def require_admin(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Allow the request only when it carries the shared admin bearer token.

    Raises:
        UnauthorizedError: no bearer token was sent
        ForbiddenError: the token does not match
    """
    token = _bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise UnauthorizedError(MISSING_TOKEN_MESSAGE)

    expected = settings.get_admin_token()
    if expected is None:
        logger.warning("ADMIN_SECRET_KEY is not set, rejecting admin request")
        raise ForbiddenError(INVALID_TOKEN_MESSAGE)

    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        logger.warning(f"Rejected admin request to {request.url.path} with an invalid token")
        raise ForbiddenError(INVALID_TOKEN_MESSAGE)
