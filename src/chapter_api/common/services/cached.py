"""
Read-through caching for services.
"""

from typing import Awaitable, Callable, Optional, Type, TypeVar, List

from loguru import logger
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..cache.client import CacheManager, CacheStatus
from .base import BaseService

T = TypeVar('T')
M = TypeVar('M', bound=BaseModel)


class CachedService(BaseService[T]):
    """Service that serves reads from the cache and falls back to a loader."""

    def __init__(self, cache: CacheManager):
        self.cache = cache

    async def read_through(
        self,
        key: str,
        model: Type[M],
        loader: Callable[[], Awaitable[Optional[M]]],
        ttl: Optional[int] = None
    ) -> Optional[M]:
        """Return the cached value for ``key`` or load, cache and return it.

        A loader result of None is returned as-is and never cached.
        """
        cached = await self.cache.lookup(key)
        if cached.hit:
            try:
                return model.model_validate(cached.value)
            except PydanticValidationError as e:
                logger.warning(f"Ignoring malformed cache entry {key}: {e.error_count()} errors")
        elif cached.status is CacheStatus.UNAVAILABLE:
            logger.debug(f"Cache unavailable, loading {key} from the store")

        value = await loader()
        if value is not None:
            await self.cache.set(key, value.model_dump(mode="json", by_alias=True), ttl=ttl)
        return value

    async def invalidate(self, patterns: List[str]) -> int:
        """Drop every cache entry matching any of ``patterns``."""
        removed = 0
        for pattern in patterns:
            removed += await self.cache.invalidate_pattern(pattern)
        return removed
