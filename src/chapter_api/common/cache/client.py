"""
Redis cache client and utilities.

Every operation degrades instead of raising: when Redis is not configured or
not reachable, reads report the backend as unavailable and writes are no-ops,
so callers always fall back to the primary store.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any, Dict, Protocol, runtime_checkable
from redis.asyncio import Redis, ConnectionPool
from loguru import logger


@runtime_checkable
class CacheConfig(Protocol):
    """Protocol for cache configuration."""

    @property
    def is_cache_enabled(self) -> bool:
        """Whether cache is enabled."""
        ...

    @property
    def redis_url(self) -> Optional[Any]:
        """Redis connection URL."""
        ...

    @property
    def redis_pool_size(self) -> int:
        """Redis connection pool size."""
        ...

    @property
    def redis_decode_responses(self) -> bool:
        """Whether to decode Redis responses."""
        ...

    @property
    def cache_ttl_default(self) -> int:
        """Default cache TTL in seconds."""
        ...

    def get_cache_key_prefix(self) -> str:
        """Get cache key prefix."""
        ...


class CacheStatus(str, Enum):
    """Outcome of a cache lookup."""
    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    """Result of ``CacheManager.lookup``."""
    status: CacheStatus
    value: Any = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


class CacheManager:
    """Manages Redis cache operations."""

    def __init__(self, config: Optional[CacheConfig] = None, client: Optional[Redis] = None):
        self.config = config
        self.redis_client: Optional[Redis] = client
        self.pool: Optional[ConnectionPool] = None
        self.key_prefix = config.get_cache_key_prefix() if config else "chapter-api:"
        self.default_ttl = config.cache_ttl_default if config else 3600
        # A client handed in directly is trusted to be usable
        self.is_available = client is not None
        self.connection_attempted = client is not None

    async def connect(self) -> Optional[Redis]:
        """Create and return Redis connection.

        Returns None if Redis is not configured or unavailable.
        """
        # Skip if already attempted and failed
        if self.connection_attempted and not self.is_available:
            return None

        if self.redis_client is None:
            if not self.config or not self.config.is_cache_enabled:
                if not self.connection_attempted:
                    logger.info(
                        "Redis URL not configured (REDIS_URL environment variable not set). "
                        "Running without cache, every read goes to the database."
                    )
                    self.connection_attempted = True
                return None

            redis_url = str(self.config.redis_url)

            try:
                logger.info("Creating Redis connection pool...")

                self.pool = ConnectionPool.from_url(
                    redis_url,
                    max_connections=self.config.redis_pool_size,
                    decode_responses=self.config.redis_decode_responses,
                    socket_connect_timeout=getattr(self.config, "redis_connect_timeout", None),
                    socket_timeout=getattr(self.config, "redis_socket_timeout", None),
                    health_check_interval=30
                )

                self.redis_client = Redis(connection_pool=self.pool)

                await self.redis_client.ping()
                logger.info("Redis connection established successfully")
                self.is_available = True
                self.connection_attempted = True

            except Exception as e:
                logger.warning(
                    f"Redis connection failed: {e}. "
                    "Running without cache, every read goes to the database."
                )
                self.is_available = False
                self.connection_attempted = True
                await self._release()
                return None

        return self.redis_client

    async def _release(self) -> None:
        """Drop the client and pool, ignoring errors from a dead connection."""
        if self.redis_client is not None:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                logger.debug(f"Ignoring error while closing Redis client: {e}")
        if self.pool is not None:
            try:
                await self.pool.disconnect()
            except Exception as e:
                logger.debug(f"Ignoring error while closing Redis pool: {e}")
        self.redis_client = None
        self.pool = None

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis_client:
            await self._release()
            logger.info("Redis connection closed")

    def _make_key(self, key: str, namespace: Optional[str] = None) -> str:
        """Create a namespaced cache key."""
        if namespace:
            return f"{self.key_prefix}{namespace}:{key}"
        return f"{self.key_prefix}{key}"

    async def lookup(self, key: str, namespace: Optional[str] = None) -> CacheLookup:
        """Look a key up, telling a miss apart from an unreachable backend."""
        client = await self.connect()
        if not client:
            return CacheLookup(CacheStatus.UNAVAILABLE)

        full_key = self._make_key(key, namespace)

        try:
            value = await client.get(full_key)
        except Exception as e:
            logger.error(f"Cache get error for key {full_key}: {e}")
            return CacheLookup(CacheStatus.UNAVAILABLE)

        if value is None:
            return CacheLookup(CacheStatus.MISS)

        try:
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return CacheLookup(CacheStatus.HIT, json.loads(value))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"Discarding undecodable cache entry {full_key}")
            return CacheLookup(CacheStatus.MISS)

    async def get(self, key: str, namespace: Optional[str] = None) -> Optional[Any]:
        """Get value from cache, or None on a miss or when the cache is down."""
        result = await self.lookup(key, namespace)
        return result.value if result.hit else None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        namespace: Optional[str] = None
    ) -> bool:
        """Store a JSON-serializable value. A TTL of 0 stores without expiry."""
        client = await self.connect()
        if not client:
            return False

        full_key = self._make_key(key, namespace)

        if ttl is None:
            ttl = self.default_ttl

        try:
            payload = json.dumps(value)
            if ttl > 0:
                await client.setex(full_key, ttl, payload)
            else:
                await client.set(full_key, payload)
            return True

        except Exception as e:
            logger.error(f"Cache set error for key {full_key}: {e}")
            return False

    async def delete(self, key: str, namespace: Optional[str] = None) -> bool:
        """Delete value from cache."""
        client = await self.connect()
        if not client:
            return False

        full_key = self._make_key(key, namespace)

        try:
            result = await client.delete(full_key)
            return result > 0
        except Exception as e:
            logger.error(f"Cache delete error for key {full_key}: {e}")
            return False

    async def invalidate_pattern(self, pattern: str, namespace: Optional[str] = None) -> int:
        """Delete all keys matching a glob pattern. Returns the number removed."""
        client = await self.connect()
        if not client:
            return 0

        full_pattern = self._make_key(pattern, namespace)

        try:
            keys = []
            async for key in client.scan_iter(match=full_pattern):
                keys.append(key)

            if keys:
                removed = await client.delete(*keys)
                logger.debug(f"Invalidated {removed} cache keys matching {full_pattern}")
                return removed
            return 0

        except Exception as e:
            logger.error(f"Cache delete pattern error for {full_pattern}: {e}")
            return 0

    async def expire(
        self,
        key: str,
        ttl: int,
        namespace: Optional[str] = None
    ) -> bool:
        """Set expiration time for a key."""
        client = await self.connect()
        if not client:
            return False

        full_key = self._make_key(key, namespace)

        try:
            return bool(await client.expire(full_key, ttl))
        except Exception as e:
            logger.error(f"Cache expire error for key {full_key}: {e}")
            return False

    async def increment(
        self,
        key: str,
        amount: int = 1,
        namespace: Optional[str] = None
    ) -> Optional[int]:
        """Increment a counter in cache."""
        client = await self.connect()
        if not client:
            return None

        full_key = self._make_key(key, namespace)

        try:
            return await client.incrby(full_key, amount)
        except Exception as e:
            logger.error(f"Cache increment error for key {full_key}: {e}")
            return None

    async def health_check(self) -> bool:
        """Check if Redis is healthy."""
        client = await self.connect()
        if not client:
            return False

        try:
            await client.ping()
            return True
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    def get_cache_status(self) -> Dict[str, Any]:
        """Get the current cache status for health reporting."""
        configured = bool(self.config and self.config.is_cache_enabled) or self.is_available
        if not configured:
            status = "not_configured"
        elif self.is_available:
            status = "available"
        elif self.connection_attempted:
            status = "unavailable"
        else:
            status = "not_connected"

        return {
            "status": status,
            "is_available": self.is_available,
            "connection_attempted": self.connection_attempted,
            "key_prefix": self.key_prefix,
            "default_ttl": self.default_ttl,
            "performance_impact": None if self.is_available else "Running without cache",
        }
