"""
Database connection management using asyncpg.
"""
from typing import Optional, Any, List
from contextlib import asynccontextmanager
import asyncpg
from asyncpg import Pool, Record
from loguru import logger

from ..config import Settings


class DatabaseManager:
    """Manages the asyncpg connection pool."""

    def __init__(self, database_url: str, application_name: str = "chapter-api", **pool_config):
        """Initialize DatabaseManager.

        Args:
            database_url: Postgres DSN
            application_name: Reported to the server as ``application_name``
            **pool_config: Additional pool configuration options
        """
        self.pool: Optional[Pool] = None
        self.dsn = database_url.replace("+asyncpg", "")
        self.application_name = application_name

        self.pool_config = {
            "min_size": 2,
            "max_size": 10,
            "max_inactive_connection_lifetime": 300,
            "command_timeout": 10,
            **pool_config
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseManager":
        """Build a manager from application settings."""
        return cls(
            settings.database_url,
            application_name=settings.app_name,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            timeout=settings.db_connect_timeout,
            command_timeout=settings.db_command_timeout,
        )

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")

            server_settings = {
                'application_name': self.application_name,
                'jit': 'off'
            }

            self.pool = await asyncpg.create_pool(
                self.dsn,
                server_settings=server_settings,
                **self.pool_config
            )
            logger.info("Database pool created successfully")
        return self.pool

    async def close_pool(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: float = None) -> Optional[Record]:
        """Fetch a single row."""
        async with self.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: float = None) -> Any:
        """Fetch a single value."""
        async with self.acquire() as connection:
            return await connection.fetchval(query, *args, column=column, timeout=timeout)

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.acquire() as connection:
                result = await connection.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False
