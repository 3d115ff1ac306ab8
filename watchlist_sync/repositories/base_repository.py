"""
Base repository with database connection pooling.
"""
import asyncpg
from typing import Optional
from watchlist_sync.config import Config
from watchlist_sync.errors import PersistenceError
from watchlist_sync.utils.logger import get_logger

# Failures that mean "this write did not happen"
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class BaseRepository:
    """
    Base repository class with a pool shared by all repositories.
    Query helpers raise PersistenceError on database failures.
    """

    _pool: Optional[asyncpg.Pool] = None

    def __init__(self, config: Config):
        """
        Initialize repository with configuration.

        Args:
            config: Configuration object
        """
        self.config = config
        self.logger = get_logger(__name__)

    @classmethod
    async def create_pool(cls, config: Config) -> asyncpg.Pool:
        """
        Create the shared connection pool (no-op if it exists).

        Args:
            config: Configuration object
        """
        if BaseRepository._pool is None:
            BaseRepository._pool = await asyncpg.create_pool(
                config.db_dsn,
                min_size=config.database.min_pool_size,
                max_size=config.database.max_pool_size
            )
        return BaseRepository._pool

    @classmethod
    async def close_pool(cls):
        """Close the connection pool"""
        if BaseRepository._pool is not None:
            await BaseRepository._pool.close()
            BaseRepository._pool = None

    async def get_pool(self) -> asyncpg.Pool:
        """Get the connection pool, creating it if necessary"""
        if BaseRepository._pool is None:
            await self.create_pool(self.config)
        return BaseRepository._pool

    async def execute(self, query: str, *args):
        """Execute a query that doesn't return rows; returns the status string."""
        try:
            pool = await self.get_pool()
            async with pool.acquire() as conn:
                return await conn.execute(query, *args)
        except DB_ERRORS as exc:
            raise PersistenceError(f"Database execute failed: {exc}") from exc

    async def fetch(self, query: str, *args):
        """Fetch multiple rows."""
        try:
            pool = await self.get_pool()
            async with pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except DB_ERRORS as exc:
            raise PersistenceError(f"Database fetch failed: {exc}") from exc

    async def fetchrow(self, query: str, *args):
        """Fetch a single row or None."""
        try:
            pool = await self.get_pool()
            async with pool.acquire() as conn:
                return await conn.fetchrow(query, *args)
        except DB_ERRORS as exc:
            raise PersistenceError(f"Database fetchrow failed: {exc}") from exc

    @staticmethod
    def affected_rows(status) -> int:
        """Parse asyncpg's command status, e.g. "DELETE 5" -> 5."""
        if not isinstance(status, str):
            return 0
        try:
            return int(status.split()[-1])
        except (IndexError, ValueError):
            return 0
