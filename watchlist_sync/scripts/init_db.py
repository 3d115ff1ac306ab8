"""
Create the securities and daily_prices tables.

Usage:
    python -m watchlist_sync.scripts.init_db
"""
import asyncio
from pathlib import Path

from watchlist_sync.config import get_config
from watchlist_sync.repositories.base_repository import BaseRepository
from watchlist_sync.utils.logger import configure_logging, get_logger

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "sql" / "schema.sql"


async def init_db():
    logger = get_logger(__name__)
    config = get_config()
    repo = BaseRepository(config)
    try:
        # asyncpg runs multi-statement scripts when no arguments are passed
        await repo.execute(SCHEMA_PATH.read_text())
        logger.info("Schema applied from %s", SCHEMA_PATH)
    finally:
        await BaseRepository.close_pool()


def main():
    configure_logging(get_config().logging)
    asyncio.run(init_db())


if __name__ == "__main__":
    main()
