"""
Scheduled entry point for the daily update job (run from cron, e.g. 10:10 UTC
after the NSE close).

Usage:
    python -m watchlist_sync.scripts.run_daily_update
"""
import asyncio
import json
from pprint import pformat

from watchlist_sync.config import get_config
from watchlist_sync.repositories.base_repository import BaseRepository
from watchlist_sync.services.daily_job import DailyUpdateJob
from watchlist_sync.services.sync_service import SyncService
from watchlist_sync.utils.logger import configure_logging, get_logger


async def run() -> dict:
    logger = get_logger(__name__)
    config = get_config()
    job = DailyUpdateJob(SyncService.from_config(config), config)
    try:
        summary = await job.run()
    finally:
        await BaseRepository.close_pool()

    result = summary.to_dict()
    logger.info("Daily job summary: %s", pformat(result))
    return result


def main():
    config = get_config()
    configure_logging(config.logging)
    print(json.dumps(asyncio.run(run()), indent=2))


if __name__ == "__main__":
    main()
