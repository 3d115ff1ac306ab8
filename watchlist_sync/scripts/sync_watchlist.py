"""
Manual refresh: synchronize the given symbols (or the configured watch list).

Usage examples:
    python -m watchlist_sync.scripts.sync_watchlist
    python -m watchlist_sync.scripts.sync_watchlist RELIANCE TCS INFY --concurrency 3
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from watchlist_sync.config import get_config
from watchlist_sync.errors import ValidationError
from watchlist_sync.repositories.base_repository import BaseRepository
from watchlist_sync.services.sync_service import SyncService
from watchlist_sync.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Fetch and store quotes and daily prices for symbols.")
    parser.add_argument("symbols", nargs="*", help="Symbols to refresh (default: tickers.watch_list)")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum symbols in flight (default: sync.default_concurrency)",
    )
    return parser.parse_args(argv)


async def refresh(symbols: List[str], concurrency: Optional[int]) -> dict:
    config = get_config()
    service = SyncService.from_config(config)
    try:
        report = await service.synchronize(symbols, concurrency)
    finally:
        await BaseRepository.close_pool()

    for symbol in report.failed:
        logger.warning("Failed to update %s: %s", symbol, report.results[symbol].error)
    return report.to_dict()


def main(argv=None) -> int:
    args = parse_args(argv)
    config = get_config()
    configure_logging(config.logging)

    symbols = args.symbols or config.tickers.watch_list
    if not symbols:
        logger.error("No symbols given and tickers.watch_list is empty")
        return 2

    try:
        summary = asyncio.run(refresh(symbols, args.concurrency))
    except ValidationError as exc:
        logger.error("%s", exc)
        return 2

    print(json.dumps(summary, indent=2))
    return 0 if not summary["failed"] else 1


if __name__ == "__main__":
    sys.exit(main())
