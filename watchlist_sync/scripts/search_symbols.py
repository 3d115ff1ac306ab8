"""
Look up symbols on the configured exchanges.

Usage:
    python -m watchlist_sync.scripts.search_symbols reliance
"""
import argparse
import asyncio
import sys

from watchlist_sync.config import get_config
from watchlist_sync.errors import ProviderError, ValidationError
from watchlist_sync.providers.factory import create_provider
from watchlist_sync.services.symbol_search import SymbolSearch
from watchlist_sync.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Search for tradable symbols.")
    parser.add_argument("query", help="Company name or ticker fragment")
    args = parser.parse_args(argv)

    config = get_config()
    configure_logging(config.logging)
    search = SymbolSearch(create_provider(config), config)

    try:
        matches = asyncio.run(search.search(args.query))
    except (ValidationError, ProviderError) as exc:
        logger.error("Search failed: %s", exc)
        return 1

    for match in matches:
        print(f"  {match.symbol:12} {match.exchange or '':4} {match.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
