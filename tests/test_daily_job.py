from __future__ import annotations

import asyncio
from datetime import timedelta

from fakes import (
    TODAY,
    FakeProvider,
    InMemoryPriceRepository,
    InMemorySecurityRepository,
    make_bars,
    make_config,
    make_engine,
    make_quote,
)
from watchlist_sync.errors import ProviderError
from watchlist_sync.models.security import Security
from watchlist_sync.services.daily_job import DailyUpdateJob
from watchlist_sync.services.symbol_updater import SymbolUpdater
from watchlist_sync.services.sync_service import SyncService


def _job(provider, symbols, config=None, price_repo=None):
    security_repo = InMemorySecurityRepository()
    for symbol in symbols:
        security_repo.rows[symbol] = Security(symbol=symbol, name=symbol)
    engine = make_engine(
        provider,
        config,
        security_repo=security_repo,
        price_repo=price_repo or InMemoryPriceRepository(),
    )
    service = SyncService(updater=SymbolUpdater(today=lambda: TODAY, **engine), **engine)

    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    job = DailyUpdateJob(service, engine["config"], today=lambda: TODAY, sleep=fake_sleep)
    return job, engine, sleeps


def test_pages_through_all_symbols_with_delay_between_pages():
    symbols = [f"S{i:02d}" for i in range(7)]
    provider = FakeProvider(quotes={f"{s}.NS": make_quote(f"{s}.NS") for s in symbols})
    config = make_config(daily_job={"page_size": 3, "page_delay_seconds": 30, "concurrency": 2})
    job, _, sleeps = _job(provider, symbols, config)

    summary = asyncio.run(job.run())

    assert summary.pages == 3
    assert summary.total == 7
    assert summary.succeeded == symbols
    assert sleeps == [30, 30]
    assert summary.to_dict()["message"] == "Daily update completed: 7/7 stocks updated"


def test_failures_are_reported_not_raised():
    provider = FakeProvider(quotes={
        "AAA.NS": make_quote("AAA.NS"),
        "BBB.NS": ProviderError("rate limited"),
    })
    job, _, _ = _job(provider, ["AAA", "BBB"])

    summary = asyncio.run(job.run())

    assert summary.succeeded == ["AAA"]
    assert summary.failed == ["BBB"]
    assert summary.to_dict()["successRate"] == "50.0%"


def test_retention_cleanup_removes_old_points():
    price_repo = InMemoryPriceRepository()
    provider = FakeProvider(
        quotes={"TCS.NS": make_quote("TCS.NS")},
        history={"TCS.NS": make_bars(3)},
    )
    old_bars = make_bars(2, end=TODAY - timedelta(days=60))
    job, _, _ = _job(provider, ["TCS"], price_repo=price_repo)

    async def scenario():
        # Seed stale rows the job should prune
        updater = job.sync_service.updater
        await updater._store_history("TCS", old_bars)
        return await job.run()

    summary = asyncio.run(scenario())

    assert price_repo.cleanup_cutoffs == [TODAY - timedelta(days=30)]
    assert summary.deleted == 2
    assert summary.cleanup_cutoff == TODAY - timedelta(days=30)
    assert len(price_repo.points_for("TCS")) == 3
    assert summary.to_dict()["cleanup"] == "2 old records cleaned"


def test_cleanup_failure_does_not_fail_job():
    provider = FakeProvider(quotes={"TCS.NS": make_quote("TCS.NS")})
    job, _, _ = _job(provider, ["TCS"], price_repo=InMemoryPriceRepository(fail_cleanup=True))

    summary = asyncio.run(job.run())

    assert summary.succeeded == ["TCS"]
    assert summary.deleted is None
    assert summary.to_dict()["cleanup"] == "Cleanup skipped"


def test_no_symbols_means_no_work():
    provider = FakeProvider()
    job, engine, sleeps = _job(provider, [])

    summary = asyncio.run(job.run())

    assert summary.total == 0
    assert summary.to_dict()["message"] == "No stocks to update"
    assert provider.quote_calls == []
    assert engine["price_repo"].cleanup_cutoffs == []
    assert sleeps == []


def test_invalid_stored_symbol_fails_alone():
    provider = FakeProvider(quotes={"TCS.NS": make_quote("TCS.NS")})
    job, engine, _ = _job(provider, ["TCS", "BAD SYMBOL"])

    summary = asyncio.run(job.run())

    assert summary.succeeded == ["TCS"]
    assert summary.failed == ["BAD SYMBOL"]
    assert summary.total == 2
    assert provider.quote_calls == ["TCS.NS"]
    assert engine["price_repo"].cleanup_cutoffs == [TODAY - timedelta(days=30)]


def test_only_invalid_symbols_still_runs_cleanup():
    provider = FakeProvider()
    job, engine, sleeps = _job(provider, ["$$$"])

    summary = asyncio.run(job.run())

    assert summary.pages == 0
    assert summary.failed == ["$$$"]
    assert summary.to_dict()["message"] == "Daily update completed: 0/1 stocks updated"
    assert provider.quote_calls == []
    assert len(engine["price_repo"].cleanup_cutoffs) == 1
    assert sleeps == []
