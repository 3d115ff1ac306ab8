from __future__ import annotations

import asyncio
import random

import pytest

from watchlist_sync.errors import ProviderError, ValidationError
from watchlist_sync.models.results import UpdateResult
from watchlist_sync.services.batch_scheduler import BatchScheduler, chunk


def _outcome_update(failing=(), delay=0.0):
    async def update(symbol):
        if delay:
            await asyncio.sleep(delay)
        if symbol in failing:
            return UpdateResult.failed(symbol, ProviderError("timeout"))
        return UpdateResult(symbol=symbol, success=True)
    return update


def test_example_scenario():
    scheduler = BatchScheduler(_outcome_update(failing={"BBB"}))

    report = asyncio.run(scheduler.run(["AAA", "BBB", "CCC"], concurrency=2))

    assert report.to_dict() == {"total": 3, "success": ["AAA", "CCC"], "failed": ["BBB"]}
    assert isinstance(report.results["BBB"].error, ProviderError)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_succeeded_and_failed_partition_the_input(seed):
    rng = random.Random(seed)
    symbols = [f"S{i}" for i in range(25)]
    failing = {s for s in symbols if rng.random() < 0.4}
    scheduler = BatchScheduler(_outcome_update(failing=failing))

    report = asyncio.run(scheduler.run(symbols, concurrency=rng.randint(1, 8)))

    assert set(report.succeeded) | set(report.failed) == set(symbols)
    assert set(report.succeeded) & set(report.failed) == set()
    assert set(report.failed) == failing
    assert report.total == len(symbols)


def test_report_is_in_input_order_regardless_of_completion_order():
    delays = {"A": 0.03, "B": 0.0, "C": 0.01}

    async def update(symbol):
        await asyncio.sleep(delays[symbol])
        return UpdateResult(symbol=symbol, success=True)

    report = asyncio.run(BatchScheduler(update).run(["A", "B", "C"], concurrency=3))

    assert report.succeeded == ["A", "B", "C"]


@pytest.mark.parametrize("concurrency,count", [(1, 5), (2, 9), (3, 3), (4, 20), (10, 4)])
def test_in_flight_updates_never_exceed_bound(concurrency, count):
    state = {"in_flight": 0, "peak": 0}

    async def update(symbol):
        state["in_flight"] += 1
        state["peak"] = max(state["peak"], state["in_flight"])
        await asyncio.sleep(0.005)
        state["in_flight"] -= 1
        return UpdateResult(symbol=symbol, success=True)

    report = asyncio.run(BatchScheduler(update).run([f"S{i}" for i in range(count)], concurrency))

    assert state["peak"] <= concurrency
    assert state["peak"] == min(concurrency, count)
    assert len(report.succeeded) == count


def test_exception_escaping_update_only_fails_that_symbol():
    async def update(symbol):
        if symbol == "BOOM":
            raise RuntimeError("unexpected")
        return UpdateResult(symbol=symbol, success=True)

    report = asyncio.run(BatchScheduler(update).run(["A", "BOOM", "B"], concurrency=2))

    assert report.succeeded == ["A", "B"]
    assert report.failed == ["BOOM"]
    assert isinstance(report.results["BOOM"].error, RuntimeError)


def test_duplicates_are_collapsed():
    calls = []

    async def update(symbol):
        calls.append(symbol)
        return UpdateResult(symbol=symbol, success=True)

    report = asyncio.run(BatchScheduler(update).run(["A", "B", "A"], concurrency=2))

    assert sorted(calls) == ["A", "B"]
    assert report.total == 2
    assert report.succeeded == ["A", "B"]


def test_empty_input_returns_empty_report():
    report = asyncio.run(BatchScheduler(_outcome_update()).run([], concurrency=3))

    assert report.total == 0
    assert report.succeeded == [] and report.failed == []
    assert report.success_rate == 0.0


@pytest.mark.parametrize("concurrency", [0, -1, 1.5, True])
def test_invalid_concurrency_is_rejected(concurrency):
    with pytest.raises(ValidationError):
        asyncio.run(BatchScheduler(_outcome_update()).run(["A"], concurrency))


def test_chunk_pages():
    assert chunk(["A", "B", "C", "D", "E"], 2) == [["A", "B"], ["C", "D"], ["E"]]
    assert chunk([], 3) == []
    with pytest.raises(ValidationError):
        chunk(["A"], 0)
