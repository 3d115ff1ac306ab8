from __future__ import annotations

import asyncio

from fakes import FakeClock, make_config
from watchlist_sync.sync import rate_limiter as rate_limiter_module
from watchlist_sync.sync.rate_limiter import RateLimiter, get_rate_limiter, reset_rate_limiter

EPSILON = 1e-9


def _limiter(clock: FakeClock, global_interval=0.2, per_key_interval=1.0) -> RateLimiter:
    return RateLimiter(
        global_min_interval=global_interval,
        per_key_min_interval=per_key_interval,
        clock=clock,
        sleep=clock.sleep,
    )


def test_first_acquire_is_immediate():
    clock = FakeClock()
    limiter = _limiter(clock)

    granted = asyncio.run(limiter.acquire("TCS"))

    assert granted == clock.now
    assert clock.sleeps == []


def test_global_spacing_across_different_keys():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.2, per_key_interval=1.0)

    async def scenario():
        return await asyncio.gather(*(limiter.acquire(key) for key in ["A", "B", "C", "D"]))

    grants = asyncio.run(scenario())

    for earlier, later in zip(grants, grants[1:]):
        assert later - earlier >= 0.2 - EPSILON


def test_per_key_spacing_for_same_key():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.2, per_key_interval=1.0)

    async def scenario():
        return await asyncio.gather(limiter.acquire("INFY"), limiter.acquire("INFY"))

    first, second = asyncio.run(scenario())

    assert second - first >= 1.0 - EPSILON


def test_mixed_keys_respect_both_intervals():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.2, per_key_interval=1.0)
    keys = ["A", "B", "A", "C", "B", "A"]

    async def scenario():
        return await asyncio.gather(*(limiter.acquire(key) for key in keys))

    grants = asyncio.run(scenario())

    ordered = sorted(grants)
    for earlier, later in zip(ordered, ordered[1:]):
        assert later - earlier >= 0.2 - EPSILON

    by_key = {}
    for key, granted in zip(keys, grants):
        by_key.setdefault(key, []).append(granted)
    for times in by_key.values():
        for earlier, later in zip(times, times[1:]):
            assert later - earlier >= 1.0 - EPSILON


def test_admissions_are_granted_in_arrival_order():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.1, per_key_interval=0.5)
    order = []

    async def request(key, index):
        await limiter.acquire(key)
        order.append(index)

    async def scenario():
        await asyncio.gather(*(request(key, i) for i, key in enumerate(["X", "X", "Y", "Z", "Y"])))

    asyncio.run(scenario())

    assert order == [0, 1, 2, 3, 4]


def test_elapsed_time_counts_toward_spacing():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.2, per_key_interval=1.0)

    async def scenario():
        await limiter.acquire("TCS")
        clock.now += 0.7
        await limiter.acquire("TCS")

    asyncio.run(scenario())

    assert abs(clock.sleeps[0] - 0.3) < 1e-6
    assert abs(sum(clock.sleeps) - 0.3) < 1e-6


def test_spacing_holds_with_real_clock():
    limiter = RateLimiter(global_min_interval=0.01, per_key_min_interval=0.03)

    async def scenario():
        return await asyncio.gather(*(limiter.acquire(key) for key in ["A", "A", "B", "A"]))

    grants = asyncio.run(scenario())

    ordered = sorted(grants)
    for earlier, later in zip(ordered, ordered[1:]):
        assert later - earlier >= 0.01 - EPSILON
    a_grants = [grants[0], grants[1], grants[3]]
    for earlier, later in zip(a_grants, a_grants[1:]):
        assert later - earlier >= 0.03 - EPSILON


def test_state_is_recorded_per_key():
    clock = FakeClock()
    limiter = _limiter(clock)

    asyncio.run(limiter.acquire("HDFCBANK"))

    assert limiter.last_admitted("HDFCBANK") == clock.now
    assert limiter.global_last_admitted == clock.now
    assert limiter.last_admitted("TCS") is None


def test_process_wide_limiter_uses_config_once(monkeypatch):
    monkeypatch.setattr(rate_limiter_module, "_rate_limiter", None)
    config = make_config(rate_limit={
        "global_min_interval_seconds": 0.3,
        "per_symbol_min_interval_seconds": 2.0,
    })

    first = get_rate_limiter(config)
    second = get_rate_limiter()

    assert first is second
    assert first.global_min_interval == 0.3
    assert first.per_key_min_interval == 2.0
    reset_rate_limiter()


def test_limiter_is_reusable_across_event_loops():
    clock = FakeClock()
    limiter = _limiter(clock, global_interval=0.2, per_key_interval=0.0)

    async def contended():
        return await asyncio.gather(*(limiter.acquire(key) for key in ["TCS", "INFY", "HDFCBANK"]))

    grants = asyncio.run(contended()) + asyncio.run(contended())

    for earlier, later in zip(grants, grants[1:]):
        assert later - earlier >= 0.2 - EPSILON
