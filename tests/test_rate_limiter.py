# tests/test_rate_limiter.py
import asyncio
import time

import pytest

from services.translation.rate_limiter import RateLimiter


@pytest.mark.asyncio
async def test_results_are_returned_to_each_caller():
    limiter = RateLimiter(concurrency=2, min_interval=0.0)

    async def job(n):
        await asyncio.sleep(0)
        return n * 10

    results = await asyncio.gather(*(limiter.schedule(lambda n=n: job(n)) for n in range(5)))
    assert results == [0, 10, 20, 30, 40]


@pytest.mark.asyncio
async def test_concurrency_cap_is_respected():
    limiter = RateLimiter(concurrency=2, min_interval=0.0)
    running = 0
    peak = 0

    async def job():
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.02)
        running -= 1

    await asyncio.gather(*(limiter.schedule(job) for _ in range(6)))
    assert peak == 2
    assert limiter.active == 0
    assert limiter.pending == 0


@pytest.mark.asyncio
async def test_starts_are_spaced_by_min_interval():
    interval = 0.05
    limiter = RateLimiter(concurrency=4, min_interval=interval)
    starts = []

    async def job():
        starts.append(time.monotonic())

    await asyncio.gather(*(limiter.schedule(job) for _ in range(4)))
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    # small tolerance for timer resolution
    assert all(gap >= interval * 0.9 for gap in gaps), gaps


@pytest.mark.asyncio
async def test_dispatch_is_fifo():
    limiter = RateLimiter(concurrency=1, min_interval=0.0)
    order = []

    async def job(n):
        order.append(n)

    await asyncio.gather(*(limiter.schedule(lambda n=n: job(n)) for n in range(5)))
    assert order == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_failure_is_isolated_to_its_caller():
    limiter = RateLimiter(concurrency=2, min_interval=0.0)

    async def ok():
        return "ok"

    async def boom():
        raise RuntimeError("boom")

    results = await asyncio.gather(
        limiter.schedule(ok), limiter.schedule(boom), limiter.schedule(ok),
        return_exceptions=True,
    )
    assert results[0] == "ok"
    assert isinstance(results[1], RuntimeError)
    assert results[2] == "ok"
    assert limiter.active == 0


def test_concurrency_must_be_positive():
    with pytest.raises(ValueError):
        RateLimiter(concurrency=0)
