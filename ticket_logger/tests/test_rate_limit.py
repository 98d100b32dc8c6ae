"""
Unit tests for the fixed-window request counters.
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from ticket_logger.app.core.rate_limit import (
    REDIS_KEY_PREFIX,
    MemoryWindowCounter,
    RateLimitMiddleware,
    RedisWindowCounter,
)


@pytest.mark.asyncio
async def test_memory_counter_counts_per_client():
    counter = MemoryWindowCounter(window_seconds=60)
    assert (await counter.hit("10.0.0.1"))[0] == 1
    assert (await counter.hit("10.0.0.1"))[0] == 2
    assert (await counter.hit("10.0.0.2"))[0] == 1


@pytest.mark.asyncio
async def test_memory_counter_resets_after_window():
    clock = {"now": 1000.0}
    counter = MemoryWindowCounter(window_seconds=60, clock=lambda: clock["now"])
    await counter.hit("client")
    count, reset_in = await counter.hit("client")
    assert count == 2
    assert reset_in == 60

    clock["now"] += 61
    count, _ = await counter.hit("client")
    assert count == 1


@pytest.mark.asyncio
async def test_redis_counter_sets_expiry_once(mock_redis):
    counter = RedisWindowCounter(mock_redis, window_seconds=900)
    assert await counter.hit("10.0.0.1") == (1, 900)
    assert await counter.hit("10.0.0.1") == (2, 900)
    assert mock_redis.store[f"{REDIS_KEY_PREFIX}10.0.0.1"] == 2


@pytest.mark.asyncio
async def test_redis_counter_restores_missing_expiry(mock_redis):
    mock_redis.store[f"{REDIS_KEY_PREFIX}client"] = 5
    counter = RedisWindowCounter(mock_redis, window_seconds=900)
    assert await counter.hit("client") == (6, 900)
    assert mock_redis.ttls[f"{REDIS_KEY_PREFIX}client"] == 900


def _limited_app(counter, limit):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, counter=counter, limit=limit, path_prefix="/api/")

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    return app


@pytest.mark.asyncio
async def test_middleware_blocks_over_limit_with_redis(mock_redis):
    app = _limited_app(RedisWindowCounter(mock_redis, window_seconds=900), limit=1)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.get("/api/ping")).status_code == 200
        assert (await ac.get("/api/ping")).status_code == 429


@pytest.mark.asyncio
async def test_middleware_fails_open_when_redis_is_down(mock_redis):
    mock_redis.fail = True
    app = _limited_app(RedisWindowCounter(mock_redis, window_seconds=900), limit=1)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for _ in range(3):
            response = await ac.get("/api/ping")
            assert response.status_code == 200
            assert "x-ratelimit-limit" not in response.headers
