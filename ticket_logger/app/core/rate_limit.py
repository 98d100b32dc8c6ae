"""
Fixed-window rate limiting.

Each client address gets `limit` requests per window. Counters live in
process memory by default, or in Redis when several workers must share them.
"""

import logging
import math
import time
from typing import Callable, Dict, Protocol, Tuple

from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger("ticket_logger.rate_limit")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
REDIS_KEY_PREFIX = "ratelimit:"


class WindowCounter(Protocol):
    async def hit(self, key: str) -> Tuple[int, int]:
        """Count one request for `key`; return (hits in window, seconds until reset)."""
        ...


class MemoryWindowCounter:
    """Process-wide counters keyed by client, reset when the window elapses."""

    def __init__(self, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._next_sweep = 0.0

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        self._hits = {key: entry for key, entry in self._hits.items() if entry[1] > now}
        self._next_sweep = now + self.window_seconds

    async def hit(self, key: str) -> Tuple[int, int]:
        now = self.clock()
        self._sweep(now)
        count, reset_at = self._hits.get(key, (0, 0.0))
        if now >= reset_at:
            count, reset_at = 0, now + self.window_seconds
        count += 1
        self._hits[key] = (count, reset_at)
        return count, math.ceil(reset_at - now)


class RedisWindowCounter:
    """Counters shared through Redis with INCR and a key TTL."""

    def __init__(self, client: Redis, window_seconds: int):
        self.client = client
        self.window_seconds = window_seconds

    async def hit(self, key: str) -> Tuple[int, int]:
        redis_key = f"{REDIS_KEY_PREFIX}{key}"
        count = await self.client.incr(redis_key)
        if count == 1:
            await self.client.expire(redis_key, self.window_seconds)
        ttl = await self.client.ttl(redis_key)
        if ttl < 0:
            # Key lost its expiry (e.g. crash between INCR and EXPIRE)
            await self.client.expire(redis_key, self.window_seconds)
            ttl = self.window_seconds
        return count, ttl


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a `WindowCounter` to every request under `path_prefix`."""

    def __init__(self, app, counter: WindowCounter, limit: int, path_prefix: str = "/api/"):
        super().__init__(app)
        self.counter = counter
        self.limit = limit
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            count, reset_in = await self.counter.hit(client_ip)
        except (RedisError, OSError) as exc:
            # Fail open: an unreachable counter store must not take the API down
            logger.warning("Rate limit store unavailable, allowing request: %s", exc)
            return await call_next(request)

        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(self.limit - count, 0)),
            "X-RateLimit-Reset": str(reset_in),
        }
        if count > self.limit:
            logger.warning(
                "Rate limit exceeded",
                extra={"ip": client_ip, "path": request.url.path, "hits": count},
            )
            headers["Retry-After"] = str(reset_in)
            return JSONResponse(status_code=429, content={"message": RATE_LIMIT_MESSAGE}, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
