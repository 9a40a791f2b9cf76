"""Redis implementation of the shared store."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import redis.asyncio as redis
from redis.exceptions import RedisError

from riseup.application.ports.shared_store import SharedStore, SharedStoreError

logger = logging.getLogger(__name__)


class RedisSharedStore(SharedStore):
    """Shared store on redis-py's asyncio client.

    After a failure the store reports itself unavailable for
    ``retry_after`` seconds, so callers skip it instead of waiting on a
    socket timeout for every request.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 2.0,
        retry_after: float = 5.0,
        client: redis.Redis | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if client is None:
            client = redis.Redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )
        self._client = client
        self._retry_after = retry_after
        self._clock = clock
        self._down_until = 0.0

    @property
    def available(self) -> bool:
        return self._clock() >= self._down_until

    def _failure(self, operation: str, error: Exception) -> SharedStoreError:
        if self.available:
            logger.warning("Redis %s failed, backing off %.0fs: %s", operation, self._retry_after, error)
        self._down_until = self._clock() + self._retry_after
        return SharedStoreError(f"redis {operation} failed: {error}")

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            raise self._failure("get", e) from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as e:
            raise self._failure("set", e) from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except (RedisError, OSError) as e:
            raise self._failure("delete", e) from e

    async def increment_window(self, key: str, window_ms: int) -> tuple[int, int]:
        # MULTI/EXEC: create the window with its expiry only if absent, then count
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, px=window_ms, nx=True)
                pipe.incr(key)
                pipe.pttl(key)
                _, count, ttl_ms = await pipe.execute()
        except (RedisError, OSError) as e:
            raise self._failure("increment", e) from e
        return int(count), int(ttl_ms)

    async def ping(self) -> bool:
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed: %s", e)
            return False
        self._down_until = 0.0
        return True

    async def close(self) -> None:
        await self._client.aclose()
