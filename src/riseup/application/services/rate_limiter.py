"""Fixed-window rate limiting.

Each identifier owns one counter per window. The first request of a window
starts it with a count of 1 and a reset time of ``now + window``; later
requests in the same window are admitted while the count is below the
ceiling. Once the reset time has passed the next request starts a new
window.

``RateLimiter`` keeps its counters in the shared store so that every
process sees the same count. When no store is configured, or the store
fails, it falls back to ``InMemoryRateLimiter``, a process-local map that
must be swept periodically.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import math
import threading
import time
from collections.abc import Callable, Sequence
from typing import Literal, Protocol

from riseup.application.ports.shared_store import SharedStore, SharedStoreError
from riseup.domain.rate_limit import RateLimitConfig, RateLimitRecord, RateLimitResult
from riseup.domain.shared.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

FailMode = Literal["fallback", "open", "closed"]
Clock = Callable[[], float]


class InMemoryRateLimiter:
    """Process-local fixed-window counters.

    All updates happen under one lock, so concurrent checks for the same
    identifier can never admit more than ``max_requests``.
    """

    def __init__(self, config: RateLimitConfig, clock: Clock = time.time):
        self._config = config
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._records)

    def check_limit(self, identifier: str) -> RateLimitResult:
        now = self._clock()
        max_requests = self._config.max_requests

        with self._lock:
            record = self._records.get(identifier)
            if record is None or record.is_expired(now):
                record = RateLimitRecord.start(
                    identifier, now, self._config.window_seconds
                )
                self._records[identifier] = record
                return RateLimitResult.admit(max_requests - 1, record.reset_time)

            if record.count >= max_requests:
                return RateLimitResult.reject(record.reset_time, now)

            record.count += 1
            return RateLimitResult.admit(max_requests - record.count, record.reset_time)

    def get_record(self, identifier: str) -> RateLimitRecord | None:
        with self._lock:
            return self._records.get(identifier)

    def reset(self, identifier: str | None = None) -> None:
        """Forget one identifier, or every identifier when none is given."""
        with self._lock:
            if identifier is None:
                self._records.clear()
            else:
                self._records.pop(identifier, None)

    def sweep(self) -> int:
        """Evict records whose window has elapsed. Returns how many went."""
        now = self._clock()
        with self._lock:
            expired = [k for k, r in self._records.items() if r.is_expired(now)]
            for key in expired:
                del self._records[key]
        if expired:
            logger.debug("Swept %d expired rate limit records", len(expired))
        return len(expired)


class RateLimiter:
    """Shared-store rate limiter with an in-process fallback.

    ``fail_mode`` decides what a store error during the increment means:

    - ``fallback`` (default): count the request in the in-process map
    - ``open``: admit the request without counting it
    - ``closed``: reject the request until the window would have reset

    A limiter without a store always uses the in-process map; it is never
    silently disabled.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        store: SharedStore | None = None,
        fail_mode: FailMode = "fallback",
        fallback: InMemoryRateLimiter | None = None,
        clock: Clock = time.time,
    ):
        self._config = config
        self._store = store
        self._fail_mode = fail_mode
        self._clock = clock
        self._fallback = fallback or InMemoryRateLimiter(config, clock=clock)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def fallback(self) -> InMemoryRateLimiter:
        return self._fallback

    async def check_limit(self, identifier: str) -> RateLimitResult:
        if self._store is None or not self._store.available:
            return self._fallback.check_limit(identifier)

        key = self._config.storage_key(identifier)
        try:
            count, ttl_ms = await self._store.increment_window(
                key, self._config.window_ms
            )
        except SharedStoreError as e:
            return self._on_store_error(identifier, e)

        now = self._clock()
        if ttl_ms <= 0:
            ttl_ms = self._config.window_ms
        reset_time = now + ttl_ms / 1000

        # Rejected requests still increment the shared counter, but only
        # requests with count <= max_requests are ever admitted.
        if count > self._config.max_requests:
            return RateLimitResult.reject(reset_time, now)
        return RateLimitResult.admit(self._config.max_requests - count, reset_time)

    def _on_store_error(self, identifier: str, error: Exception) -> RateLimitResult:
        now = self._clock()
        reset_time = now + self._config.window_seconds

        if self._fail_mode == "open":
            logger.warning("Rate limit store failed, admitting (fail open): %s", error)
            return RateLimitResult.admit(self._config.max_requests - 1, reset_time)
        if self._fail_mode == "closed":
            logger.warning("Rate limit store failed, rejecting (fail closed): %s", error)
            return RateLimitResult.reject(reset_time, now)

        logger.warning("Rate limit store failed, using in-process counters: %s", error)
        return self._fallback.check_limit(identifier)

    async def enforce(self, identifier: str) -> RateLimitResult:
        """Check the limit and raise ``RateLimitExceeded`` on rejection."""
        result = await self.check_limit(identifier)
        if not result.allowed:
            logger.info("Rate limit exceeded for %s", identifier)
            raise RateLimitExceeded(
                limit=self._config.max_requests,
                reset_time=result.reset_time,
                retry_after_seconds=result.retry_after_seconds,
            )
        return result

    async def reset(self, identifier: str) -> None:
        self._fallback.reset(identifier)
        if self._store is None:
            return
        try:
            await self._store.delete(self._config.storage_key(identifier))
        except SharedStoreError as e:
            logger.warning("Failed to reset rate limit for %s: %s", identifier, e)

    def sweep(self) -> int:
        return self._fallback.sweep()


class Sweepable(Protocol):
    def sweep(self) -> int: ...


def client_identifier(ip: str | None, user_agent: str | None) -> str:
    """Derive a rate-limit identifier from the client address and user agent.

    Only the first address of a forwarded chain is used. The user agent is
    reduced to 8 hex digits of its SHA-256.
    """
    address = (ip or "").split(",")[0].strip() or "unknown"
    fingerprint = hashlib.sha256((user_agent or "").encode("utf-8")).hexdigest()[:8]
    return f"{address}:{fingerprint}"


def rate_limit_headers(result: RateLimitResult, config: RateLimitConfig) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(config.max_requests),
        "X-RateLimit-Remaining": str(max(0, result.remaining)),
        "X-RateLimit-Reset": str(math.ceil(result.reset_time)),
    }
    if not result.allowed:
        headers["Retry-After"] = str(result.retry_after_seconds)
    return headers


class PeriodicSweeper:
    """Background task that sweeps in-process counters on an interval."""

    def __init__(self, limiters: Sequence[Sweepable], interval: float):
        self._limiters = list(limiters)
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def sweep_once(self) -> int:
        return sum(limiter.sweep() for limiter in self._limiters)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            evicted = self.sweep_once()
            if evicted:
                logger.debug("Periodic sweep evicted %d records", evicted)
