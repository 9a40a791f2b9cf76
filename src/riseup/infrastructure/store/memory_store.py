"""Process-local implementation of the shared store."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable

from riseup.application.ports.shared_store import SharedStore


class InMemorySharedStore(SharedStore):
    """Dictionary-backed store with expiring entries.

    Selected with ``REDIS_URL=memory://`` and used throughout the tests.
    Counts are not shared across processes.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def _live(self, key: str, now: float) -> tuple[str, float | None] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and now >= expires_at:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key, self._clock())
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def increment_window(self, key: str, window_ms: int) -> tuple[int, int]:
        now = self._clock()
        with self._lock:
            entry = self._live(key, now)
            if entry is None:
                entry = ("0", now + window_ms / 1000)
            count = int(entry[0]) + 1
            expires_at = entry[1]
            self._entries[key] = (str(count), expires_at)

        if expires_at is None:
            return count, -1
        return count, max(0, math.ceil((expires_at - now) * 1000))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock:
            self._entries.clear()
