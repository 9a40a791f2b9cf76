"""Shared store port for the application layer.

One backing store serves both the cache and the rate limiter. Adapters
raise ``SharedStoreError`` on any failure; deciding what a failure means
(cold cache, fallback counter, reject) is left to the caller.
"""

from abc import ABC, abstractmethod


class SharedStoreError(Exception):
    """Raised by store adapters when the backing service fails."""


class SharedStore(ABC):
    """Port interface for the shared key/value and counter store."""

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether the store is configured and was reachable last time."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the raw value for ``key`` or None on a miss."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key``, expiring after ``ttl_seconds``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    async def increment_window(self, key: str, window_ms: int) -> tuple[int, int]:
        """Atomically count one request in the fixed window stored at ``key``.

        The first increment of a window creates the counter with an expiry
        of ``window_ms``; later increments leave the expiry untouched.

        Returns the count after the increment and the milliseconds left
        in the window.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Probe the backing service. Never raises."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the adapter."""
