"""Single-flight execution of expensive coroutines."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """Share one in-flight execution per key between concurrent callers.

    The first caller for a key starts the coroutine and registers its
    future; callers arriving while it runs attach to the same future and
    receive the same result or exception. Once the future settles the key
    is free again.

    Callers await the future through ``asyncio.shield``, so one caller
    being cancelled never cancels the shared work.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(fn())
            self._inflight[key] = future
            future.add_done_callback(lambda f: self._forget(key, f))
        else:
            logger.debug("Joining in-flight %s", key)
        return await asyncio.shield(future)

    def _forget(self, key: str, future: asyncio.Future[Any]) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        # Mark the exception as retrieved when every caller went away
        if not future.cancelled():
            future.exception()
