"""Shared store adapters."""

from riseup.infrastructure.store.memory_store import InMemorySharedStore
from riseup.infrastructure.store.redis_store import RedisSharedStore

__all__ = ["InMemorySharedStore", "RedisSharedStore"]
