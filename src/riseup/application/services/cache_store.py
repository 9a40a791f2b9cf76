"""Non-throwing JSON cache on top of the shared store."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

from riseup.application.ports.shared_store import SharedStore, SharedStoreError

logger = logging.getLogger(__name__)

FACETS_CACHE_KEY = "facets:all"
_TRANSLATION_PREFIX_LENGTH = 100


class CacheTTL:
    """Default entry lifetimes in seconds."""

    SEARCH = 5 * 60
    FACETS = 15 * 60
    # Translations of a fixed text pair do not change
    TRANSLATION = 30 * 24 * 60 * 60


def translation_cache_key(source_lang: str, target_lang: str, text: str) -> str:
    """Key on the language pair and text.

    The readable part keeps the first 100 characters; the digest of the
    full text keeps two texts with a shared prefix apart.
    """
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]
    prefix = text[:_TRANSLATION_PREFIX_LENGTH]
    return f"translate:{source_lang}:{target_lang}:{prefix}:{digest}"


class CacheStore:
    """Key/value cache with per-entry TTL.

    Every operation is safe to call without a backing store: a missing
    store, a store error or an undecodable value all read as a miss (or
    ``False`` for writes), so callers treat the cache as cold and carry on.
    """

    def __init__(self, store: SharedStore | None):
        self._store = store

    @property
    def available(self) -> bool:
        return self._store is not None and self._store.available

    async def get(self, key: str) -> Any | None:
        if not self.available:
            return None
        try:
            raw = await self._store.get(key)  # type: ignore[union-attr]
        except SharedStoreError as e:
            logger.warning("Cache get failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        if value is None or not self.available:
            return False
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning("Refusing to cache %s: %s", key, e)
            return False
        try:
            await self._store.set(key, payload, ttl_seconds)  # type: ignore[union-attr]
        except SharedStoreError as e:
            logger.warning("Cache set failed for %s: %s", key, e)
            return False
        return True

    async def delete(self, key: str) -> bool:
        if not self.available:
            return False
        try:
            await self._store.delete(key)  # type: ignore[union-attr]
        except SharedStoreError as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
            return False
        return True
