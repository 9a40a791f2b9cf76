"""Tests for CacheStore."""

import pytest

from riseup.application.services import CacheStore, translation_cache_key
from riseup.infrastructure.store import InMemorySharedStore
from tests.shared.fakes import BrokenSharedStore, FakeClock


class TestCacheStoreRoundTrip:
    """Tests for get/set/delete against a working store."""

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = CacheStore(InMemorySharedStore(clock=self.clock))

    @pytest.mark.asyncio
    async def test_set_then_get_returns_value(self):
        assert await self.cache.set("k", {"hits": [1, 2]}, ttl_seconds=60) is True

        assert await self.cache.get("k") == {"hits": [1, 2]}

    @pytest.mark.asyncio
    async def test_value_expires_after_ttl(self):
        await self.cache.set("k", "v", ttl_seconds=60)

        self.clock.advance(59)
        assert await self.cache.get("k") == "v"

        self.clock.advance(1)
        assert await self.cache.get("k") is None

    @pytest.mark.asyncio
    async def test_rewrite_overwrites(self):
        await self.cache.set("k", "old", ttl_seconds=60)
        await self.cache.set("k", "new", ttl_seconds=60)

        assert await self.cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.cache.set("k", "v", ttl_seconds=60)

        assert await self.cache.delete("k") is True
        assert await self.cache.get("k") is None

    @pytest.mark.asyncio
    async def test_none_is_not_stored(self):
        assert await self.cache.set("k", None, ttl_seconds=60) is False

    @pytest.mark.asyncio
    async def test_unserializable_value_is_refused(self):
        assert await self.cache.set("k", object(), ttl_seconds=60) is False


class TestCacheStoreSoftFail:
    """The cache never raises, whatever happens to the store."""

    @pytest.mark.asyncio
    async def test_without_store_everything_misses(self):
        cache = CacheStore(None)

        assert cache.available is False
        assert await cache.set("k", "v", 60) is False
        assert await cache.get("k") is None
        assert await cache.delete("k") is False

    @pytest.mark.asyncio
    async def test_store_errors_read_as_miss(self):
        store = BrokenSharedStore()
        cache = CacheStore(store)

        assert await cache.set("k", "v", 60) is False
        assert await cache.get("k") is None
        assert await cache.delete("k") is False
        assert store.calls == 3

    @pytest.mark.asyncio
    async def test_undecodable_entry_reads_as_miss(self):
        store = InMemorySharedStore()
        await store.set("k", "{not json", 60)

        assert await CacheStore(store).get("k") is None


class TestTranslationCacheKey:
    """Tests for translation_cache_key."""

    def test_includes_languages_and_prefix(self):
        key = translation_cache_key("fa", "en", "سلام دنیا")

        assert key.startswith("translate:fa:en:سلام دنیا:")

    def test_texts_sharing_a_prefix_do_not_collide(self):
        prefix = "x" * 100

        assert translation_cache_key("en", "fa", prefix + "a") != translation_cache_key(
            "en", "fa", prefix + "b"
        )
