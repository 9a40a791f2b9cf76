"""Search facade over the hosted index and the fallback index."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

from riseup.application.ports.search import CorpusReader, HostedSearchPort, SearchBackend
from riseup.application.services.cache_store import FACETS_CACHE_KEY, CacheStore, CacheTTL
from riseup.application.services.single_flight import SingleFlight
from riseup.domain.search import (
    FacetSet,
    FacetSnapshot,
    SearchDocument,
    SearchMode,
    SearchOptions,
    SearchPage,
)
from riseup.domain.shared.exceptions import (
    ConfigurationMissing,
    ProviderUnavailable,
    UpstreamTimeout,
)

logger = logging.getLogger(__name__)

FallbackFactory = Callable[[Sequence[SearchDocument]], SearchBackend]

_INITIALIZE = "search:initialize"
_BUILD_FALLBACK = "search:build-fallback"


@dataclass(frozen=True)
class SearchStatus:
    mode: SearchMode | None
    hosted_configured: bool
    corpus_configured: bool
    fallback_ready: bool


class SearchFacade:
    """One search and facet API backed by whichever backend is available.

    Backend state
    -------------
    The facade starts uninitialized. The first ``initialize()`` (or the
    first search) probes the hosted index; if it cannot be configured the
    facade builds a fallback index from the most recent corpus documents.
    The choice holds until ``reset()`` is called. Both initialization and
    the fallback build are single-flight.

    A hosted query that fails at request time is answered from the
    fallback index, and that result reports ``mode="fallback"``. The
    facade itself stays in hosted mode.
    """

    def __init__(
        self,
        hosted: HostedSearchPort | None,
        corpus: CorpusReader | None,
        cache: CacheStore,
        fallback_factory: FallbackFactory,
        max_documents: int = 1000,
        search_ttl: int = CacheTTL.SEARCH,
        facets_ttl: int = CacheTTL.FACETS,
    ):
        self._hosted = hosted
        self._corpus = corpus
        self._cache = cache
        self._fallback_factory = fallback_factory
        self._max_documents = max_documents
        self._search_ttl = search_ttl
        self._facets_ttl = facets_ttl

        self._flights = SingleFlight()
        self._backend: SearchBackend | None = None
        self._fallback: SearchBackend | None = None
        self._generation = 0

    @property
    def mode(self) -> SearchMode | None:
        """Current backend, or None before initialization."""
        return self._backend.mode if self._backend is not None else None

    def status(self) -> SearchStatus:
        return SearchStatus(
            mode=self.mode,
            hosted_configured=self._hosted is not None and self._hosted.configured,
            corpus_configured=self._corpus is not None,
            fallback_ready=self._fallback is not None,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> SearchMode:
        backend = await self._current_backend()
        return backend.mode

    def reset(self) -> None:
        """Forget the selected backend and the fallback index."""
        self._generation += 1
        self._backend = None
        self._fallback = None
        logger.info("Search backend reset")

    async def refresh(self) -> SearchMode:
        self.reset()
        return await self.initialize()

    async def reindex(self, limit: int) -> int:
        """Push up to ``limit`` corpus documents into the hosted index.

        Cached facets are dropped and the backend is selected again, since
        the hosted index may have just become usable.
        """
        if self._hosted is None or not self._hosted.configured:
            raise ConfigurationMissing("Hosted search index is not configured")
        if self._corpus is None:
            raise ConfigurationMissing("No article corpus configured")

        documents = await self._corpus.fetch_recent_documents(limit)
        indexed = await self._hosted.index(documents)
        logger.info("Indexed %d documents into the hosted search index", indexed)

        await self._cache.delete(FACETS_CACHE_KEY)
        self.reset()
        await self.initialize()
        return indexed

    async def _current_backend(self) -> SearchBackend:
        if self._backend is not None:
            return self._backend
        # Flights are scoped to a generation so a reset never joins a stale one
        generation = self._generation
        return await self._flights.do(
            f"{_INITIALIZE}:{generation}", partial(self._select_backend, generation)
        )

    async def _select_backend(self, generation: int) -> SearchBackend:
        backend: SearchBackend

        if self._hosted is not None and self._hosted.configured:
            try:
                await self._hosted.configure()
            except (ProviderUnavailable, UpstreamTimeout, ConfigurationMissing) as e:
                logger.warning("Hosted search unavailable, using fallback index: %s", e)
                backend = await self._fallback_backend()
            else:
                backend = self._hosted
        else:
            logger.info("Hosted search not configured, using fallback index")
            backend = await self._fallback_backend()

        if generation == self._generation:
            self._backend = backend
            logger.info("Search backend selected: %s", backend.mode)
        return backend

    async def _fallback_backend(self) -> SearchBackend:
        if self._fallback is not None:
            return self._fallback
        generation = self._generation
        return await self._flights.do(
            f"{_BUILD_FALLBACK}:{generation}", partial(self._build_fallback, generation)
        )

    async def _build_fallback(self, generation: int) -> SearchBackend:
        if self._corpus is None:
            raise ConfigurationMissing(
                "No hosted search index and no article corpus configured"
            )
        documents = await self._corpus.fetch_recent_documents(self._max_documents)
        index = self._fallback_factory(documents)
        logger.info("Built fallback search index over %d documents", len(documents))
        if generation == self._generation:
            self._fallback = index
        return index

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def search(self, options: SearchOptions) -> SearchPage:
        backend = await self._current_backend()
        if backend.mode != "hosted":
            return await backend.search(options)

        key = options.cache_key()
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return SearchPage.from_dict(cached)
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed cached search page %s", key)

        try:
            page = await backend.search(options)
        except (ProviderUnavailable, UpstreamTimeout) as e:
            logger.warning("Hosted search failed, answering from fallback index: %s", e)
            fallback = await self._fallback_backend()
            return await fallback.search(options)

        await self._cache.set(key, page.to_dict(), self._search_ttl)
        return page

    async def facet_snapshot(self) -> FacetSnapshot:
        backend = await self._current_backend()
        if backend.mode != "hosted":
            return FacetSnapshot(facets=await backend.facets(), mode=backend.mode)

        cached = await self._cache.get(FACETS_CACHE_KEY)
        if isinstance(cached, dict):
            return FacetSnapshot(facets=cached, mode="hosted")

        try:
            facets = await backend.facets()
        except (ProviderUnavailable, UpstreamTimeout) as e:
            logger.warning("Hosted facets failed, tallying fallback index: %s", e)
            fallback = await self._fallback_backend()
            return FacetSnapshot(facets=await fallback.facets(), mode="fallback")

        await self._cache.set(FACETS_CACHE_KEY, facets, self._facets_ttl)
        return FacetSnapshot(facets=facets, mode="hosted")

    async def facets(self) -> FacetSet:
        snapshot = await self.facet_snapshot()
        return snapshot.facets
