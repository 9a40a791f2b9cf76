"""Application services."""

from riseup.application.services.cache_store import (
    FACETS_CACHE_KEY,
    CacheStore,
    CacheTTL,
    translation_cache_key,
)
from riseup.application.services.rate_limiter import (
    InMemoryRateLimiter,
    PeriodicSweeper,
    RateLimiter,
    client_identifier,
    rate_limit_headers,
)
from riseup.application.services.search_facade import SearchFacade, SearchStatus
from riseup.application.services.single_flight import SingleFlight
from riseup.application.services.translation_pipeline import TranslationPipeline

__all__ = [
    "FACETS_CACHE_KEY",
    "CacheStore",
    "CacheTTL",
    "InMemoryRateLimiter",
    "PeriodicSweeper",
    "RateLimiter",
    "SearchFacade",
    "SearchStatus",
    "SingleFlight",
    "TranslationPipeline",
    "client_identifier",
    "rate_limit_headers",
    "translation_cache_key",
]
