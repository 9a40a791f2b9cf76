"""Search backends."""

from riseup.infrastructure.search.algolia import AlgoliaSearchClient, build_filter_string
from riseup.infrastructure.search.fallback_index import FallbackSearchIndex

__all__ = [
    "AlgoliaSearchClient",
    "FallbackSearchIndex",
    "build_filter_string",
]
