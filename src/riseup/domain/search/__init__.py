"""Search domain."""

from riseup.domain.search.value_objects import (
    DEFAULT_HITS_PER_PAGE,
    FACET_FIELDS,
    MAX_HITS_PER_PAGE,
    FacetSet,
    FacetSnapshot,
    SearchDocument,
    SearchFilters,
    SearchMode,
    SearchOptions,
    SearchPage,
    tally_facets,
)

__all__ = [
    "DEFAULT_HITS_PER_PAGE",
    "FACET_FIELDS",
    "MAX_HITS_PER_PAGE",
    "FacetSet",
    "FacetSnapshot",
    "SearchDocument",
    "SearchFilters",
    "SearchMode",
    "SearchOptions",
    "SearchPage",
    "tally_facets",
]
