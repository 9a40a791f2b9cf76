"""In-process fuzzy search index over a bounded copy of the corpus."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from rapidfuzz import fuzz

from riseup.application.ports.search import SearchBackend
from riseup.domain.search import (
    FacetSet,
    SearchDocument,
    SearchMode,
    SearchOptions,
    SearchPage,
    tally_facets,
)
from riseup.domain.shared.time import utc_now

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 60.0

# Multiplier applied to each field's partial ratio; the best field wins
FIELD_WEIGHTS: dict[str, float] = {
    "title": 1.0,
    "body": 0.9,
    "topics": 0.85,
    "channel": 0.85,
}

_BODY_SCAN_LIMIT = 2000


@dataclass(frozen=True)
class _Entry:
    document: SearchDocument
    title: str
    body: str
    topics: str
    channel: str


def _entry(document: SearchDocument) -> _Entry:
    return _Entry(
        document=document,
        title=document.title.lower(),
        body=document.body[:_BODY_SCAN_LIMIT].lower(),
        topics=" ".join(sorted(document.topics)).lower(),
        channel=(document.channel_name or "").lower(),
    )


class FallbackSearchIndex(SearchBackend):
    """Fuzzy search over documents held in memory.

    Filters are applied first as a conjunction of predicates. A non-empty
    query then keeps documents whose best weighted field score reaches
    ``threshold`` (0-100) and orders them by score, newest first on ties.
    An empty query lists every matching document newest first.
    Pagination is applied last.

    Facet counts are tallied once when the index is built.
    """

    def __init__(
        self,
        documents: Iterable[SearchDocument],
        threshold: float = DEFAULT_THRESHOLD,
    ):
        unique: dict[str, SearchDocument] = {}
        for document in documents:
            unique.setdefault(document.id, document)

        ordered = sorted(unique.values(), key=lambda d: d.published_at, reverse=True)
        self._entries = [_entry(d) for d in ordered]
        self._threshold = threshold
        self._facets = tally_facets(ordered)
        self.built_at: datetime = utc_now()

    @property
    def mode(self) -> SearchMode:
        return "fallback"

    def __len__(self) -> int:
        return len(self._entries)

    def _score(self, query: str, entry: _Entry) -> float:
        best = 0.0
        for field, weight in FIELD_WEIGHTS.items():
            text = getattr(entry, field)
            if not text:
                continue
            score = fuzz.partial_ratio(query, text) * weight
            if score > best:
                best = score
        return best

    def match(self, options: SearchOptions) -> list[SearchDocument]:
        """All documents matching the query and filters, in result order."""
        candidates = [e for e in self._entries if options.filters.matches(e.document)]

        query = options.query.strip().lower()
        if not query:
            return [e.document for e in candidates]

        scored: list[tuple[float, int, SearchDocument]] = []
        for position, entry in enumerate(candidates):
            score = self._score(query, entry)
            if score >= self._threshold:
                scored.append((score, position, entry.document))

        # candidates are newest first, so position breaks ties by recency
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [document for _, _, document in scored]

    async def search(self, options: SearchOptions) -> SearchPage:
        matches = self.match(options)
        start = options.page * options.hits_per_page
        return SearchPage(
            hits=matches[start : start + options.hits_per_page],
            total_count=len(matches),
            page=options.page,
            hits_per_page=options.hits_per_page,
            mode="fallback",
        )

    async def facets(self) -> FacetSet:
        return {field: dict(counts) for field, counts in self._facets.items()}
