"""Value objects for article search."""

from __future__ import annotations

import hashlib
import json
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from riseup.domain.shared.time import ensure_tz_aware, from_epoch_ms, to_epoch_ms

SearchMode = Literal["hosted", "fallback"]

# Facet field names as exposed on the wire and in the hosted index
FACET_FIELDS: tuple[str, ...] = ("source", "topics", "channelName")

FacetSet = dict[str, dict[str, int]]

DEFAULT_HITS_PER_PAGE = 20
MAX_HITS_PER_PAGE = 100


class SearchDocument(BaseModel):
    """Read-only copy of an article from the corpus."""

    id: str = Field(..., min_length=1)
    title: str = ""
    body: str = ""
    source: str
    topics: frozenset[str] = frozenset()
    channel_name: str | None = Field(default=None, alias="channelName")
    published_at: datetime = Field(..., alias="publishedAt")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("published_at", mode="before")
    @classmethod
    def _parse_published_at(cls, v: Any) -> Any:
        """Accept epoch milliseconds (number or digit string) or ISO strings."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v.strip())
        if isinstance(v, (int, float)):
            try:
                return from_epoch_ms(v)
            except (OverflowError, OSError, ValueError) as e:
                raise ValueError(f"publishedAt out of range: {v!r}") from e
        return v

    @field_validator("published_at")
    @classmethod
    def _ensure_aware(cls, v: datetime) -> datetime:
        return ensure_tz_aware(v)

    @field_validator("topics", mode="before")
    @classmethod
    def _coerce_topics(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset(t.strip() for t in v.split(",") if t.strip())
        return v

    @classmethod
    def from_article(cls, data: Mapping[str, Any]) -> SearchDocument:
        """Build a document from a corpus or hosted-index article record.

        Articles carry ``content`` and ``summary`` rather than ``body``, and
        hosted index records use ``objectID`` instead of ``id``.
        """
        body = data.get("body") or data.get("content") or data.get("summary") or ""
        return cls.model_validate(
            {
                "id": str(data.get("id") or data.get("objectID") or ""),
                "title": data.get("title") or "",
                "body": body,
                "source": data.get("source") or "unknown",
                "topics": data.get("topics") or [],
                "channelName": data.get("channelName") or data.get("channel_name"),
                "publishedAt": data.get("publishedAt")
                or data.get("published_at")
                or data.get("createdAt"),
            }
        )

    def to_index_record(self) -> dict[str, Any]:
        """Record shape stored in the hosted index."""
        return {
            "objectID": self.id,
            "title": self.title,
            "body": self.body,
            "source": self.source,
            "topics": sorted(self.topics),
            "channelName": self.channel_name,
            "publishedAt": to_epoch_ms(self.published_at),
        }

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class SearchFilters:
    """Optional filters; all given filters must match (conjunction).

    ``topics`` matches when the document carries at least one of them.
    The date range is inclusive on both ends.
    """

    source: str | None = None
    topics: frozenset[str] = frozenset()
    channel_name: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.source
            or self.topics
            or self.channel_name
            or self.date_from
            or self.date_to
        )

    def matches(self, document: SearchDocument) -> bool:
        if self.source and document.source != self.source:
            return False
        if self.topics and not (self.topics & document.topics):
            return False
        if self.channel_name and document.channel_name != self.channel_name:
            return False
        if self.date_from and document.published_at < ensure_tz_aware(self.date_from):
            return False
        if self.date_to and document.published_at > ensure_tz_aware(self.date_to):
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "topics": sorted(self.topics),
            "channelName": self.channel_name,
            "dateFrom": to_epoch_ms(self.date_from) if self.date_from else None,
            "dateTo": to_epoch_ms(self.date_to) if self.date_to else None,
        }


@dataclass(frozen=True)
class SearchOptions:
    """Free-text query, filters and pagination (pages are zero-based)."""

    query: str = ""
    filters: SearchFilters = field(default_factory=SearchFilters)
    page: int = 0
    hits_per_page: int = DEFAULT_HITS_PER_PAGE

    def __post_init__(self) -> None:
        if self.page < 0:
            msg = "page must not be negative"
            raise ValueError(msg)
        if not 1 <= self.hits_per_page <= MAX_HITS_PER_PAGE:
            msg = f"hits_per_page must be between 1 and {MAX_HITS_PER_PAGE}"
            raise ValueError(msg)

    def cache_key(self) -> str:
        payload = json.dumps(
            {
                "q": self.query.strip().lower(),
                "f": self.filters.to_dict(),
                "p": self.page,
                "n": self.hits_per_page,
            },
            sort_keys=True,
            ensure_ascii=False,
        )
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:32]
        return f"search:{digest}"


@dataclass(frozen=True)
class SearchPage:
    """One page of search results and the backend that served it."""

    hits: list[SearchDocument]
    total_count: int
    page: int
    hits_per_page: int
    mode: SearchMode

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return math.ceil(self.total_count / self.hits_per_page)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": [hit.to_dict() for hit in self.hits],
            "totalCount": self.total_count,
            "page": self.page,
            "hitsPerPage": self.hits_per_page,
            "mode": self.mode,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchPage:
        return cls(
            hits=[SearchDocument.model_validate(hit) for hit in data["hits"]],
            total_count=int(data["totalCount"]),
            page=int(data["page"]),
            hits_per_page=int(data["hitsPerPage"]),
            mode=data["mode"],
        )


@dataclass(frozen=True)
class FacetSnapshot:
    """Facet counts at one point in time and the backend that produced them."""

    facets: FacetSet
    mode: SearchMode


def tally_facets(documents: Iterable[SearchDocument]) -> FacetSet:
    """Count documents per distinct value of each facet field.

    ``source`` is single-valued, so its counts sum to the document count.
    Documents without a channel are not counted under ``channelName``.
    """
    sources: Counter[str] = Counter()
    topics: Counter[str] = Counter()
    channels: Counter[str] = Counter()

    for document in documents:
        sources[document.source] += 1
        topics.update(document.topics)
        if document.channel_name:
            channels[document.channel_name] += 1

    return {
        "source": dict(sources),
        "topics": dict(topics),
        "channelName": dict(channels),
    }
