"""Search request/response schemas."""

from pydantic import Field

from riseup.domain.search import FacetSet, SearchDocument, SearchMode, SearchPage
from riseup.domain.shared.time import to_epoch_ms
from riseup.presentation.api.schemas.common import CamelModel


class SearchHitResponse(CamelModel):
    id: str
    title: str
    body: str
    source: str
    topics: list[str]
    channel_name: str | None = None
    published_at: int = Field(..., description="Epoch milliseconds")

    @classmethod
    def from_document(cls, document: SearchDocument) -> "SearchHitResponse":
        return cls(
            id=document.id,
            title=document.title,
            body=document.body,
            source=document.source,
            topics=sorted(document.topics),
            channel_name=document.channel_name,
            published_at=to_epoch_ms(document.published_at),
        )


class SearchResponse(CamelModel):
    """One page of results and the backend that served it."""

    hits: list[SearchHitResponse]
    total_count: int
    page: int
    hits_per_page: int
    total_pages: int
    mode: SearchMode

    @classmethod
    def from_page(cls, page: SearchPage) -> "SearchResponse":
        return cls(
            hits=[SearchHitResponse.from_document(doc) for doc in page.hits],
            total_count=page.total_count,
            page=page.page,
            hits_per_page=page.hits_per_page,
            total_pages=page.total_pages,
            mode=page.mode,
        )


class FacetsResponse(CamelModel):
    facets: FacetSet
    mode: SearchMode


class SearchStatusResponse(CamelModel):
    mode: SearchMode | None
    hosted_configured: bool
    corpus_configured: bool
    fallback_ready: bool


class ReindexResponse(CamelModel):
    indexed: int = Field(..., description="Documents written to the hosted index")
    mode: SearchMode


class RefreshResponse(CamelModel):
    mode: SearchMode
