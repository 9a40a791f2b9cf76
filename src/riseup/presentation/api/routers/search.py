"""Search router: full-text search, facets and admin operations."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query

from riseup.domain.search import (
    DEFAULT_HITS_PER_PAGE,
    MAX_HITS_PER_PAGE,
    SearchFilters,
    SearchOptions,
)
from riseup.domain.shared.time import MAX_EPOCH_MS, from_epoch_ms
from riseup.presentation.api.dependencies import (
    AdminAccess,
    SearchFacadeDep,
    SearchRateLimit,
)
from riseup.presentation.api.schemas import (
    FacetsResponse,
    ReindexResponse,
    RefreshResponse,
    SearchResponse,
    SearchStatusResponse,
)
from riseup_config.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

QueryParam = Annotated[str, Query(max_length=500, description="Free-text query")]
SourceParam = Annotated[str | None, Query(description="Exact source")]
TopicsParam = Annotated[
    str | None,
    Query(description="Comma-separated topics; any of them matches"),
]
ChannelParam = Annotated[
    str | None,
    Query(alias="channelName", description="Exact channel name"),
]
DateFromParam = Annotated[
    int | None,
    Query(
        alias="dateFrom",
        ge=0,
        le=MAX_EPOCH_MS,
        description="Earliest publishedAt (epoch ms)",
    ),
]
DateToParam = Annotated[
    int | None,
    Query(
        alias="dateTo",
        ge=0,
        le=MAX_EPOCH_MS,
        description="Latest publishedAt (epoch ms)",
    ),
]
PageParam = Annotated[int, Query(ge=0, description="Zero-based page number")]
LimitParam = Annotated[
    int,
    Query(ge=1, le=MAX_HITS_PER_PAGE, description="Hits per page"),
]


def _parse_topics(topics: str | None) -> frozenset[str]:
    if not topics:
        return frozenset()
    return frozenset(t.strip() for t in topics.split(",") if t.strip())


@router.get(
    "",
    summary="Search articles",
    responses={
        200: {"description": "One page of matching articles"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def search_articles(
    facade: SearchFacadeDep,
    _: SearchRateLimit,
    q: QueryParam = "",
    source: SourceParam = None,
    topics: TopicsParam = None,
    channel_name: ChannelParam = None,
    date_from: DateFromParam = None,
    date_to: DateToParam = None,
    page: PageParam = 0,
    limit: LimitParam = DEFAULT_HITS_PER_PAGE,
) -> SearchResponse:
    """
    Search articles by free text and filters.

    All given filters must match; a document matches `topics` when it has
    at least one of them. `mode` reports whether the hosted index or the
    local fallback index answered.
    """
    options = SearchOptions(
        query=q,
        filters=SearchFilters(
            source=source or None,
            topics=_parse_topics(topics),
            channel_name=channel_name or None,
            date_from=from_epoch_ms(date_from) if date_from is not None else None,
            date_to=from_epoch_ms(date_to) if date_to is not None else None,
        ),
        page=page,
        hits_per_page=limit,
    )
    result = await facade.search(options)
    return SearchResponse.from_page(result)


@router.get(
    "/facets",
    summary="Get facet counts",
    responses={429: {"description": "Rate limit exceeded"}},
)
async def get_facets(
    facade: SearchFacadeDep,
    _: SearchRateLimit,
) -> FacetsResponse:
    """Document counts per source, topic and channel."""
    snapshot = await facade.facet_snapshot()
    return FacetsResponse(facets=snapshot.facets, mode=snapshot.mode)


@router.get("/status", summary="Get search backend status")
async def get_status(facade: SearchFacadeDep) -> SearchStatusResponse:
    status = facade.status()
    return SearchStatusResponse(
        mode=status.mode,
        hosted_configured=status.hosted_configured,
        corpus_configured=status.corpus_configured,
        fallback_ready=status.fallback_ready,
    )


@router.post(
    "/index",
    summary="Re-index the corpus into the hosted index",
    responses={
        401: {"description": "Missing or wrong admin secret"},
        503: {"description": "Hosted index or corpus not configured"},
    },
)
async def reindex(facade: SearchFacadeDep, _: AdminAccess) -> ReindexResponse:
    """
    Push the most recent corpus documents into the hosted index.

    Cached facets are dropped and the backend is selected again.
    Requires `Authorization: Bearer <ADMIN_SECRET>`.
    """
    indexed = await facade.reindex(get_settings().search_reindex_max_documents)
    return ReindexResponse(indexed=indexed, mode=await facade.initialize())


@router.post(
    "/refresh",
    summary="Reset and re-initialize the search backend",
    responses={401: {"description": "Missing or wrong admin secret"}},
)
async def refresh(facade: SearchFacadeDep, _: AdminAccess) -> RefreshResponse:
    """Forget the selected backend and the fallback index, then select again."""
    mode = await facade.refresh()
    logger.info("Search backend refreshed, now %s", mode)
    return RefreshResponse(mode=mode)
