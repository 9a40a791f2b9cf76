"""API request and response schemas."""

from riseup.presentation.api.schemas.common import (
    ErrorResponse,
    HealthResponse,
    RateLimitErrorResponse,
    StoreHealth,
)
from riseup.presentation.api.schemas.search import (
    FacetsResponse,
    ReindexResponse,
    RefreshResponse,
    SearchHitResponse,
    SearchResponse,
    SearchStatusResponse,
)
from riseup.presentation.api.schemas.translation import (
    RateLimitInfo,
    TranslateInfoResponse,
    TranslateRequest,
    TranslateResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "RateLimitErrorResponse",
    "StoreHealth",
    # Search
    "FacetsResponse",
    "ReindexResponse",
    "RefreshResponse",
    "SearchHitResponse",
    "SearchResponse",
    "SearchStatusResponse",
    # Translation
    "RateLimitInfo",
    "TranslateInfoResponse",
    "TranslateRequest",
    "TranslateResponse",
]
