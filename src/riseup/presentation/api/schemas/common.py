"""Common schemas shared across API endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema whose JSON field names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    detail: str = Field(..., description="Error message")
    code: str | None = Field(None, description="Error code for programmatic handling")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"detail": "Text is required", "code": "EMPTY_TEXT"},
        },
    )


class RateLimitErrorResponse(ErrorResponse):
    """Body of a 429 response."""

    retry_after: int = Field(..., alias="retryAfter", description="Seconds to wait")


class StoreHealth(CamelModel):
    configured: bool
    available: bool


class HealthResponse(CamelModel):
    """Health check response schema."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    store: StoreHealth
    search_mode: str | None = Field(None, description="hosted, fallback or null")
