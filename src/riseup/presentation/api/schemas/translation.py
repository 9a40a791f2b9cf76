"""Translation request/response schemas."""

from pydantic import ConfigDict, Field

from riseup.domain.translation import TranslationRequest, TranslationResult, TranslationTier
from riseup.presentation.api.schemas.common import CamelModel


class TranslateRequest(CamelModel):
    """Request body for POST /translate.

    Length and content rules are checked by the pipeline so that they map
    to the stable error codes.
    """

    text: str = Field(..., description="Text to translate")
    target_lang: str = Field(..., description="Target language code")
    source_lang: str | None = Field(None, description="Source language code")
    auto_detect: bool = Field(False, description="Detect the source language")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"text": "سلام دنیا", "targetLang": "en", "autoDetect": True},
        },
    )

    def to_domain(self) -> TranslationRequest:
        return TranslationRequest(
            text=self.text,
            target_lang=self.target_lang,
            source_lang=self.source_lang,
            auto_detect=self.auto_detect,
        )


class TranslateResponse(CamelModel):
    translated_text: str
    detected_language: str
    source_lang: str
    target_lang: str
    tier: TranslationTier

    @classmethod
    def from_result(cls, result: TranslationResult) -> "TranslateResponse":
        return cls(
            translated_text=result.translated_text,
            detected_language=result.detected_language,
            source_lang=result.source_lang,
            target_lang=result.target_lang,
            tier=result.tier,
        )


class RateLimitInfo(CamelModel):
    max_requests: int
    window_ms: int


class TranslateInfoResponse(CamelModel):
    """Capability description returned by GET /translate."""

    service: str
    supported_languages: list[str]
    max_text_length: int
    rate_limit: RateLimitInfo
    usage: dict[str, str]
