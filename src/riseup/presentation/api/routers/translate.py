"""Translation router."""

import logging

from fastapi import APIRouter, Response

from riseup.application.services import rate_limit_headers
from riseup.presentation.api.dependencies import ClientIdentifier, TranslationPipelineDep
from riseup.presentation.api.schemas import (
    RateLimitInfo,
    TranslateInfoResponse,
    TranslateRequest,
    TranslateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    summary="Translate text",
    responses={
        200: {"description": "Translated text and the tier that produced it"},
        400: {"description": "Empty, too long, unsupported or abusive input"},
        429: {"description": "Rate limit exceeded"},
        503: {"description": "Translation temporarily unavailable"},
    },
)
async def translate(
    body: TranslateRequest,
    response: Response,
    pipeline: TranslationPipelineDep,
    identifier: ClientIdentifier,
) -> TranslateResponse:
    """
    Translate text between the supported languages.

    `tier` is `skipped` when source and target match, `cache` when a
    previous translation was reused, and `remote` otherwise.
    """
    result, admission = await pipeline.translate_with_admission(
        body.to_domain(),
        identifier,
    )
    if admission is not None and pipeline.rate_limiter is not None:
        response.headers.update(
            rate_limit_headers(admission, pipeline.rate_limiter.config)
        )
    return TranslateResponse.from_result(result)


@router.get("", summary="Describe the translation endpoint")
async def describe(pipeline: TranslationPipelineDep) -> TranslateInfoResponse:
    """Static usage description. Consumes no quota."""
    limiter = pipeline.rate_limiter
    return TranslateInfoResponse(
        service="translation",
        supported_languages=list(pipeline.supported_languages),
        max_text_length=pipeline.max_text_length,
        rate_limit=RateLimitInfo(
            max_requests=limiter.config.max_requests if limiter else 0,
            window_ms=limiter.config.window_ms if limiter else 0,
        ),
        usage={
            "method": "POST",
            "body": '{"text": string, "targetLang": string, "sourceLang"?: string, "autoDetect"?: boolean}',
        },
    )
