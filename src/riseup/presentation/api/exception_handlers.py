"""Centralized exception handlers for the FastAPI application.

Domain exceptions are mapped to HTTP responses with a consistent body.

Error Response Format:
    {
        "detail": "Human-readable error message",
        "code": "MACHINE_READABLE_ERROR_CODE"
    }

Rate limit rejections (429) add ``retryAfter`` to the body and the
``X-RateLimit-*`` and ``Retry-After`` headers.
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from riseup.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    RateLimitExceeded,
    ValidationError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Error Code to HTTP Status Mapping
# =============================================================================

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    # 400 Bad Request - validation errors
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMPTY_TEXT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TEXT_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CONTENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNSUPPORTED_LANGUAGE: status.HTTP_400_BAD_REQUEST,
    # 401 Unauthorized - admin secret
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    # 429 Too Many Requests
    ErrorCode.RATE_LIMIT_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    # 502/503 - external provider errors without a fallback
    ErrorCode.PROVIDER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TRANSLATION_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CONFIGURATION_MISSING: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.UPSTREAM_TIMEOUT: status.HTTP_502_BAD_GATEWAY,
    # 500 Internal Server Error
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _get_status_for_exception(exc: DomainException) -> int:
    if exc.code in ERROR_CODE_TO_STATUS:
        return ERROR_CODE_TO_STATUS[exc.code]
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _create_error_response(
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
    **extra: object,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code, **extra},
        headers=headers,
    )


def rate_limit_exceeded_response(exc: RateLimitExceeded) -> JSONResponse:
    headers = {
        "X-RateLimit-Limit": str(exc.limit),
        "X-RateLimit-Remaining": str(max(0, exc.remaining)),
        "X-RateLimit-Reset": str(math.ceil(exc.reset_time)),
        "Retry-After": str(exc.retry_after_seconds),
    }
    return _create_error_response(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        message=exc.message,
        code=exc.code.value,
        headers=headers,
        retryAfter=exc.retry_after_seconds,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application."""

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(
        request: Request,
        exc: RateLimitExceeded,
    ) -> JSONResponse:
        logger.info(
            "Rate limit exceeded on %s %s (retry after %ds)",
            request.method,
            request.url.path,
            exc.retry_after_seconds,
        )
        return rate_limit_exceeded_response(exc)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle all domain exceptions with structured response.

        Logs the full exception details for debugging while returning
        a safe, user-friendly message to the client.
        """
        status_code = _get_status_for_exception(exc)

        logger.warning(
            "Domain exception on %s %s: %s (code=%s, details=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code.value,
            exc.details,
        )

        return _create_error_response(
            status_code=status_code,
            message=exc.message,
            code=exc.code.value,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed requests as 400 with the first problem."""
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", message)

        logger.info("Invalid request on %s %s: %s", request.method, request.url.path, message)
        return _create_error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=message,
            code=ErrorCode.VALIDATION_ERROR.value,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unhandled exceptions with consistent error format."""
        logger.exception(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="An internal error occurred",
            code=ErrorCode.INTERNAL_ERROR.value,
        )
