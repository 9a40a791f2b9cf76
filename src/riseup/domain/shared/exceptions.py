"""Shared domain exceptions and error codes.

This module defines the base exception hierarchy and error codes for the
whole service. All domain exceptions inherit from DomainException so the
presentation layer can map them to HTTP responses in one place.

Propagation policy:
- ProviderUnavailable and UpstreamTimeout are raised by adapters and are
  absorbed by any component that owns a fallback path.
- TranslationUnavailable is what the translation pipeline raises when the
  remote call itself fails, since there is no local substitute for it.
- RateLimitExceeded is always surfaced to the caller.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public API contract. Should not be changed.
    """

    # Validation Errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EMPTY_TEXT = "EMPTY_TEXT"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    INVALID_CONTENT = "INVALID_CONTENT"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"

    # Authentication (401)
    UNAUTHORIZED = "UNAUTHORIZED"

    # Admission control (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # External provider errors (502/503)
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    TRANSLATION_UNAVAILABLE = "TRANSLATION_UNAVAILABLE"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"

    # General Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base exception for all domain-related errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    details
        Optional additional context (logged but not exposed to users)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"details={self.details!r})"
        )


class ValidationError(DomainException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class Unauthorized(DomainException):
    """Raised when the shared admin secret is missing or wrong."""

    def __init__(
        self,
        message: str = "Unauthorized",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.UNAUTHORIZED, details)


class RateLimitExceeded(DomainException):
    """Raised when an identifier has used up its request window.

    Attributes
    ----------
    limit
        Configured maximum requests per window
    remaining
        Requests left in the current window (always 0 here)
    reset_time
        Epoch seconds at which the window resets
    retry_after_seconds
        Whole seconds the caller should wait, always positive
    """

    def __init__(
        self,
        limit: int,
        reset_time: float,
        retry_after_seconds: int,
        remaining: int = 0,
        message: str = "Rate limit exceeded. Please try again later.",
    ) -> None:
        super().__init__(
            message,
            ErrorCode.RATE_LIMIT_EXCEEDED,
            {"limit": limit, "retry_after": retry_after_seconds},
        )
        self.limit = limit
        self.remaining = remaining
        self.reset_time = reset_time
        self.retry_after_seconds = retry_after_seconds


class ProviderUnavailable(DomainException):
    """Raised when an external provider cannot serve a request.

    Components with a fallback absorb this and degrade silently.
    """

    def __init__(
        self,
        provider: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"{provider} is unavailable",
            ErrorCode.PROVIDER_UNAVAILABLE,
            {"provider": provider, **(details or {})},
        )
        self.provider = provider


class UpstreamTimeout(DomainException):
    """Raised when a remote call exceeds its time budget."""

    def __init__(
        self,
        provider: str,
        timeout: float,
        message: str = "Upstream service timed out. Please try again later.",
    ) -> None:
        super().__init__(
            message,
            ErrorCode.UPSTREAM_TIMEOUT,
            {"provider": provider, "timeout": timeout},
        )
        self.provider = provider
        self.timeout = timeout


class ConfigurationMissing(DomainException):
    """Raised when a provider has no usable configuration and no fallback exists."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_MISSING, details)


class TranslationUnavailable(DomainException):
    """Raised when the remote translation call fails.

    Distinct from a generic failure so callers can retry or show a
    "temporarily unavailable" message.
    """

    def __init__(
        self,
        message: str = "Translation service temporarily unavailable",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TRANSLATION_UNAVAILABLE, details)
