"""Shared domain components.

This module exports shared exceptions and time helpers used across
domain boundaries.
"""

from riseup.domain.shared.exceptions import (
    ConfigurationMissing,
    DomainException,
    ErrorCode,
    ProviderUnavailable,
    RateLimitExceeded,
    TranslationUnavailable,
    Unauthorized,
    UpstreamTimeout,
    ValidationError,
)
from riseup.domain.shared.time import (
    ensure_tz_aware,
    from_epoch_ms,
    to_epoch_ms,
    utc_now,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "Unauthorized",
    "RateLimitExceeded",
    "ProviderUnavailable",
    "UpstreamTimeout",
    "ConfigurationMissing",
    "TranslationUnavailable",
    # Utilities
    "ensure_tz_aware",
    "from_epoch_ms",
    "to_epoch_ms",
    "utc_now",
]
