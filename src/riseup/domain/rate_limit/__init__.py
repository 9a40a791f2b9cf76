"""Rate limiting domain."""

from riseup.domain.rate_limit.value_objects import (
    RateLimitConfig,
    RateLimitRecord,
    RateLimitResult,
)

__all__ = [
    "RateLimitConfig",
    "RateLimitRecord",
    "RateLimitResult",
]
