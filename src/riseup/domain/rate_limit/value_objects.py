"""Value objects for fixed-window rate limiting."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Ceiling and window for one rate-limited surface."""

    max_requests: int
    window_ms: int
    key_prefix: str = "rl"

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            msg = "max_requests must be at least 1"
            raise ValueError(msg)
        if self.window_ms < 1:
            msg = "window_ms must be at least 1"
            raise ValueError(msg)

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000

    def storage_key(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one admission check."""

    allowed: bool
    remaining: int
    reset_time: float  # epoch seconds
    retry_after_seconds: int = 0

    @classmethod
    def admit(cls, remaining: int, reset_time: float) -> "RateLimitResult":
        return cls(allowed=True, remaining=max(0, remaining), reset_time=reset_time)

    @classmethod
    def reject(cls, reset_time: float, now: float) -> "RateLimitResult":
        # Always at least one second so clients never retry immediately
        retry_after = max(1, math.ceil(reset_time - now))
        return cls(
            allowed=False,
            remaining=0,
            reset_time=reset_time,
            retry_after_seconds=retry_after,
        )


@dataclass
class RateLimitRecord:
    """Counter for one identifier within its active window.

    Created on the first request, mutated on every later request in the
    same window, and logically discarded once ``reset_time`` has passed.
    """

    identifier: str
    window_start: float
    count: int
    reset_time: float

    @classmethod
    def start(cls, identifier: str, now: float, window_seconds: float) -> "RateLimitRecord":
        return cls(
            identifier=identifier,
            window_start=now,
            count=1,
            reset_time=now + window_seconds,
        )

    def is_expired(self, now: float) -> bool:
        return now > self.reset_time
