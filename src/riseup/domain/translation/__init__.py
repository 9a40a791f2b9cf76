"""Translation domain."""

from riseup.domain.translation.text import (
    MAX_TEXT_LENGTH,
    contains_abuse_pattern,
    persian_script_ratio,
    sanitize_text,
)
from riseup.domain.translation.value_objects import (
    TranslationRequest,
    TranslationResult,
    TranslationTier,
)

__all__ = [
    "MAX_TEXT_LENGTH",
    "TranslationRequest",
    "TranslationResult",
    "TranslationTier",
    "contains_abuse_pattern",
    "persian_script_ratio",
    "sanitize_text",
]
