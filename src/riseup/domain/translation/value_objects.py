"""Value objects for the translation pipeline."""

from dataclasses import dataclass
from typing import Literal

TranslationTier = Literal["cache", "remote", "skipped"]


@dataclass(frozen=True)
class TranslationRequest:
    """Inbound translation request.

    ``source_lang`` is used as given unless it is missing or
    ``auto_detect`` is set, in which case the language is detected.
    """

    text: str
    target_lang: str
    source_lang: str | None = None
    auto_detect: bool = False

    @property
    def needs_detection(self) -> bool:
        return self.auto_detect or not self.source_lang


@dataclass(frozen=True)
class TranslationResult:
    """Translated text and the tier that produced it."""

    translated_text: str
    detected_language: str
    source_lang: str
    target_lang: str
    tier: TranslationTier
