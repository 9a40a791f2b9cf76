"""Translation ports."""

from abc import ABC, abstractmethod


class LanguageDetector(ABC):
    """Port interface for language detection."""

    @abstractmethod
    async def detect(self, text: str) -> str:
        """Return the ISO 639-1 code of the language of ``text``."""


class TranslationProvider(LanguageDetector):
    """Port interface for a remote translation engine.

    Implementations bound every call by a timeout and raise
    ``ProviderUnavailable`` or ``UpstreamTimeout`` when the engine cannot
    serve the request.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name used in logs and error details."""

    @abstractmethod
    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate ``text`` from ``source`` to ``target``."""

    async def close(self) -> None:  # noqa: B027
        """Release HTTP resources (optional)."""
