"""Translation pipeline: validate, admit, sanitize, detect, cache, translate."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Set

from riseup.application.ports.translation import LanguageDetector, TranslationProvider
from riseup.application.services.cache_store import (
    CacheStore,
    CacheTTL,
    translation_cache_key,
)
from riseup.application.services.rate_limiter import RateLimiter
from riseup.domain.rate_limit import RateLimitResult
from riseup.domain.shared.exceptions import (
    ConfigurationMissing,
    ErrorCode,
    ProviderUnavailable,
    TranslationUnavailable,
    UpstreamTimeout,
    ValidationError,
)
from riseup.domain.translation import (
    MAX_TEXT_LENGTH,
    TranslationRequest,
    TranslationResult,
    contains_abuse_pattern,
    sanitize_text,
)

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """Serve translation requests from the cheapest tier that can answer.

    Steps run in a fixed order and each one can end the request:

    1. validate the raw request (no quota consumed yet)
    2. consume one unit of the caller's rate limit
    3. sanitize the text
    4. resolve the source language, detecting it when asked to
    5. skip when source and target match (``tier="skipped"``)
    6. look up the cache (``tier="cache"``)
    7. call the remote provider and write the result through to the
       cache (``tier="remote"``)

    The remote call runs in its own task. When the caller goes away the
    task still finishes and fills the cache; when it fails the caller sees
    ``TranslationUnavailable``.
    """

    def __init__(
        self,
        provider: TranslationProvider | None,
        cache: CacheStore,
        detector: LanguageDetector,
        rate_limiter: RateLimiter | None = None,
        fallback_detector: LanguageDetector | None = None,
        supported_languages: Sequence[str] = ("en", "fa"),
        max_text_length: int = MAX_TEXT_LENGTH,
        timeout: float = 10.0,
        cache_ttl: int = CacheTTL.TRANSLATION,
    ):
        self._provider = provider
        self._cache = cache
        self._detector = detector
        self._rate_limiter = rate_limiter
        self._fallback_detector = fallback_detector
        self._supported = tuple(lang.lower() for lang in supported_languages)
        self._max_text_length = max_text_length
        self._timeout = timeout
        self._cache_ttl = cache_ttl
        # Keep references so pending remote calls are not garbage collected
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def supported_languages(self) -> tuple[str, ...]:
        return self._supported

    @property
    def max_text_length(self) -> int:
        return self._max_text_length

    @property
    def rate_limiter(self) -> RateLimiter | None:
        return self._rate_limiter

    async def translate(
        self,
        request: TranslationRequest,
        identifier: str | None = None,
    ) -> TranslationResult:
        result, _ = await self.translate_with_admission(request, identifier)
        return result

    async def translate_with_admission(
        self,
        request: TranslationRequest,
        identifier: str | None = None,
    ) -> tuple[TranslationResult, RateLimitResult | None]:
        """Translate and also return the rate-limit decision that admitted it.

        Without an identifier (internal callers) no quota is consumed.
        """
        self.validate(request)

        admission: RateLimitResult | None = None
        if self._rate_limiter is not None and identifier is not None:
            admission = await self._rate_limiter.enforce(identifier)
        result = await self._run(request)
        return result, admission

    async def _run(self, request: TranslationRequest) -> TranslationResult:
        text = sanitize_text(request.text)
        if not text:
            raise ValidationError("Text is empty after sanitization", ErrorCode.EMPTY_TEXT)

        target = request.target_lang.lower()
        source = await self._resolve_source(request, text)

        if source == target:
            logger.debug("Source equals target (%s), skipping translation", source)
            return TranslationResult(
                translated_text=text,
                detected_language=source,
                source_lang=source,
                target_lang=target,
                tier="skipped",
            )

        key = translation_cache_key(source, target, text)
        cached = await self._cache.get(key)
        if isinstance(cached, str):
            logger.debug("Translation cache hit %s -> %s", source, target)
            return TranslationResult(
                translated_text=cached,
                detected_language=source,
                source_lang=source,
                target_lang=target,
                tier="cache",
            )

        translated = await self._translate_remote(text, source, target, key)
        return TranslationResult(
            translated_text=translated,
            detected_language=source,
            source_lang=source,
            target_lang=target,
            tier="remote",
        )

    def validate(self, request: TranslationRequest) -> None:
        """Reject malformed requests before any quota is consumed."""
        if not request.text or not request.text.strip():
            raise ValidationError("Text is required", ErrorCode.EMPTY_TEXT)

        if len(request.text) > self._max_text_length:
            raise ValidationError(
                f"Text exceeds maximum length of {self._max_text_length} characters",
                ErrorCode.TEXT_TOO_LONG,
                {"length": len(request.text), "max_length": self._max_text_length},
            )

        languages = [request.target_lang]
        if request.source_lang and not request.auto_detect:
            languages.append(request.source_lang)
        for lang in languages:
            if lang.lower() not in self._supported:
                raise ValidationError(
                    f"Unsupported language: {lang}",
                    ErrorCode.UNSUPPORTED_LANGUAGE,
                    {"language": lang, "supported": list(self._supported)},
                )

        if contains_abuse_pattern(request.text):
            raise ValidationError(
                "Text contains invalid content",
                ErrorCode.INVALID_CONTENT,
            )

    async def _resolve_source(self, request: TranslationRequest, text: str) -> str:
        if not request.needs_detection:
            return request.source_lang.lower()  # type: ignore[union-attr]

        try:
            detected = await self._detector.detect(text)
        except (ProviderUnavailable, UpstreamTimeout) as e:
            if self._fallback_detector is None:
                raise TranslationUnavailable(details={"step": "detect"}) from e
            logger.warning("Language detection failed, using script detection: %s", e)
            detected = await self._fallback_detector.detect(text)

        logger.debug("Detected language %s", detected)
        return detected.lower()

    async def _translate_remote(self, text: str, source: str, target: str, key: str) -> str:
        if self._provider is None:
            raise ConfigurationMissing("No translation provider configured")

        task = asyncio.create_task(self._translate_and_store(text, source, target, key))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_task_done)

        try:
            return await asyncio.wait_for(asyncio.shield(task), self._timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Translation %s -> %s timed out after %.1fs", source, target, self._timeout)
            raise TranslationUnavailable(
                details={"source": source, "target": target, "timeout": self._timeout}
            ) from e
        except (ProviderUnavailable, UpstreamTimeout) as e:
            logger.warning("Translation %s -> %s failed: %s", source, target, e)
            raise TranslationUnavailable(
                details={"source": source, "target": target, **e.details}
            ) from e

    async def _translate_and_store(self, text: str, source: str, target: str, key: str) -> str:
        translated = await self._provider.translate(text, source, target)  # type: ignore[union-attr]
        await self._cache.set(key, translated, self._cache_ttl)
        return translated

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug("Background translation ended with %s", type(error).__name__)

    async def drain(self) -> None:
        """Wait for pending background translations (used on shutdown)."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
