"""Tests for TranslationPipeline."""

import asyncio

import pytest

from riseup.application.services import (
    CacheStore,
    RateLimiter,
    TranslationPipeline,
    translation_cache_key,
)
from riseup.domain.rate_limit import RateLimitConfig
from riseup.domain.shared.exceptions import (
    ConfigurationMissing,
    ErrorCode,
    RateLimitExceeded,
    TranslationUnavailable,
    ValidationError,
)
from riseup.domain.translation import TranslationRequest
from riseup.infrastructure.store import InMemorySharedStore
from riseup.infrastructure.translation import ScriptLanguageDetector
from tests.shared.fakes import FakeClock, FakeTranslationProvider


class TestTranslationPipeline:
    """Tests for the tiers of the translation pipeline."""

    def setup_method(self):
        self.clock = FakeClock()
        self.provider = FakeTranslationProvider()
        self.cache = CacheStore(InMemorySharedStore())
        self.limiter = RateLimiter(
            RateLimitConfig(max_requests=5, window_ms=3_600_000),
            store=None,
            clock=self.clock,
        )
        self.pipeline = TranslationPipeline(
            provider=self.provider,
            cache=self.cache,
            detector=ScriptLanguageDetector(),
            rate_limiter=self.limiter,
        )

    @pytest.mark.asyncio
    async def test_same_language_is_skipped(self):
        result = await self.pipeline.translate(
            TranslationRequest(text="Hello", source_lang="en", target_lang="en"),
            identifier="client",
        )

        assert result.translated_text == "Hello"
        assert result.tier == "skipped"
        assert self.provider.translate_calls == []

    @pytest.mark.asyncio
    async def test_second_identical_request_hits_cache(self):
        request = TranslationRequest(text="Hello", source_lang="en", target_lang="fa")

        first = await self.pipeline.translate(request, identifier="client")
        second = await self.pipeline.translate(request, identifier="client")

        assert first.tier == "remote"
        assert second.tier == "cache"
        assert second.translated_text == first.translated_text == "fa:Hello"
        assert len(self.provider.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_persian_text_is_detected_and_translated(self):
        result = await self.pipeline.translate(
            TranslationRequest(text="سلام دنیا", target_lang="en", auto_detect=True),
            identifier="client",
        )

        assert result.detected_language == "fa"
        assert result.tier == "remote"
        assert self.provider.translate_calls == [("سلام دنیا", "fa", "en")]

    @pytest.mark.asyncio
    async def test_auto_detect_overrides_given_source(self):
        result = await self.pipeline.translate(
            TranslationRequest(text="Hello", source_lang="fa", target_lang="en", auto_detect=True),
        )

        assert result.detected_language == "en"
        assert result.tier == "skipped"

    @pytest.mark.asyncio
    async def test_text_is_sanitized_before_translation(self):
        result = await self.pipeline.translate(
            TranslationRequest(text="\x00Hello\tworld\r", source_lang="en", target_lang="en"),
        )

        assert result.translated_text == "Hello world"

    @pytest.mark.asyncio
    async def test_remote_result_is_written_to_cache(self):
        await self.pipeline.translate(
            TranslationRequest(text="Hello", source_lang="en", target_lang="fa"),
        )

        assert await self.cache.get(translation_cache_key("en", "fa", "Hello")) == "fa:Hello"


class TestTranslationPipelineValidation:
    """Validation runs before any quota is consumed."""

    def setup_method(self):
        self.provider = FakeTranslationProvider()
        self.limiter = RateLimiter(RateLimitConfig(max_requests=1, window_ms=60_000))
        self.pipeline = TranslationPipeline(
            provider=self.provider,
            cache=CacheStore(None),
            detector=ScriptLanguageDetector(),
            rate_limiter=self.limiter,
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_kwargs,code",
        [
            ({"text": "", "target_lang": "en"}, ErrorCode.EMPTY_TEXT),
            ({"text": "   ", "target_lang": "en"}, ErrorCode.EMPTY_TEXT),
            ({"text": "x" * 10_001, "target_lang": "en"}, ErrorCode.TEXT_TOO_LONG),
            ({"text": "Hello", "target_lang": "de"}, ErrorCode.UNSUPPORTED_LANGUAGE),
            ({"text": "Hello", "target_lang": "en", "source_lang": "xx"}, ErrorCode.UNSUPPORTED_LANGUAGE),
            ({"text": "<script>x</script>", "target_lang": "fa"}, ErrorCode.INVALID_CONTENT),
        ],
    )
    async def test_rejects_without_consuming_quota(self, request_kwargs, code):
        with pytest.raises(ValidationError) as exc_info:
            await self.pipeline.translate(TranslationRequest(**request_kwargs), identifier="client")

        assert exc_info.value.code == code
        assert self.limiter.fallback.get_record("client") is None

    @pytest.mark.asyncio
    async def test_exactly_max_length_is_accepted(self):
        result = await self.pipeline.translate(
            TranslationRequest(text="ab " * 3333 + "a", source_lang="en", target_lang="en"),
            identifier="client",
        )

        assert result.tier == "skipped"

    @pytest.mark.asyncio
    async def test_text_empty_after_sanitization_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            await self.pipeline.translate(
                TranslationRequest(text="\x01\x02", target_lang="en"),
                identifier="client",
            )

        assert exc_info.value.code == ErrorCode.EMPTY_TEXT

    @pytest.mark.asyncio
    async def test_rate_limit_rejection_has_no_side_effects(self):
        request = TranslationRequest(text="Hello", source_lang="en", target_lang="fa")
        await self.pipeline.translate(request, identifier="client")

        with pytest.raises(RateLimitExceeded) as exc_info:
            await self.pipeline.translate(
                TranslationRequest(text="Other", source_lang="en", target_lang="fa"),
                identifier="client",
            )

        assert exc_info.value.retry_after_seconds > 0
        assert len(self.provider.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_internal_calls_consume_no_quota(self):
        request = TranslationRequest(text="Hello", source_lang="en", target_lang="fa")

        for _ in range(3):
            await self.pipeline.translate(request)

        assert self.limiter.fallback.get_record("client") is None


class TestTranslationPipelineFailures:
    """Tests for provider failures."""

    @pytest.mark.asyncio
    async def test_provider_failure_is_translation_unavailable(self):
        cache = CacheStore(InMemorySharedStore())
        pipeline = TranslationPipeline(
            provider=FakeTranslationProvider(fail=True),
            cache=cache,
            detector=ScriptLanguageDetector(),
        )

        with pytest.raises(TranslationUnavailable) as exc_info:
            await pipeline.translate(TranslationRequest(text="Hello", source_lang="en", target_lang="fa"))

        assert exc_info.value.code == ErrorCode.TRANSLATION_UNAVAILABLE
        assert await cache.get(translation_cache_key("en", "fa", "Hello")) is None

    @pytest.mark.asyncio
    async def test_missing_provider_only_matters_for_remote_tier(self):
        pipeline = TranslationPipeline(
            provider=None,
            cache=CacheStore(None),
            detector=ScriptLanguageDetector(),
        )

        skipped = await pipeline.translate(TranslationRequest(text="Hi", source_lang="en", target_lang="en"))
        assert skipped.tier == "skipped"

        with pytest.raises(ConfigurationMissing):
            await pipeline.translate(TranslationRequest(text="Hi", source_lang="en", target_lang="fa"))

    @pytest.mark.asyncio
    async def test_timeout_reports_unavailable_but_fills_cache(self):
        cache = CacheStore(InMemorySharedStore())
        provider = FakeTranslationProvider(delay=0.1)
        pipeline = TranslationPipeline(
            provider=provider,
            cache=cache,
            detector=ScriptLanguageDetector(),
            timeout=0.01,
        )
        request = TranslationRequest(text="Hello", source_lang="en", target_lang="fa")

        with pytest.raises(TranslationUnavailable):
            await pipeline.translate(request)

        await pipeline.drain()
        result = await pipeline.translate(request)

        assert result.tier == "cache"
        assert len(provider.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_cancelled_request_still_fills_cache(self):
        cache = CacheStore(InMemorySharedStore())
        pipeline = TranslationPipeline(
            provider=FakeTranslationProvider(delay=0.05),
            cache=cache,
            detector=ScriptLanguageDetector(),
        )
        request = TranslationRequest(text="Hello", source_lang="en", target_lang="fa")

        task = asyncio.create_task(pipeline.translate(request))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await pipeline.drain()

        assert await cache.get(translation_cache_key("en", "fa", "Hello")) == "fa:Hello"

    @pytest.mark.asyncio
    async def test_remote_detection_failure_falls_back_to_script(self):
        pipeline = TranslationPipeline(
            provider=FakeTranslationProvider(),
            cache=CacheStore(None),
            detector=FakeTranslationProvider(fail=True),
            fallback_detector=ScriptLanguageDetector(),
        )

        result = await pipeline.translate(TranslationRequest(text="سلام", target_lang="en"))

        assert result.detected_language == "fa"
        assert result.tier == "remote"

    @pytest.mark.asyncio
    async def test_remote_detection_failure_without_fallback(self):
        pipeline = TranslationPipeline(
            provider=FakeTranslationProvider(),
            cache=CacheStore(None),
            detector=FakeTranslationProvider(fail=True),
        )

        with pytest.raises(TranslationUnavailable):
            await pipeline.translate(TranslationRequest(text="سلام", target_lang="en"))
