"""Tests for the remote translation providers, the chain and script detection."""

import json

import httpx
import pytest

from riseup.domain.shared.exceptions import ProviderUnavailable, UpstreamTimeout
from riseup.infrastructure.translation import (
    GoogleTranslateProvider,
    LibreTranslateProvider,
    ProviderChain,
    ScriptLanguageDetector,
)
from tests.shared.fakes import FakeTranslationProvider


def _recording_transport(seen: list, reply) -> httpx.MockTransport:
    def handler(request):
        seen.append(request)
        return reply(request)

    return httpx.MockTransport(handler)


class TestGoogleTranslateProvider:
    """Tests for the Google Cloud Translation adapter."""

    @pytest.mark.asyncio
    async def test_translate(self):
        seen: list[httpx.Request] = []
        provider = GoogleTranslateProvider(
            "secret",
            transport=_recording_transport(
                seen,
                lambda r: httpx.Response(
                    200, json={"data": {"translations": [{"translatedText": "سلام"}]}}
                ),
            ),
        )

        result = await provider.translate("Hello", "en", "fa")
        await provider.close()

        assert result == "سلام"
        request = seen[0]
        assert request.url.path == "/language/translate/v2"
        assert request.url.params["key"] == "secret"
        assert json.loads(request.content) == {
            "q": "Hello",
            "source": "en",
            "target": "fa",
            "format": "text",
        }

    @pytest.mark.asyncio
    async def test_detect(self):
        seen: list[httpx.Request] = []
        provider = GoogleTranslateProvider(
            "secret",
            transport=_recording_transport(
                seen,
                lambda r: httpx.Response(
                    200,
                    json={"data": {"detections": [[{"language": "fa", "confidence": 0.98}]]}},
                ),
            ),
        )

        assert await provider.detect("سلام") == "fa"
        assert seen[0].url.path == "/language/translate/v2/detect"

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        provider = GoogleTranslateProvider(
            "secret",
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"data": {}})),
        )

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.translate("Hello", "en", "fa")

        assert exc_info.value.details["reason"] == "missing translatedText"

    @pytest.mark.asyncio
    async def test_quota_error(self):
        provider = GoogleTranslateProvider(
            "secret",
            transport=httpx.MockTransport(lambda r: httpx.Response(403, text="quota")),
        )

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.translate("Hello", "en", "fa")

        assert exc_info.value.details["status"] == 403

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        provider = GoogleTranslateProvider("secret", transport=httpx.MockTransport(handler))

        with pytest.raises(UpstreamTimeout):
            await provider.translate("Hello", "en", "fa")


class TestLibreTranslateProvider:
    """Tests for the LibreTranslate adapter."""

    @pytest.mark.asyncio
    async def test_translate_includes_api_key(self):
        seen: list[httpx.Request] = []
        provider = LibreTranslateProvider(
            "https://libre.example/",
            api_key="k",
            transport=_recording_transport(
                seen, lambda r: httpx.Response(200, json={"translatedText": "Hello"})
            ),
        )

        assert await provider.translate("سلام", "fa", "en") == "Hello"
        assert str(seen[0].url) == "https://libre.example/translate"
        assert json.loads(seen[0].content)["api_key"] == "k"

    @pytest.mark.asyncio
    async def test_translate_without_api_key(self):
        seen: list[httpx.Request] = []
        provider = LibreTranslateProvider(
            "https://libre.example",
            transport=_recording_transport(
                seen, lambda r: httpx.Response(200, json={"translatedText": "Hello"})
            ),
        )

        await provider.translate("سلام", "fa", "en")

        assert "api_key" not in json.loads(seen[0].content)

    @pytest.mark.asyncio
    async def test_detect_takes_best_candidate(self):
        provider = LibreTranslateProvider(
            "https://libre.example",
            transport=httpx.MockTransport(
                lambda r: httpx.Response(
                    200,
                    json=[{"language": "fa", "confidence": 90}, {"language": "ar", "confidence": 40}],
                )
            ),
        )

        assert await provider.detect("سلام") == "fa"

    @pytest.mark.asyncio
    async def test_detect_empty_response(self):
        provider = LibreTranslateProvider(
            "https://libre.example",
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])),
        )

        with pytest.raises(ProviderUnavailable):
            await provider.detect("سلام")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = LibreTranslateProvider("https://libre.example", transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.translate("x", "en", "fa")

        assert exc_info.value.details["reason"] == "connect"


class TestProviderChain:
    """Tests for ordered provider failover."""

    def test_requires_providers(self):
        with pytest.raises(ValueError):
            ProviderChain([])

    @pytest.mark.asyncio
    async def test_moves_to_next_provider_on_failure(self):
        broken = FakeTranslationProvider(fail=True)
        working = FakeTranslationProvider(detected="fa")
        chain = ProviderChain([broken, working])

        assert await chain.translate("Hello", "en", "fa") == "fa:Hello"
        assert await chain.detect("سلام") == "fa"
        assert len(broken.translate_calls) == 1
        assert chain.name == "fake+fake"

    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        first = FakeTranslationProvider()
        second = FakeTranslationProvider()
        chain = ProviderChain([first, second])

        await chain.translate("Hello", "en", "fa")

        assert len(first.translate_calls) == 1
        assert second.translate_calls == []

    @pytest.mark.asyncio
    async def test_all_failing_raises(self):
        chain = ProviderChain([FakeTranslationProvider(fail=True)])

        with pytest.raises(ProviderUnavailable) as exc_info:
            await chain.translate("Hello", "en", "fa")

        assert exc_info.value.details["failures"] == {"fake": "PROVIDER_UNAVAILABLE"}


class TestScriptLanguageDetector:
    """Tests for script-based detection."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("سلام دنیا", "fa"),
            ("Hello world", "en"),
            ("Strike in تهران", "fa"),
            ("A long English sentence with one word: تهران", "en"),
            ("12345 !!!", "en"),
        ],
    )
    async def test_detect(self, text, expected):
        assert await ScriptLanguageDetector().detect(text) == expected
