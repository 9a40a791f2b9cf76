"""Tests for the corpus readers and article parsing."""

import json

import httpx
import pytest

from riseup.domain.shared.exceptions import ProviderUnavailable, UpstreamTimeout
from riseup.infrastructure.corpus import (
    HttpCorpusReader,
    JsonFileCorpusReader,
    parse_articles,
)

ARTICLES = [
    {
        "id": "old",
        "title": "Older article",
        "content": "Body text",
        "source": "rss",
        "publishedAt": "2025-01-14T08:00:00Z",
    },
    {
        "id": "new",
        "title": "Newer article",
        "summary": "Summary text",
        "source": "telegram",
        "topics": ["strike"],
        "channelName": "iranworkers",
        "publishedAt": 1_736_942_400_000,
    },
    {"id": "broken", "title": "No date", "source": "rss"},
    "not an article",
]


class TestParseArticles:
    """Tests for payload parsing."""

    def test_skips_malformed_and_sorts_newest_first(self):
        documents = parse_articles(ARTICLES, limit=10)

        assert [d.id for d in documents] == ["new", "old"]
        assert documents[0].body == "Summary text"
        assert documents[1].body == "Body text"

    def test_accepts_wrapped_payload(self):
        documents = parse_articles({"articles": ARTICLES}, limit=10)

        assert len(documents) == 2

    def test_caps_at_limit(self):
        assert [d.id for d in parse_articles(ARTICLES, limit=1)] == ["new"]

    def test_skips_out_of_range_timestamps(self):
        payload = [
            {"id": "ok", "source": "rss", "publishedAt": 1_700_000_000_000},
            {"id": "far", "source": "rss", "publishedAt": 1e300},
            {"id": "huge", "source": "rss", "publishedAt": "9" * 40},
        ]

        assert [d.id for d in parse_articles(payload, limit=10)] == ["ok"]

    def test_unexpected_payload_is_empty(self):
        assert parse_articles("nope", limit=10) == []
        assert parse_articles({"data": []}, limit=10) == []


class TestHttpCorpusReader:
    """Tests for the HTTP corpus reader."""

    @pytest.mark.asyncio
    async def test_fetch_sends_limit(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"articles": ARTICLES})

        reader = HttpCorpusReader(
            "https://corpus.example/api/articles/",
            transport=httpx.MockTransport(handler),
        )

        documents = await reader.fetch_recent_documents(500)
        await reader.close()

        assert [d.id for d in documents] == ["new", "old"]
        assert seen[0].url.path == "/api/articles"
        assert seen[0].url.params["limit"] == "500"

    @pytest.mark.asyncio
    async def test_error_status_is_provider_unavailable(self):
        reader = HttpCorpusReader(
            "https://corpus.example/articles",
            transport=httpx.MockTransport(lambda r: httpx.Response(502)),
        )

        with pytest.raises(ProviderUnavailable) as exc_info:
            await reader.fetch_recent_documents(10)

        assert exc_info.value.details["status"] == 502

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        reader = HttpCorpusReader(
            "https://corpus.example/articles",
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(UpstreamTimeout):
            await reader.fetch_recent_documents(10)


class TestJsonFileCorpusReader:
    """Tests for the JSON file corpus reader."""

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text(json.dumps(ARTICLES), encoding="utf-8")

        documents = await JsonFileCorpusReader(path).fetch_recent_documents(10)

        assert [d.id for d in documents] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_missing_file_is_provider_unavailable(self, tmp_path):
        reader = JsonFileCorpusReader(tmp_path / "missing.json")

        with pytest.raises(ProviderUnavailable):
            await reader.fetch_recent_documents(10)

    @pytest.mark.asyncio
    async def test_invalid_json_is_provider_unavailable(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ProviderUnavailable):
            await JsonFileCorpusReader(path).fetch_recent_documents(10)
