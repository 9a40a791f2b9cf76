"""Pytest fixtures for API integration tests.

Every singleton the routes depend on is replaced through
``app.dependency_overrides`` with in-memory adapters and fakes, so no
network access or shared store is needed.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from riseup.application.services import (
    CacheStore,
    RateLimiter,
    SearchFacade,
    TranslationPipeline,
)
from riseup.domain.rate_limit import RateLimitConfig
from riseup.infrastructure.search import FallbackSearchIndex
from riseup.infrastructure.store import InMemorySharedStore
from riseup.infrastructure.translation import ScriptLanguageDetector
from riseup.presentation.api.app import create_app
from riseup.presentation.api.dependencies import (
    get_cache_store,
    get_search_facade,
    get_search_rate_limiter,
    get_shared_store,
    get_translate_rate_limiter,
    get_translation_pipeline,
)
from riseup_config.settings import Settings
from tests.shared.fakes import FakeCorpusReader, FakeTranslationProvider

TRANSLATE_LIMIT = 100
TRANSLATE_WINDOW_MS = 60 * 60 * 1000
SEARCH_LIMIT = 120
SEARCH_WINDOW_MS = 60 * 1000


@pytest.fixture
def api_settings() -> Settings:
    """Test API settings with debug enabled."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8000,
        api_debug=True,
        api_cors_origins="http://localhost:3000",
    )


@pytest.fixture
def shared_store() -> InMemorySharedStore:
    return InMemorySharedStore()


@pytest.fixture
def cache(shared_store) -> CacheStore:
    return CacheStore(shared_store)


@pytest.fixture
def translate_limiter(shared_store) -> RateLimiter:
    return RateLimiter(
        RateLimitConfig(
            max_requests=TRANSLATE_LIMIT,
            window_ms=TRANSLATE_WINDOW_MS,
            key_prefix="test:translate",
        ),
        store=shared_store,
    )


@pytest.fixture
def search_limiter(shared_store) -> RateLimiter:
    return RateLimiter(
        RateLimitConfig(
            max_requests=SEARCH_LIMIT,
            window_ms=SEARCH_WINDOW_MS,
            key_prefix="test:search",
        ),
        store=shared_store,
    )


@pytest.fixture
def corpus() -> FakeCorpusReader:
    return FakeCorpusReader()


@pytest.fixture
def search_facade(cache, corpus) -> SearchFacade:
    """Facade without a hosted index, so every query uses the fallback index."""
    return SearchFacade(
        hosted=None,
        corpus=corpus,
        cache=cache,
        fallback_factory=FallbackSearchIndex,
    )


@pytest.fixture
def translation_provider() -> FakeTranslationProvider:
    return FakeTranslationProvider()


@pytest.fixture
def translation_pipeline(translation_provider, cache, translate_limiter) -> TranslationPipeline:
    return TranslationPipeline(
        provider=translation_provider,
        cache=cache,
        detector=ScriptLanguageDetector(),
        rate_limiter=translate_limiter,
        fallback_detector=ScriptLanguageDetector(),
    )


@pytest.fixture
def app(
    api_settings,
    shared_store,
    cache,
    translate_limiter,
    search_limiter,
    search_facade,
    translation_pipeline,
) -> FastAPI:
    app = create_app(settings=api_settings)
    app.dependency_overrides[get_shared_store] = lambda: shared_store
    app.dependency_overrides[get_cache_store] = lambda: cache
    app.dependency_overrides[get_translate_rate_limiter] = lambda: translate_limiter
    app.dependency_overrides[get_search_rate_limiter] = lambda: search_limiter
    app.dependency_overrides[get_search_facade] = lambda: search_facade
    app.dependency_overrides[get_translation_pipeline] = lambda: translation_pipeline
    return app


@pytest.fixture
def test_client(app) -> TestClient:
    return TestClient(app)
