"""FastAPI dependency injection for the RiseUp API.

Provides dependencies for:
- The shared store and the cache on top of it
- Rate limiters (one per rate-limited surface)
- The search facade and its backends
- The translation pipeline and its providers
- Client identification and the admin secret check

Every singleton is built lazily from settings and cached; tests replace
them through ``app.dependency_overrides``.
"""

import logging
import secrets
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from riseup.application.ports import (
    CorpusReader,
    HostedSearchPort,
    LanguageDetector,
    SharedStore,
    TranslationProvider,
)
from riseup.application.services import (
    CacheStore,
    RateLimiter,
    SearchFacade,
    TranslationPipeline,
    client_identifier,
    rate_limit_headers,
)
from riseup.domain.rate_limit import RateLimitConfig, RateLimitResult
from riseup.domain.shared.exceptions import Unauthorized
from riseup.infrastructure.corpus import HttpCorpusReader, JsonFileCorpusReader
from riseup.infrastructure.search import AlgoliaSearchClient, FallbackSearchIndex
from riseup.infrastructure.store import InMemorySharedStore, RedisSharedStore
from riseup.infrastructure.translation import (
    GoogleTranslateProvider,
    LibreTranslateProvider,
    ProviderChain,
    ScriptLanguageDetector,
)
from riseup_config.settings import get_settings

logger = logging.getLogger(__name__)

# Security scheme for the shared admin secret
security = HTTPBearer(auto_error=False)

MEMORY_STORE_URL = "memory://"

_PROXY_IP_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")


# =============================================================================
# Shared store and cache
# =============================================================================


@lru_cache()
def get_shared_store() -> SharedStore | None:
    """Build the shared store from ``REDIS_URL``.

    Returns None when no URL is configured, in which case the cache stays
    cold and rate limiting is per process.
    """
    settings = get_settings()
    if settings.redis_url is None:
        logger.info("No shared store configured, using in-process rate limits")
        return None

    url = settings.redis_url.get_secret_value()
    if url.startswith(MEMORY_STORE_URL):
        logger.info("Using in-memory shared store")
        return InMemorySharedStore()
    return RedisSharedStore(url, timeout=settings.redis_timeout)


@lru_cache()
def get_cache_store() -> CacheStore:
    return CacheStore(get_shared_store())


# =============================================================================
# Rate limiting
# =============================================================================


@lru_cache()
def get_translate_rate_limiter() -> RateLimiter:
    settings = get_settings()
    config = RateLimitConfig(
        max_requests=settings.rate_limit_translate_max_requests,
        window_ms=settings.rate_limit_translate_window_ms,
        key_prefix=f"{settings.rate_limit_key_prefix}:translate",
    )
    return RateLimiter(
        config,
        store=get_shared_store(),
        fail_mode=settings.rate_limit_fail_mode,
    )


@lru_cache()
def get_search_rate_limiter() -> RateLimiter:
    settings = get_settings()
    config = RateLimitConfig(
        max_requests=settings.rate_limit_search_max_requests,
        window_ms=settings.rate_limit_search_window_ms,
        key_prefix=f"{settings.rate_limit_key_prefix}:search",
    )
    return RateLimiter(
        config,
        store=get_shared_store(),
        fail_mode=settings.rate_limit_fail_mode,
    )


def get_client_identifier(request: Request) -> str:
    """Identify the caller by address and user agent.

    Forwarded-address headers are only trusted behind a known proxy,
    otherwise any client could pick its own identifier.
    """
    ip: str | None = None
    if get_settings().api_trust_proxy_headers:
        for header in _PROXY_IP_HEADERS:
            if request.headers.get(header):
                ip = request.headers[header]
                break
    if ip is None and request.client is not None:
        ip = request.client.host
    return client_identifier(ip, request.headers.get("user-agent"))


ClientIdentifier = Annotated[str, Depends(get_client_identifier)]


async def enforce_search_rate_limit(
    response: Response,
    identifier: ClientIdentifier,
    limiter: Annotated[RateLimiter, Depends(get_search_rate_limiter)],
) -> RateLimitResult:
    result = await limiter.enforce(identifier)
    response.headers.update(rate_limit_headers(result, limiter.config))
    return result


# =============================================================================
# Search
# =============================================================================


@lru_cache()
def get_hosted_search() -> HostedSearchPort | None:
    settings = get_settings()
    if not settings.search_app_id:
        return None
    return AlgoliaSearchClient(
        app_id=settings.search_app_id,
        search_key=(
            settings.search_api_key.get_secret_value()
            if settings.search_api_key
            else None
        ),
        admin_key=(
            settings.search_admin_key.get_secret_value()
            if settings.search_admin_key
            else None
        ),
        index_name=settings.search_index_name,
        timeout=settings.search_timeout,
    )


@lru_cache()
def get_corpus_reader() -> CorpusReader | None:
    settings = get_settings()
    if settings.corpus_url:
        return HttpCorpusReader(settings.corpus_url, timeout=settings.corpus_timeout)
    if settings.corpus_file is not None:
        return JsonFileCorpusReader(settings.corpus_file)
    return None


@lru_cache()
def get_search_facade() -> SearchFacade:
    settings = get_settings()
    threshold = settings.search_fallback_threshold

    return SearchFacade(
        hosted=get_hosted_search(),
        corpus=get_corpus_reader(),
        cache=get_cache_store(),
        fallback_factory=lambda docs: FallbackSearchIndex(docs, threshold=threshold),
        max_documents=settings.search_fallback_max_documents,
        search_ttl=settings.cache_search_ttl,
        facets_ttl=settings.cache_facets_ttl,
    )


# =============================================================================
# Translation
# =============================================================================


@lru_cache()
def get_translation_provider() -> TranslationProvider | None:
    """Chain every configured provider, Google first."""
    settings = get_settings()
    providers: list[TranslationProvider] = []

    if settings.translation_google_api_key:
        providers.append(
            GoogleTranslateProvider(
                settings.translation_google_api_key.get_secret_value(),
                timeout=settings.translation_timeout,
            )
        )
    if settings.translation_libretranslate_url:
        api_key = settings.translation_libretranslate_api_key
        providers.append(
            LibreTranslateProvider(
                settings.translation_libretranslate_url,
                api_key=api_key.get_secret_value() if api_key else None,
                timeout=settings.translation_timeout,
            )
        )

    if not providers:
        logger.warning("No translation provider configured")
        return None
    if len(providers) == 1:
        return providers[0]
    return ProviderChain(providers)


@lru_cache()
def get_translation_pipeline() -> TranslationPipeline:
    settings = get_settings()
    provider = get_translation_provider()
    script_detector = ScriptLanguageDetector()

    detector: LanguageDetector = script_detector
    if settings.translation_detection == "remote" and provider is not None:
        detector = provider

    return TranslationPipeline(
        provider=provider,
        cache=get_cache_store(),
        detector=detector,
        rate_limiter=get_translate_rate_limiter(),
        fallback_detector=script_detector,
        supported_languages=settings.supported_languages,
        max_text_length=settings.translation_max_text_length,
        timeout=settings.translation_timeout,
        cache_ttl=settings.cache_translation_ttl,
    )


# =============================================================================
# Admin
# =============================================================================


def require_admin_secret(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
) -> None:
    """Check ``Authorization: Bearer <ADMIN_SECRET>``.

    Admin operations are disabled entirely when no secret is configured.
    """
    secret = get_settings().admin_secret
    if secret is None or not secret.get_secret_value() or credentials is None:
        raise Unauthorized()
    if not secrets.compare_digest(
        credentials.credentials.encode("utf-8"),
        secret.get_secret_value().encode("utf-8"),
    ):
        raise Unauthorized()


# Type aliases for cleaner route signatures
CacheDep = Annotated[CacheStore, Depends(get_cache_store)]
SearchFacadeDep = Annotated[SearchFacade, Depends(get_search_facade)]
TranslationPipelineDep = Annotated[TranslationPipeline, Depends(get_translation_pipeline)]
SharedStoreDep = Annotated[SharedStore | None, Depends(get_shared_store)]
SearchRateLimit = Annotated[RateLimitResult, Depends(enforce_search_rate_limit)]
AdminAccess = Annotated[None, Depends(require_admin_secret)]


def clear_dependency_caches() -> None:
    """Drop every cached singleton (used by tests and after settings change)."""
    for factory in (
        get_shared_store,
        get_cache_store,
        get_translate_rate_limiter,
        get_search_rate_limiter,
        get_hosted_search,
        get_corpus_reader,
        get_search_facade,
        get_translation_provider,
        get_translation_pipeline,
    ):
        factory.cache_clear()
