"""FastAPI application factory.

Creates and configures the FastAPI application with all routers,
middleware, and exception handlers.
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riseup import __version__
from riseup.application.services import PeriodicSweeper
from riseup.presentation.api.dependencies import (
    SearchFacadeDep,
    SharedStoreDep,
    get_corpus_reader,
    get_hosted_search,
    get_search_rate_limiter,
    get_shared_store,
    get_translate_rate_limiter,
    get_translation_pipeline,
    get_translation_provider,
)
from riseup.presentation.api.exception_handlers import setup_exception_handlers
from riseup.presentation.api.routers import search_router, translate_router
from riseup.presentation.api.schemas import HealthResponse, StoreHealth
from riseup_config.settings import Settings, get_settings


@lru_cache(maxsize=1)
def _configure_logging() -> None:
    """Configure application logging.

    - Console output with timestamps and module names
    - Configurable log level for riseup modules (from settings)
    - WARNING level for noisy third-party libraries
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    logging.getLogger("riseup").setLevel(log_level)
    logging.getLogger("riseup_config").setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = __version__

OPENAPI_TAGS = [
    {
        "name": "Search",
        "description": """Full-text article search.

**Backends:**
- `hosted`: Algolia index (when credentials are configured and reachable)
- `fallback`: in-process fuzzy index over the most recent corpus articles

Every response reports the backend in `mode`.
""",
    },
    {
        "name": "Translation",
        "description": """English/Persian translation.

**Tiers:**
- `skipped`: source and target language match
- `cache`: reused a stored translation
- `remote`: translated by a remote provider
""",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting RiseUp API v%s...", API_VERSION)

    store = get_shared_store()
    if store is not None and not await store.ping():
        logger.warning("Shared store unreachable at startup, degrading to local state")

    sweeper = PeriodicSweeper(
        [get_translate_rate_limiter(), get_search_rate_limiter()],
        interval=settings.rate_limit_sweep_interval,
    )
    sweeper.start()
    yield

    logger.info("Shutting down RiseUp API...")
    await sweeper.stop()
    await get_translation_pipeline().drain()
    for client in (get_hosted_search(), get_corpus_reader(), get_translation_provider()):
        if client is not None:
            await client.close()
    if store is not None:
        await store.close()
    logger.info("Connections closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Optional settings override for testing. It only shapes the app
        itself: title, docs endpoints and CORS. The lifespan and the
        service dependencies always read ``get_settings()``; replace those
        through ``app.dependency_overrides`` instead.

    Returns
    -------
    Configured FastAPI application instance.
    """
    # Configure logging on first app creation (not on module import)
    _configure_logging()

    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Search and translation for aggregated news.",
        version=API_VERSION,
        docs_url="/docs" if settings.api_debug else None,
        redoc_url="/redoc" if settings.api_debug else None,
        openapi_url="/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )

    setup_exception_handlers(app)

    app.include_router(search_router, prefix="/search", tags=["Search"])
    app.include_router(translate_router, prefix="/translate", tags=["Translation"])

    @app.get("/health", tags=["Health"])
    async def health_check(
        store: SharedStoreDep,
        facade: SearchFacadeDep,
    ) -> HealthResponse:
        """Health check endpoint.

        Reports whether the shared store answers and which search backend
        is selected (null before the first search).
        """
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            store=StoreHealth(
                configured=store is not None,
                available=await store.ping() if store is not None else False,
            ),
            search_mode=facade.mode,
        )

    return app


# Application instance for uvicorn
app = create_app()
