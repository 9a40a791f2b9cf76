"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. RISEUP_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Every provider credential is optional. A missing credential selects the
degraded path of the component that needs it (in-process rate limiting,
cold cache, fallback search index) instead of failing at startup.

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. RISEUP_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("RISEUP_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    app_name: str = "RiseUp"
    debug: bool = False
    log_level: str = "INFO"

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_cors_origins: str = ""  # Empty = no CORS allowed (secure default)
    api_trust_proxy_headers: bool = False

    # Shared secret for admin operations (re-index, refresh)
    admin_secret: SecretStr | None = None

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> str:
        """Ensure cors_origins is stored as comma-separated string."""
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else ""

    # Shared store (REDIS_ prefix). "memory://" selects the in-process store.
    redis_url: SecretStr | None = None
    redis_timeout: float = 2.0

    # Cache TTLs (CACHE_ prefix, seconds)
    cache_search_ttl: int = 5 * 60
    cache_facets_ttl: int = 15 * 60
    cache_translation_ttl: int = 30 * 24 * 60 * 60

    # Rate limiting (RATE_LIMIT_ prefix)
    rate_limit_translate_max_requests: int = 100
    rate_limit_translate_window_ms: int = 60 * 60 * 1000
    rate_limit_search_max_requests: int = 120
    rate_limit_search_window_ms: int = 60 * 1000
    rate_limit_key_prefix: str = "rl"
    rate_limit_fail_mode: Literal["fallback", "open", "closed"] = "fallback"
    rate_limit_sweep_interval: float = 5 * 60

    # Hosted search (SEARCH_ prefix, Algolia)
    search_app_id: str = ""
    search_api_key: SecretStr | None = None
    search_admin_key: SecretStr | None = None
    search_index_name: str = "articles"
    search_timeout: float = 5.0
    search_fallback_max_documents: int = 1000
    search_fallback_threshold: float = 60.0
    search_reindex_max_documents: int = 10000

    # Article corpus (CORPUS_ prefix)
    corpus_url: str = ""
    corpus_file: Path | None = None
    corpus_timeout: float = 10.0

    # Translation (TRANSLATION_ prefix)
    translation_google_api_key: SecretStr | None = None
    translation_libretranslate_url: str = ""
    translation_libretranslate_api_key: SecretStr | None = None
    translation_timeout: float = 10.0
    translation_max_text_length: int = 10000
    translation_languages: str = "en,fa"
    translation_detection: Literal["local", "remote"] = "local"

    @field_validator("translation_languages", mode="before")
    @classmethod
    def _validate_translation_languages(cls, v: Any) -> str:
        """Ensure supported languages are stored as comma-separated string."""
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else "en"

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [o.strip() for o in self.api_cors_origins.split(",") if o.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def supported_languages(self) -> list[str]:
        """Parse supported translation languages."""
        return [
            lang.strip().lower()
            for lang in self.translation_languages.split(",")
            if lang.strip()
        ]

    @property
    def hosted_search_configured(self) -> bool:
        """Whether read credentials for the hosted index exist."""
        return bool(self.search_app_id and self.search_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
