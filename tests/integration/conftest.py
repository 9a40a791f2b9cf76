"""Fixtures shared by integration tests."""

import pytest

from riseup_config import clear_settings_cache

ADMIN_SECRET = "test-admin-secret"


@pytest.fixture
def admin_secret(monkeypatch) -> str:
    """Enable admin endpoints with a known secret."""
    monkeypatch.setenv("ADMIN_SECRET", ADMIN_SECRET)
    clear_settings_cache()
    yield ADMIN_SECRET
    clear_settings_cache()


@pytest.fixture
def admin_headers(admin_secret) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_secret}"}
