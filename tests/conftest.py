"""Root pytest configuration.

Test Structure:
    tests/
    ├── unit/
    │   ├── domain/            # Value objects and text rules
    │   ├── application/       # Cache, rate limiter, facade, pipeline
    │   └── infrastructure/    # Adapters against httpx.MockTransport
    ├── integration/
    │   └── api/               # FastAPI TestClient with dependency overrides
    └── shared/                # Fakes for the ports
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from riseup_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Load test overrides if present (never required)
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and finish the session with fresh settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()
