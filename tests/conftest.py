"""Pytest configuration and fixtures."""

import os

import pytest

# Set before any test module imports the app (CORS is configured at import)
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["KB_URL"] = "https://kb.example.com/kb.json"
os.environ["ALLOWED_ORIGIN"] = "https://kit.example.com, https://preview.kit.example.com"
os.environ["PLAYGROUND_ENV"] = "test"

ALLOWED_ORIGIN = "https://kit.example.com"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear cached settings so per-test env changes take effect."""
    from playground.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def origin_headers():
    return {"Origin": ALLOWED_ORIGIN}
