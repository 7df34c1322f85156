"""
tests/conftest.py — Shared pytest fixtures for the econpulse test suite.

Provides:
  fixture_path()    — resolves paths to tests/fixtures/
  settings()        — explicit Settings pointing at fake hosts (no .env, no network)
  window()          — FetchWindow anchored at TODAY
  *_payload         — parsed provider JSON fixtures
  mock_http         — configured respx router for faking HTTP responses
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
import respx

from econpulse_shared.config import Settings
from econpulse_shared.models.indicators import FetchWindow

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Reference "today" used across the suite
TODAY = date(2025, 12, 15)

FRED_URL = "https://fred.test/fred"
WORLDBANK_URL = "https://worldbank.test/v2"
STORE_URL = "https://store.test/gists"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES_DIR


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    """Settings with every value set explicitly so the environment cannot leak in."""
    return Settings(
        _env_file=None,
        fred_api_key="abcdef1234567890abcdef1234567890",
        fred_base_url=FRED_URL,
        worldbank_base_url=WORLDBANK_URL,
        document_store_url=STORE_URL,
        document_store_token="test-token",
        document_id="doc123",
        document_file_name="economic-data.json",
        enabled_countries="US,CN",
        lookback_years=5,
        max_points=60,
        http_timeout=5.0,
        fetch_max_attempts=1,
        log_level="INFO",
        log_format="console",
    )


@pytest.fixture
def window() -> FetchWindow:
    return FetchWindow.trailing(years=5, max_points=60, today=TODAY)


# ---------------------------------------------------------------------------
# Provider payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def fred_cpi_payload() -> dict:
    return json.loads((FIXTURES_DIR / "fred_cpiaucsl_sample.json").read_text())


@pytest.fixture
def fred_fedfunds_payload() -> dict:
    return json.loads((FIXTURES_DIR / "fred_fedfunds_sample.json").read_text())


@pytest.fixture
def worldbank_payload() -> list:
    return json.loads((FIXTURES_DIR / "worldbank_unemployment_sample.json").read_text())


# ---------------------------------------------------------------------------
# respx HTTP mock router
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http():
    """
    Activate the respx mock router for all httpx requests.

    Usage in tests:
        def test_something(mock_http):
            mock_http.get("https://...").mock(return_value=httpx.Response(200, json={...}))
    """
    with respx.mock(assert_all_called=False) as router:
        yield router
