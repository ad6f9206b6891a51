"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Stubs: mock_fetcher_*, mock_generation_client, analyzer factories
2. Sample data: sample_profile_html, sample_analysis, sample_meta
3. Infrastructure: respx_mock, mock_settings, mock_logfire, test_client
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

# Must be set before logfire is imported anywhere
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import respx

from src.models.meta_models import ExtractedMeta, FetchResult
from src.services.generation_client import GenerationClient
from src.services.page_fetcher import PageFetcher
from src.services.profile_analyzer import ProfileAnalyzer

# Modules that hold a module-level ``logfire`` reference
_LOGFIRE_MODULES = (
    "src.services.page_fetcher",
    "src.services.meta_extractor",
    "src.services.response_validator",
    "src.services.generation_client",
    "src.services.report_renderer",
    "src.services.profile_analyzer",
    "src.middleware.correlation_id",
    "src.logging_config",
    "src.main",
)

# Modules that call get_settings() at request time
_SETTINGS_MODULES = (
    "src.config",
    "src.logging_config",
    "src.main",
    "src.services.page_fetcher",
    "src.services.generation_client",
    "src.services.profile_analyzer",
)


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture(autouse=True)
def mock_logfire(monkeypatch):
    """
    Replace logfire in every module that uses it.

    Auto-applied so tests never need a configured Logfire project. Assert on
    the returned mock to verify structured log calls.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = Mock(side_effect=mock_span)
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()
    mock_logfire_module.instrument_pydantic_ai = Mock()

    for module in _LOGFIRE_MODULES:
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings with a test API key."""
    from src.config import Settings

    settings = Settings(
        openai_api_key="sk-test-key",
        openai_model="gpt-4.1-mini",
        env="local",
        logfire_token=None,
        sentry_dsn=None,
        scraper_timeout_seconds=5.0,
    )
    for module in _SETTINGS_MODULES:
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    return settings


@pytest.fixture
def test_client(mock_settings):
    """FastAPI TestClient for E2E tests; clears dependency overrides afterwards."""
    from fastapi.testclient import TestClient

    from src.main import app

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def sample_profile_html():
    """Instagram-like profile page head with Open Graph tags."""
    return """
    <html>
    <head>
        <title>Ayşe Yılmaz (@ayse.cooks) • Instagram photos and videos</title>
        <meta property="og:title" content="Ayşe Yılmaz (@ayse.cooks) • Instagram photos and videos" />
        <meta property="og:description" content="120K Followers, 310 Following, 845 Posts - Quick Turkish home recipes" />
        <meta property="og:image" content="https://cdn.example.com/ayse.jpg" />
        <meta property="og:site_name" content="Instagram" />
        <meta property="og:type" content="profile" />
        <link rel="canonical" href="https://www.instagram.com/ayse.cooks/" />
    </head>
    <body></body>
    </html>
    """


@pytest.fixture
def sample_meta():
    """Populated ExtractedMeta."""
    return ExtractedMeta(
        title="Ayşe Yılmaz (@ayse.cooks)",
        description="Quick Turkish home recipes",
        image_url="https://cdn.example.com/ayse.jpg",
        canonical_url="https://www.instagram.com/ayse.cooks/",
        site_name="Instagram",
        content_type="profile",
        fetch_succeeded=True,
        status=200,
    )


@pytest.fixture
def sample_analysis():
    """Analysis value that matches the documented schema."""
    return {
        "detected_niche": "Home cooking",
        "audience": {
            "who": "Busy parents",
            "level": "beginner",
            "main_pain_points": ["time", "budget", "picky kids"],
        },
        "topic_clusters": [
            {"cluster": "15-minute dinners", "weight_pct": 60, "example_angles": ["a", "b", "c"]}
        ],
        "missing_gaps": ["meal prep", "shopping lists", "kids", "storage", "budget"],
        "positioning_sentence": "Fast home food for busy families.",
        "product_ladder": {
            "entry_pdf": {
                "name": "30 Quick Dinners",
                "price_range": "9-29$",
                "deliverables": ["pdf", "list", "plan"],
                "outline": ["1", "2", "3", "4", "5"],
            },
            "mid_video": {
                "name": "Kitchen Basics",
                "price_range": "49-149$",
                "modules": [{"title": "Knife skills", "minutes": 12, "outcome": "faster prep"}],
                "bonuses": ["templates", "q&a"],
            },
            "premium_1on1": {
                "name": "Menu Coaching",
                "price_range": "199-999$",
                "who_its_for": ["a", "b", "c"],
                "format": "60 min video call",
                "call_structure": ["intro", "audit", "plan", "follow-up"],
            },
        },
        "content_plan_30d": [
            {"day": 1, "title": "Day 1", "hook": "Stop!", "script": "Show it", "cta": "Save"}
        ],
    }


# =============================================================================
# Stubs
# =============================================================================


@pytest.fixture
def mock_fetcher_success(sample_profile_html):
    """Fetcher returning the sample profile page."""
    fetcher = MagicMock(spec=PageFetcher)
    fetcher.fetch = AsyncMock(
        side_effect=lambda url: FetchResult(url=url, ok=True, status=200, html=sample_profile_html)
    )
    return fetcher


@pytest.fixture
def mock_fetcher_failure():
    """Fetcher whose request never produced a response."""
    fetcher = MagicMock(spec=PageFetcher)
    fetcher.fetch = AsyncMock(
        side_effect=lambda url: FetchResult.failure(url, "ConnectError: boom")
    )
    return fetcher


@pytest.fixture
def mock_generation_client(sample_analysis):
    """Generation client returning schema-conforming JSON."""
    client = MagicMock(spec=GenerationClient)
    client.complete = AsyncMock(return_value=json.dumps(sample_analysis))
    return client


@pytest.fixture
def make_analyzer():
    """Build a ProfileAnalyzer with the given stubs and a fixed language."""

    def _make(fetcher=None, generation_client=None, generation_client_factory=None):
        return ProfileAnalyzer(
            fetcher=fetcher,
            generation_client=generation_client,
            generation_client_factory=generation_client_factory,
            language="Turkish",
        )

    return _make
