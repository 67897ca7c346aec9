"""Tests for the parser HTTP routes."""

import inspect

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from adaptive_uaparser import LookupMode, new_parser, new_parser_with_options
from adaptive_uaparser.routes import create_parser_router

REGEXES = r"""
user_agent_parsers:
  - regex: '(Chrome)/(\d+)'
os_parsers:
  - regex: '(Android) (\d+)'
device_parsers:
  - regex: '; *(Pixel [^;)]+)'
    brand_replacement: 'Google'
"""

ANDROID_PIXEL = "Mozilla/5.0 (Linux; Android 13; Pixel 7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.6099.43 Mobile Safari/537.36"


def _client(parser) -> TestClient:
    app = FastAPI()
    app.include_router(create_parser_router(parser), prefix="/ua")
    return TestClient(app)


@pytest.fixture
def client():
    return _client(new_parser(REGEXES))


class TestParseRoute:
    """Test GET /parse."""

    def test_parse_query(self, client):
        response = client.get("/ua/parse", params={"ua": ANDROID_PIXEL})
        assert response.status_code == 200
        data = response.json()
        assert data["user_agent"] == {"family": "Chrome", "major": "120", "minor": None, "patch": None}
        assert data["os"]["family"] == "Android"
        assert data["device"] == {"family": "Pixel 7", "brand": "Google", "model": "Pixel 7"}

    def test_falls_back_to_header(self, client):
        response = client.get("/ua/parse", headers={"User-Agent": ANDROID_PIXEL})
        assert response.json()["user_agent"]["family"] == "Chrome"

    def test_unknown_is_other(self, client):
        data = client.get("/ua/parse", params={"ua": "curl/8.4.0"}).json()
        assert data["user_agent"]["family"] == "Other"
        assert data["device"]["family"] == "Other"

    def test_disabled_categories_null(self):
        parser = new_parser_with_options(REGEXES, LookupMode.OS, 500_000, 20)
        data = _client(parser).get("/ua/parse", params={"ua": ANDROID_PIXEL}).json()
        assert data["user_agent"] is None
        assert data["device"] is None
        assert data["os"]["major"] == "13"


class TestStatsRoute:
    """Test GET /stats."""

    def test_stats_counts_matches(self, client):
        client.get("/ua/parse", params={"ua": ANDROID_PIXEL})
        data = client.get("/ua/stats").json()
        assert data["mode"] == 7
        assert data["user_agent"]["patterns"] == [{"regex": r"(Chrome)/(\d+)", "match_count": 1}]
        assert data["os"]["misses"] == 0


class TestHandlers:
    """Test how the routes are served."""

    def test_handlers_run_in_threadpool(self):
        """Parsing is CPU-bound and may wait on catalog locks, so handlers are sync."""
        router = create_parser_router(new_parser(REGEXES))
        endpoints = {route.path: route.endpoint for route in router.routes}
        assert set(endpoints) == {"/parse", "/stats"}
        for endpoint in endpoints.values():
            assert not inspect.iscoroutinefunction(endpoint)
