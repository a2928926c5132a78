"""Tests for the HTTP surface, with the scraper replaced through dependency overrides."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from imdb_scraper import api as api_module
from imdb_scraper.api import app, get_scraper
from imdb_scraper.errors import SessionStartError
from imdb_scraper.scraper import playwright_scraper
from imdb_scraper.scraper.base import BaseScraper
from imdb_scraper.scraper.playwright_scraper import PlaywrightScraper
from tests.conftest import make_page


class FakeScraper(BaseScraper):
    def __init__(self, movie: Optional[Dict[str, Any]] = None, trending: Any = None, error: Exception = None):
        self.movie = movie or {}
        self.trending = trending if trending is not None else []
        self.error = error
        self.movie_urls: List[str] = []

    async def scrape_complete_movie_data(self, url: str) -> Dict[str, Any]:
        self.movie_urls.append(url)
        if self.error:
            raise self.error
        return self.movie

    async def scrape_trending(self, url: str) -> List[Dict[str, Any]]:
        if self.error:
            raise self.error
        return self.trending


@pytest.fixture
def use_scraper():
    def install(scraper: BaseScraper) -> BaseScraper:
        app.dependency_overrides[get_scraper] = lambda: scraper
        return scraper

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Static routes
# ---------------------------------------------------------------------------
def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["service"] == "IMDb Scraper API"
    assert body["version"] == "1.0.0"
    assert body["timestamp"]


def test_root_and_test_endpoints(client):
    assert client.get("/").json()["status"] == "Running"
    assert "POST /api/scrape/movie" in client.get("/api/test").json()["endpoints"]


def test_unknown_route_is_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Endpoint not found"
    assert body["message"] == "GET /api/nope does not exist"
    assert "POST /api/scrape/movie" in body["availableEndpoints"]


def test_wrong_method_is_404(client):
    response = client.get("/api/scrape/movie")

    assert response.status_code == 404
    assert response.json()["error"] == "Endpoint not found"


def test_lifespan_configures_logging(monkeypatch):
    configure = MagicMock()
    monkeypatch.setattr(api_module, "configure_logging", configure)

    with TestClient(app):
        pass

    configure.assert_called_once_with()


# ---------------------------------------------------------------------------
# POST /api/scrape/movie
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("kwargs", [
    {"json": {}},
    {"json": {"imdbid": ""}},
    {"json": {"imdbid": "   "}},
    {"json": {"url": "https://www.imdb.com/title/tt1375666/"}},
    {"json": ["tt1375666"]},
    {"content": b"not json", "headers": {"Content-Type": "application/json"}},
    {},
])
def test_scrape_movie_requires_imdbid(client, use_scraper, kwargs):
    scraper = use_scraper(FakeScraper())

    response = client.post("/api/scrape/movie", **kwargs)

    assert response.status_code == 400
    assert response.json()["error"] == "imdbid is required"
    assert "example" in response.json()
    assert scraper.movie_urls == []


@pytest.mark.parametrize("imdbid", [123, ["tt1375666"], {"id": "tt1375666"}])
def test_scrape_movie_rejects_non_string_imdbid(client, use_scraper, imdbid):
    scraper = use_scraper(FakeScraper())

    response = client.post("/api/scrape/movie", json={"imdbid": imdbid})

    assert response.status_code == 400
    assert response.json() == {
        "error": "imdbid must be a string",
        "type": "VALIDATION_ERROR",
        "details": {"example": {"imdbid": "tt1375666"}},
    }
    assert scraper.movie_urls == []


def test_scrape_movie_validation_never_builds_a_session(client, monkeypatch):
    start = AsyncMock()
    monkeypatch.setattr(playwright_scraper, "start_with_retry", start)

    response = client.post("/api/scrape/movie", json={})

    assert response.status_code == 400
    start.assert_not_awaited()


def test_scrape_movie_success(client, use_scraper):
    movie = {"url": "https://www.imdb.com/title/tt1375666/", "imdbId": "tt1375666", "title": "Inception"}
    scraper = use_scraper(FakeScraper(movie=movie))

    response = client.post("/api/scrape/movie", json={"imdbid": "tt1375666"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"] == movie
    assert body["scrapedAt"]
    assert scraper.movie_urls == ["https://www.imdb.com/title/tt1375666/"]


def test_scrape_movie_failure_is_500(client, use_scraper):
    use_scraper(FakeScraper(error=SessionStartError(3, RuntimeError("chromium missing"))))

    response = client.post("/api/scrape/movie", json={"imdbid": "tt1375666"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to scrape movie data"
    assert "chromium missing" in body["message"]
    assert "Traceback" in body["details"]


# ---------------------------------------------------------------------------
# GET /api/trending/movies
# ---------------------------------------------------------------------------
def test_trending_success(client, use_scraper):
    use_scraper(FakeScraper(trending=[
        {"imdbId": "tt0111161", "title": "1. The Shawshank Redemption", "year": "1994", "stars": ["Tim Robbins"]},
        {"imdbId": "tt0068646", "title": "2. The Godfather"},
    ]))

    response = client.get("/api/trending/movies")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert body["type"] == "trending"
    assert body["data"][0]["imdbId"] == "tt0111161"
    assert body["data"][0]["stars"] == ["Tim Robbins"]
    assert body["data"][1]["year"] == ""
    assert body["scrapedAt"]


def test_trending_empty_is_500(client, use_scraper):
    use_scraper(FakeScraper(trending=[]))

    response = client.get("/api/trending/movies")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to scrape trending movies",
        "message": "No valid trending movies data found",
    }


def test_trending_scraper_error_is_500(client, use_scraper):
    use_scraper(FakeScraper(error=RuntimeError("browser crashed")))

    response = client.get("/api/trending/movies")

    assert response.status_code == 500
    assert response.json()["message"] == "browser crashed"


def test_trending_all_invalid_end_to_end(client, use_scraper, test_settings, monkeypatch):
    """The scraper returns [] for an all-invalid list; the endpoint reports it as a 500."""
    session = MagicMock(page=make_page("https://www.imdb.com/list/ls082250769/"), close=AsyncMock())
    session.page.eval_on_selector_all.return_value = [
        {"movieUrl": "/title/tt0111161/", "title": ""},
        {"movieUrl": "/name/nm0000151/", "title": "Morgan Freeman"},
    ]
    monkeypatch.setattr(playwright_scraper, "start_with_retry", AsyncMock(return_value=session))
    use_scraper(PlaywrightScraper(test_settings))

    response = client.get("/api/trending/movies")

    assert response.status_code == 500
    assert response.json()["message"] == "No valid trending movies data found"
    session.close.assert_awaited_once()
