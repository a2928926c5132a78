"""Tests for the imdb-scraper command line entry point."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from imdb_scraper import main as cli


@pytest.fixture
def fake_scraper(monkeypatch):
    scraper = MagicMock()
    scraper.scrape_title = AsyncMock(return_value={"imdbId": "tt1375666", "title": "Inception"})
    scraper.scrape_trending = AsyncMock(return_value=[])
    monkeypatch.setattr(cli, "PlaywrightScraper", lambda: scraper)
    return scraper


def test_movie_prints_record(fake_scraper, capsys):
    assert cli.main(["movie", "tt1375666"]) == 0

    assert json.loads(capsys.readouterr().out)["title"] == "Inception"
    fake_scraper.scrape_title.assert_awaited_once_with("tt1375666")


def test_trending_empty_exits_nonzero(fake_scraper, capsys):
    assert cli.main(["trending", "--url", "https://www.imdb.com/list/ls1/"]) == 1

    assert "No valid trending movies" in capsys.readouterr().err
    fake_scraper.scrape_trending.assert_awaited_once_with("https://www.imdb.com/list/ls1/")


def test_failure_exits_nonzero(fake_scraper, capsys):
    fake_scraper.scrape_title.side_effect = RuntimeError("browser crashed")

    assert cli.main(["movie", "tt1375666"]) == 1
    assert "browser crashed" in capsys.readouterr().err
