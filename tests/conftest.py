from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from imdb_scraper.config import Settings
from imdb_scraper.scraper.selectors import IMDB_2024_06, SelectorTable

TITLE_URL = "https://www.imdb.com/title/tt1375666/"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a fake gateway key and every delay set to zero."""
    return Settings(
        scraper_api_key="test-key",
        environment="development",
        settle_delay=0,
        readiness_timeout=10,
        launch_retry_base_delay=0,
        gateway_retry_base_delay=0,
        launch_max_attempts=3,
    )


@pytest.fixture
def selectors() -> SelectorTable:
    return IMDB_2024_06


def make_page(url: str = TITLE_URL) -> MagicMock:
    """A Playwright Page stand-in: every DOM call is an AsyncMock."""
    page = MagicMock()
    page.url = url
    page.wait_for_selector = AsyncMock(return_value=None)
    page.query_selector = AsyncMock(return_value=None)
    page.evaluate = AsyncMock(return_value=None)
    page.eval_on_selector_all = AsyncMock(return_value=[])
    page.goto = AsyncMock(return_value=None)
    page.close = AsyncMock(return_value=None)
    return page


def make_element(text: Optional[str]) -> MagicMock:
    element = MagicMock()
    element.text_content = AsyncMock(return_value=text)
    return element


@pytest.fixture
def page() -> MagicMock:
    return make_page()
