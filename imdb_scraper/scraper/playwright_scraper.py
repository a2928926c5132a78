import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from imdb_scraper.config import Settings, settings as default_settings
from imdb_scraper.scraper.base import BaseScraper
from imdb_scraper.scraper.extractors import (
    SECTION_DEFAULTS,
    TITLE_EXTRACTORS,
    extract_trending,
    filter_trending,
    parse_title_id,
)
from imdb_scraper.scraper.resilience import SessionFactory, start_with_retry
from imdb_scraper.scraper.result import ExtractionResult
from imdb_scraper.scraper.selectors import SelectorTable, get_selectors
from imdb_scraper.scraper.session import BrowserSession

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class PlaywrightScraper(BaseScraper):
    """
    Scraper driving headless Chromium through Playwright.
    Every call builds its own BrowserSession and closes it before returning.
    """
    def __init__(
        self,
        settings: Optional[Settings] = None,
        selectors: Optional[SelectorTable] = None,
        session_factory: SessionFactory = BrowserSession,
    ):
        self.settings = settings or default_settings
        self.selectors = selectors or get_selectors(self.settings.selector_version)
        self.session_factory = session_factory

    async def _start(self, url: str, ready_selector: str) -> BrowserSession:
        return await start_with_retry(
            url,
            settings=self.settings,
            ready_selector=ready_selector,
            session_factory=self.session_factory,
        )

    def _resolve(self, section: str, outcome: Any) -> Any:
        """Applies the section default to a failed extraction."""
        if isinstance(outcome, BaseException):
            logger.warning("[Scraper] Failed to scrape %s: %s", section, outcome)
            return None
        if isinstance(outcome, ExtractionResult) and not outcome.ok:
            logger.warning("[Scraper] Section %s degraded to default (%s)", section, outcome.failure)
            return SECTION_DEFAULTS[section]
        return outcome.value

    async def scrape_complete_movie_data(self, url: str) -> Dict[str, Any]:
        session = await self._start(url, self.selectors.basic_info.ready)
        try:
            outcomes = await asyncio.gather(
                *(extractor(session.page, self.selectors) for _, extractor in TITLE_EXTRACTORS),
                return_exceptions=True,
            )
            sections = {
                section: self._resolve(section, outcome)
                for (section, _), outcome in zip(TITLE_EXTRACTORS, outcomes)
            }
            basic_info = sections.pop("basicInfo", None) or {}
            movie_data = {"url": url, "scrapedAt": utc_now_iso(), **basic_info, **sections}
            if not movie_data.get("imdbId"):
                # page.url is the gateway URL after a gateway fallback
                movie_data["imdbId"] = parse_title_id(url)
            logger.info("[Scraper] Successfully scraped complete movie data for %s", url)
            return movie_data
        finally:
            await session.close()

    async def scrape_trending(self, url: str) -> List[Dict[str, Any]]:
        session: Optional[BrowserSession] = None
        try:
            session = await self._start(url, self.selectors.trending.item)
            logger.info("[Scraper] Looking for trending movies list...")
            result = await extract_trending(session.page, self.selectors, timeout=self.settings.list_wait_timeout)
        except Exception as e:
            logger.error("[Scraper] Error in scrape_trending: %s", e)
            return []
        finally:
            if session is not None:
                await session.close()

        if not result.ok:
            logger.error("[Scraper] Trending list could not be read: %s", result.failure)
            return []
        if not result.value:
            logger.error("[Scraper] No movies found in the list")
            return []

        valid_movies = filter_trending(result.value)
        logger.info("[Scraper] Returning %d valid movies out of %d", len(valid_movies), len(result.value))
        return valid_movies
