from abc import ABC, abstractmethod
from typing import Any, Dict, List

IMDB_TITLE_URL = "https://www.imdb.com/title/{imdb_id}/"


class BaseScraper(ABC):
    """Abstract base class for IMDb page scrapers."""

    @abstractmethod
    async def scrape_complete_movie_data(self, url: str) -> Dict[str, Any]:
        """
        Loads an IMDb title page and reads every section of it.
        :param url: Title page URL (e.g., 'https://www.imdb.com/title/tt1375666/').
        :return: The merged movie record; sections that could not be read are null/empty.
        """
        pass

    @abstractmethod
    async def scrape_trending(self, url: str) -> List[Dict[str, Any]]:
        """
        Loads an IMDb list page and returns its valid entries.
        Returns an empty list instead of raising when the list cannot be read.
        """
        pass

    async def scrape_title(self, imdb_id: str) -> Dict[str, Any]:
        return await self.scrape_complete_movie_data(IMDB_TITLE_URL.format(imdb_id=imdb_id))
