from .base import BaseScraper
from .gateway import GatewayClient, GatewayOptions
from .playwright_scraper import PlaywrightScraper
from .session import BrowserSession

__all__ = ["BaseScraper", "BrowserSession", "GatewayClient", "GatewayOptions", "PlaywrightScraper"]
