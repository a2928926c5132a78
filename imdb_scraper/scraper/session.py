import asyncio
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from imdb_scraper.config import Settings, settings as default_settings
from imdb_scraper.scraper.gateway import GatewayClient, GatewayOptions

logger = logging.getLogger(__name__)

HARDENED_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--single-process",
    "--disable-features=VizDisplayCompositor",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-web-security",
    "--disable-blink-features=AutomationControlled",
]


class BrowserSession:
    """
    One Chromium process plus one page, owned by a single scrape.
    A session is started at most once; after close() a new one must be built.
    """
    def __init__(self, settings: Optional[Settings] = None, gateway: Optional[GatewayClient] = None):
        self.settings = settings or default_settings
        self._gateway = gateway
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.closed = False

    def launch_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"headless": True, "args": list(HARDENED_ARGS)}
        executable = self.settings.browser_executable_path()
        if executable:
            options["executable_path"] = executable
        return options

    def gateway_url(self, url: str) -> str:
        if self._gateway is None:
            self._gateway = GatewayClient(self.settings)
        return self._gateway.build_url(url, GatewayOptions(render=True))

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("Browser session is closed; create a new session")

    async def launch(self, **options: Any) -> Browser:
        self._ensure_open()
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        self.browser = await self._playwright.chromium.launch(**options)
        return self.browser

    async def open_page(self) -> Page:
        if self.browser is None:
            raise RuntimeError("Browser is not launched")
        self.context = await self.browser.new_context(
            user_agent=self.settings.user_agent,
            viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
        )
        self.page = await self.context.new_page()
        return self.page

    async def goto(self, url: str, timeout: int) -> None:
        if self.page is None:
            raise RuntimeError("Page not initialized")
        await self.page.goto(url, wait_until="networkidle", timeout=timeout)

    async def wait_until_ready(self, ready_selector: Optional[str] = None) -> None:
        """Polls for a DOM condition; the flat settle delay is only used when none is available."""
        if ready_selector and self.page is not None:
            try:
                await self.page.wait_for_selector(
                    ready_selector, state="attached", timeout=self.settings.readiness_timeout
                )
                return
            except PlaywrightTimeoutError:
                logger.warning("[Browser] Readiness selector %r not found, settling for %d ms",
                               ready_selector, self.settings.settle_delay)
        await asyncio.sleep(self.settings.settle_delay / 1000)

    async def start(self, url: str, ready_selector: Optional[str] = None) -> None:
        """Launch with the configured options and load `url` through the gateway."""
        self._ensure_open()
        logger.info("[Browser] Starting browser for %s (env=%s)", url, self.settings.environment)
        try:
            await self.launch(**self.launch_options())
            await self.open_page()
            await self.goto(self.gateway_url(url), timeout=self.settings.gateway_navigation_timeout)
            await self.wait_until_ready(ready_selector)
            logger.info("[Browser] Successfully loaded %s", url)
        except Exception as e:
            logger.error("[Browser] Failed to start browser for %s: %s", url, e)
            await self.close()
            raise

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for name, closer in (
            ("page", self.page.close if self.page else None),
            ("context", self.context.close if self.context else None),
            ("browser", self.browser.close if self.browser else None),
            ("playwright", self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning("[Browser] Error closing %s: %s", name, e)
        self.page = None
        self.context = None
        self.browser = None
        self._playwright = None
        logger.info("[Browser] Session closed")
