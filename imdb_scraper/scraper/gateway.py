import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from imdb_scraper.config import Settings, settings as default_settings
from imdb_scraper.errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


class GatewayOptions(BaseModel):
    """Rendering options forwarded to the gateway with every request."""
    model_config = ConfigDict(frozen=True)

    render: bool = True
    country_code: str = "us"
    premium: bool = False
    session_number: Optional[int] = None
    keep_headers: bool = True


class GatewayClient:
    """
    Fetches pages through the ScraperAPI rendering gateway with httpx.
    The gateway loads (and optionally renders) the target URL on our behalf.
    """
    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or default_settings
        self.api_key = self.settings.scraper_api_key
        if not self.api_key:
            raise ConfigurationError("SCRAPER_API_KEY is required")
        self.base_url = self.settings.scraper_api_base_url
        self.timeout = self.settings.gateway_timeout
        self._transport = transport
        self._sleep = sleep

    @staticmethod
    def _to_params(options: GatewayOptions) -> Dict[str, str]:
        params = {}
        for key, value in options.model_dump().items():
            if value is None:
                continue
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            else:
                params[key] = str(value)
        return params

    def build_url(self, url: str, options: Optional[GatewayOptions] = None) -> str:
        """Gateway URL that returns `url` as rendered HTML."""
        params = {"api_key": self.api_key, "url": url}
        params.update(self._to_params(options or GatewayOptions()))
        return str(httpx.URL(self.base_url + "/", params=params))

    async def scrape_url(self, url: str, options: Optional[GatewayOptions] = None) -> str:
        gateway_url = self.build_url(url, options)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(gateway_url)
                response.raise_for_status()
                return response.text
        except httpx.HTTPError as e:
            logger.error("[Gateway] Request for %s failed: %s", url, e)
            raise FetchError(f"Failed to scrape URL: {e}") from e

    async def scrape_with_retry(
        self,
        url: str,
        max_retries: Optional[int] = None,
        options: Optional[GatewayOptions] = None,
    ) -> str:
        """Repeats scrape_url, waiting base, 2*base, 4*base ... seconds between tries."""
        max_retries = max_retries or self.settings.gateway_retries
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_retries),
            wait=wait_exponential(multiplier=self.settings.gateway_retry_base_delay, exp_base=2),
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                logger.info("[Gateway] Attempt %d/%d for %s", number, max_retries, url)
                try:
                    return await self.scrape_url(url, options)
                except FetchError as e:
                    logger.warning("[Gateway] Attempt %d failed: %s", number, e)
                    raise
