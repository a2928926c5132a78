"""Tests for the ScraperAPI gateway client (httpx MockTransport, no network)."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from imdb_scraper.config import Settings
from imdb_scraper.errors import ConfigurationError, FetchError
from imdb_scraper.scraper.gateway import GatewayClient, GatewayOptions

TARGET = "https://www.imdb.com/title/tt1375666/"


def _query(url: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def test_missing_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="SCRAPER_API_KEY"):
        GatewayClient(Settings(scraper_api_key=""))


class TestBuildUrl:
    def test_defaults(self, test_settings):
        query = _query(GatewayClient(test_settings).build_url(TARGET))

        assert query == {
            "api_key": "test-key",
            "url": TARGET,
            "render": "true",
            "country_code": "us",
            "premium": "false",
            "keep_headers": "true",
        }

    def test_options_are_stringified(self, test_settings):
        options = GatewayOptions(render=False, country_code="de", premium=True, session_number=7)

        query = _query(GatewayClient(test_settings).build_url(TARGET, options))

        assert query["render"] == "false"
        assert query["country_code"] == "de"
        assert query["premium"] == "true"
        assert query["session_number"] == "7"

    def test_options_are_immutable(self):
        options = GatewayOptions()
        with pytest.raises(Exception):
            options.render = False


class TestScrape:
    async def test_returns_body(self, test_settings):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text="<html><h1>Inception</h1></html>")

        client = GatewayClient(test_settings, transport=httpx.MockTransport(handler))

        assert await client.scrape_url(TARGET) == "<html><h1>Inception</h1></html>"
        assert _query(seen[0])["url"] == TARGET

    async def test_non_2xx_is_fetch_error(self, test_settings):
        client = GatewayClient(test_settings, transport=httpx.MockTransport(lambda r: httpx.Response(403, text="denied")))

        with pytest.raises(FetchError, match="Failed to scrape URL"):
            await client.scrape_url(TARGET)

    async def test_transport_error_is_fetch_error(self, test_settings):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        client = GatewayClient(test_settings, transport=httpx.MockTransport(handler))

        with pytest.raises(FetchError, match="name resolution failed"):
            await client.scrape_url(TARGET)

    async def test_retry_until_success(self, test_settings):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(500, text="busy")
            return httpx.Response(200, text="ok")

        client = GatewayClient(test_settings, transport=httpx.MockTransport(handler))

        assert await client.scrape_with_retry(TARGET, max_retries=3) == "ok"
        assert len(calls) == 3

    async def test_retry_surfaces_last_error(self, test_settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502, text=f"bad gateway {len(calls)}")

        client = GatewayClient(test_settings, transport=httpx.MockTransport(handler))

        with pytest.raises(FetchError, match="502"):
            await client.scrape_with_retry(TARGET, max_retries=2)
        assert len(calls) == 2

    async def test_retry_waits_double_each_time(self, test_settings):
        waits = []

        async def record_sleep(seconds):
            waits.append(seconds)

        settings = test_settings.model_copy(update={"gateway_retry_base_delay": 1.0})
        client = GatewayClient(
            settings,
            transport=httpx.MockTransport(lambda r: httpx.Response(503, text="busy")),
            sleep=record_sleep,
        )

        with pytest.raises(FetchError):
            await client.scrape_with_retry(TARGET, max_retries=3)
        assert waits == [1, 2]
