import logging
from typing import Callable, List, Optional

from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_incrementing

from imdb_scraper.config import Settings, settings as default_settings
from imdb_scraper.errors import BrowserLaunchError, NavigationError, SessionStartError
from imdb_scraper.scraper.result import Strategy, first_success
from imdb_scraper.scraper.session import BrowserSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], BrowserSession]

MINIMAL_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]
SYSTEM_BINARY_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def launch_strategies(session: BrowserSession) -> List[Strategy]:
    """Configured options, then minimal flags, then the system Chrome binary."""
    settings = session.settings
    return [
        Strategy("configured", lambda: session.launch(**session.launch_options())),
        Strategy("minimal", lambda: session.launch(headless=True, args=list(MINIMAL_ARGS))),
        Strategy(
            "system-binary",
            lambda: session.launch(
                headless=True,
                executable_path=settings.system_browser_path,
                args=list(SYSTEM_BINARY_ARGS),
            ),
        ),
    ]


def navigation_strategies(session: BrowserSession, url: str) -> List[Strategy]:
    """Direct page load first, then the gateway-routed load."""
    settings = session.settings
    return [
        Strategy("direct", lambda: session.goto(url, timeout=settings.direct_navigation_timeout)),
        Strategy(
            "gateway",
            lambda: session.goto(session.gateway_url(url), timeout=settings.gateway_navigation_timeout),
        ),
    ]


def linear_backoff(base_delay: float) -> wait_incrementing:
    """base, 2 * base, 3 * base ... seconds."""
    return wait_incrementing(start=base_delay, increment=base_delay)


async def _establish(session: BrowserSession, url: str, ready_selector: Optional[str]) -> None:
    await first_success(launch_strategies(session), BrowserLaunchError, label="launch")
    await session.open_page()
    await first_success(navigation_strategies(session, url), NavigationError, label="navigation")
    await session.wait_until_ready(ready_selector)


async def start_with_retry(
    url: str,
    settings: Optional[Settings] = None,
    ready_selector: Optional[str] = None,
    session_factory: SessionFactory = BrowserSession,
    max_attempts: Optional[int] = None,
) -> BrowserSession:
    """
    Returns a started session for `url`.

    Each attempt builds a fresh session and walks the launch and navigation
    fallbacks; a failed attempt closes its session and waits base * attempt
    seconds before the next one.
    """
    settings = settings or default_settings
    max_attempts = max_attempts or settings.launch_max_attempts
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=linear_backoff(settings.launch_retry_base_delay),
    )
    try:
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                logger.info("[Retry] Attempt %d/%d - starting browser for %s", number, max_attempts, url)
                session = session_factory(settings)
                try:
                    await _establish(session, url, ready_selector)
                except Exception as e:
                    logger.error("[Retry] Attempt %d failed: %s", number, e)
                    await session.close()
                    raise
                logger.info("[Retry] Loaded %s on attempt %d", url, number)
                return session
    except RetryError as e:
        raise SessionStartError(max_attempts, e.last_attempt.exception()) from e.last_attempt.exception()
