import glob
import logging
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

class Settings(BaseSettings):
    environment: str = Field(default="development", alias='APP_ENV')
    host: str = Field(default="0.0.0.0", alias='HOST')
    port: int = Field(default=3000, alias='PORT')
    log_level: str = Field(default="INFO", alias='LOG_LEVEL')

    # Rendering gateway (ScraperAPI)
    scraper_api_key: str = Field(default="", alias='SCRAPER_API_KEY')
    scraper_api_base_url: str = Field(default="https://api.scraperapi.com", alias='SCRAPER_API_BASE_URL')
    gateway_timeout: float = Field(default=60.0, alias='GATEWAY_TIMEOUT')
    gateway_retries: int = Field(default=3, alias='GATEWAY_RETRIES')
    gateway_retry_base_delay: float = Field(default=1.0, alias='GATEWAY_RETRY_BASE_DELAY')

    # Browser
    browser_executable_glob: str = Field(
        default="/opt/render/.cache/ms-playwright/chromium-*/chrome-linux/chrome",
        alias='BROWSER_EXECUTABLE_GLOB',
    )
    system_browser_path: str = Field(default="/usr/bin/google-chrome", alias='SYSTEM_BROWSER_PATH')
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias='BROWSER_USER_AGENT')
    viewport_width: int = Field(default=1920, alias='VIEWPORT_WIDTH')
    viewport_height: int = Field(default=1080, alias='VIEWPORT_HEIGHT')

    # Timeouts (milliseconds, Playwright units)
    direct_navigation_timeout: int = Field(default=30_000, alias='DIRECT_NAVIGATION_TIMEOUT')
    gateway_navigation_timeout: int = Field(default=60_000, alias='GATEWAY_NAVIGATION_TIMEOUT')
    readiness_timeout: int = Field(default=10_000, alias='READINESS_TIMEOUT')
    settle_delay: int = Field(default=3_000, alias='SETTLE_DELAY')
    list_wait_timeout: int = Field(default=30_000, alias='LIST_WAIT_TIMEOUT')

    # Launch/navigation retry (seconds, linear backoff)
    launch_max_attempts: int = Field(default=3, alias='LAUNCH_MAX_ATTEMPTS')
    launch_retry_base_delay: float = Field(default=2.0, alias='LAUNCH_RETRY_BASE_DELAY')

    selector_version: str = Field(default="2024-06", alias='SELECTOR_VERSION')
    trending_list_url: str = Field(default="https://www.imdb.com/list/ls082250769/", alias='TRENDING_LIST_URL')

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origins(self) -> List[str]:
        if self.is_production:
            return ["https://yourdomain.com"]
        return [
            "http://localhost:3000",
            "http://localhost:3001",
            "http://localhost:5173",
        ]

    def browser_executable_path(self) -> Optional[str]:
        """Packaged Chromium binary in production, Playwright's bundled default otherwise."""
        if not self.is_production:
            return None
        matches = sorted(glob.glob(self.browser_executable_glob))
        return matches[-1] if matches else None


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
