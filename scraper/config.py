from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ScraperSettings(BaseSettings):
    """Browser and extraction settings for the scraper layer."""

    # Browser
    pw_browser: str = "chromium"  # chromium/firefox/webkit
    headless: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    viewport_width: int = 1920
    viewport_height: int = 1080

    # Timeouts (milliseconds, as Playwright expects them)
    page_load_timeout_ms: int = 30000
    selector_timeout_ms: int = 5000

    # Extraction policy
    staleness_hours: float = 3.0
    article_delay_seconds: float = 1.0
    source_timezone: str = "Europe/Kyiv"

    # Full-page screenshots of pages that failed extraction
    screenshot_dir: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def staleness_window_ms(self) -> int:
        return int(self.staleness_hours * 60 * 60 * 1000)
