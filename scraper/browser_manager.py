from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from .config import ScraperSettings

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class ScraperSetupError(RuntimeError):
    """Browser could not be launched or the listing page could not be loaded."""


async def default_route_blocker(route, request) -> None:
    rtype = request.resource_type
    url = request.url
    if rtype in ("media", "font"):
        return await route.abort()
    if any(s in url for s in ("googletagmanager", "doubleclick", "adservice", "analytics", "facebook")):
        return await route.abort()
    return await route.continue_()


class BrowserSession:
    """One browser, one context, one page; created per scrape call.

    Use as an async context manager so the browser process is always torn
    down, whatever happens inside the block.
    """

    def __init__(self, settings: ScraperSettings):
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self._page is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            launcher = getattr(self._playwright, self.settings.pw_browser, self._playwright.chromium)
            self._browser = await launcher.launch(headless=self.settings.headless, args=LAUNCH_ARGS)
            self._context = await self._browser.new_context(
                user_agent=self.settings.user_agent,
                viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
            )
            await self._context.route("**/*", default_route_blocker)
            self._page = await self._context.new_page()
        except Exception as e:
            await self.close()
            raise ScraperSetupError(f"Failed to initialize browser: {e}") from e

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not initialized. Call start() first.")
        return self._page

    async def goto(self, url: str, wait_until: str = "networkidle") -> None:
        await self.page.goto(url, wait_until=wait_until, timeout=self.settings.page_load_timeout_ms)

    async def wait_for_selector(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        await self.page.wait_for_selector(selector, timeout=timeout_ms or self.settings.selector_timeout_ms)

    async def inner_html_all(self, selector: str) -> List[str]:
        return [await el.inner_html() for el in await self.page.query_selector_all(selector)]

    async def inner_text(self, selector: str) -> str:
        """Inner text of the first match; raises if nothing matches in time."""
        return await self.page.inner_text(selector, timeout=self.settings.selector_timeout_ms)

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        element = await self.page.query_selector(selector)
        if element is None:
            return None
        return await element.get_attribute(name)

    async def screenshot(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(path), full_page=True)

    async def close(self) -> None:
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
        except Exception as e:
            logger.error(f"Error closing browser: {e}")
        finally:
            self._page = None
            self._context = None
            self._browser = None
            try:
                if self._playwright:
                    await self._playwright.stop()
            finally:
                self._playwright = None
