"""In-memory stand-in for ``BrowserSession`` used by the test suites."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .browser_manager import ScraperSetupError


class FakeBrowserSession:
    """Serves canned listing HTML and per-link article pages.

    ``pages`` maps a link to a mapping of selector -> text. A value that is an
    exception instance is raised when that selector is read.
    """

    def __init__(
        self,
        listing_url: str,
        listing_fragments: List[str],
        pages: Dict[str, Dict[str, object]],
        fail_start: bool = False,
        fail_listing: bool = False,
    ):
        self.listing_url = listing_url
        self.listing_fragments = listing_fragments
        self.pages = pages
        self.fail_start = fail_start
        self.fail_listing = fail_listing
        self.visited: List[str] = []
        self.screenshots: List[Path] = []
        self.closed = False
        self._current: Optional[str] = None

    def __call__(self, settings) -> "FakeBrowserSession":
        return self

    async def __aenter__(self) -> "FakeBrowserSession":
        if self.fail_start:
            raise ScraperSetupError("browser launch failed")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    async def goto(self, url: str, wait_until: str = "networkidle") -> None:
        if url == self.listing_url:
            if self.fail_listing:
                raise TimeoutError("listing timed out")
        else:
            self.visited.append(url)
        self._current = url

    async def wait_for_selector(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        return None

    async def inner_html_all(self, selector: str) -> List[str]:
        return list(self.listing_fragments)

    async def inner_text(self, selector: str) -> str:
        value = self.pages.get(self._current, {}).get(selector)
        if value is None:
            raise TimeoutError(f"selector {selector} not found on {self._current}")
        if isinstance(value, Exception):
            raise value
        return str(value)

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        value = self.pages.get(self._current, {}).get(f"{selector}@{name}")
        return None if value is None else str(value)

    async def screenshot(self, path: Path) -> None:
        self.screenshots.append(path)


def article_page(date: str, title: str = "Заголовок", body: str = "Текст новини", image: Optional[str] = None):
    page: Dict[str, object] = {".date": date, ".author-article": body, "h1": title}
    if image:
        page['meta[property="og:image"]@content'] = image
    return page
