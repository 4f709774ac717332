"""
Football UA extraction strategy.

Walks the "main news" block of the listing page, visits each article in
listing order and stops at the first article older than the staleness
window. Listings are reverse-chronological, so nothing after a stale article
is visited.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from .browser_manager import BrowserSession, ScraperSetupError
from .config import ScraperSettings
from .dates import is_recent_enough, parse_article_date
from .links import candidate_links, extract_links
from .models import ArticleContent, Source

logger = logging.getLogger(__name__)

MAIN_NEWS_SELECTOR = ".news-feed.main-news"
EXCLUDE_LINKS = ["rss2"]

DATE_SELECTOR = ".date"
CONTENT_SELECTOR = ".author-article"
TITLE_SELECTOR = "h1"
IMAGE_SELECTOR = 'meta[property="og:image"]'


class StaleArticle(Exception):
    """Signals the end of the fresh part of the listing."""


class FootballUaScraper:
    """Scrapes recent articles from football.ua."""

    def __init__(
        self,
        settings: ScraperSettings,
        session_factory: Callable[[ScraperSettings], BrowserSession] = BrowserSession,
        now: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self._session_factory = session_factory
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

    async def scrape(self, source: Source) -> List[ArticleContent]:
        """Return fresh articles for the source.

        Raises:
            ScraperSetupError: browser launch or listing page failure
        """
        articles: List[ArticleContent] = []
        async with self._session_factory(self.settings) as session:
            links = await self._discover_links(session, source)
            logger.info(f"{source.name}: {len(links)} candidate links")

            for index, link in enumerate(links):
                if index:
                    await self._sleep(self.settings.article_delay_seconds)
                try:
                    article = await self._process_article(session, link)
                except StaleArticle:
                    logger.info(
                        f"Article is older than {self.settings.staleness_hours:g} hours. Stopping processing.",
                        extra={"link": link},
                    )
                    break
                except Exception as e:
                    logger.error(f"Error scraping article {link}: {e}")
                    await self._save_failure_screenshot(session, link)
                    continue
                articles.append(article)

        logger.info(f"{source.name}: collected {len(articles)} articles")
        return articles

    async def _discover_links(self, session: BrowserSession, source: Source) -> List[str]:
        try:
            await session.goto(source.url)
            await session.wait_for_selector(MAIN_NEWS_SELECTOR)
            fragments = await session.inner_html_all(MAIN_NEWS_SELECTOR)
        except ScraperSetupError:
            raise
        except Exception as e:
            raise ScraperSetupError(f"Error loading listing {source.url}: {e}") from e
        return candidate_links(extract_links(fragments), EXCLUDE_LINKS)

    async def _process_article(self, session: BrowserSession, link: str) -> ArticleContent:
        await session.goto(link)

        date_string = await session.inner_text(DATE_SELECTOR)
        created = parse_article_date(date_string, self.settings.source_timezone)
        now_ms = int(self._now().timestamp() * 1000)
        if not is_recent_enough(created, now_ms, self.settings.staleness_window_ms):
            raise StaleArticle(link)

        content = await session.inner_text(CONTENT_SELECTOR)
        title = await session.inner_text(TITLE_SELECTOR)
        image = await session.attribute(IMAGE_SELECTOR, "content")
        logger.debug("Article content", extra={"link": link, "content": content[:200]})

        return ArticleContent(
            title=title.strip(),
            link=link,
            content=content.strip(),
            created=created,
            image=image or None,
        )

    async def _save_failure_screenshot(self, session: BrowserSession, link: str) -> None:
        if not self.settings.screenshot_dir:
            return
        name = hashlib.md5(link.encode("utf-8")).hexdigest()
        path = Path(self.settings.screenshot_dir) / f"football_ua_{name}.png"
        try:
            await session.screenshot(path)
            logger.info(f"Saved failure screenshot to {path}")
        except Exception as e:
            logger.warning(f"Could not save screenshot for {link}: {e}")
