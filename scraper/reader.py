"""
Dispatch of sources to extraction strategies.

Adding a site means writing a strategy and registering it under its
``SourceKey``; callers only ever go through ``read_source``.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol

from .config import ScraperSettings
from .football_ua import FootballUaScraper
from .models import ArticleContent, Reader, Source, SourceKey

logger = logging.getLogger(__name__)


class ScrapeStrategy(Protocol):
    async def scrape(self, source: Source) -> List[ArticleContent]:
        ...


StrategyFactory = Callable[[ScraperSettings], ScrapeStrategy]


class UnsupportedSourceError(LookupError):
    """No extraction strategy is registered for the source key."""


_STRATEGIES: Dict[SourceKey, StrategyFactory] = {
    SourceKey.FOOTBALL_UA: FootballUaScraper,
}


def register_strategy(key: SourceKey, factory: StrategyFactory) -> None:
    _STRATEGIES[key] = factory


def get_strategy(source: Source, settings: ScraperSettings) -> ScrapeStrategy:
    factory = _STRATEGIES.get(source.key)
    if factory is None:
        raise UnsupportedSourceError(f"No scraper registered for source '{source.key.value}'")
    return factory(settings)


async def read_source(source: Source, settings: Optional[ScraperSettings] = None) -> List[ArticleContent]:
    """Read one source with the strategy matching its reader kind and key."""
    if source.reader is not Reader.SCRAPPER:
        logger.info(f"{source.reader.value} reader is not implemented; skipping {source.name}")
        return []
    strategy = get_strategy(source, settings or ScraperSettings())
    return await strategy.scrape(source)
