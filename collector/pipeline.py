"""
One harvesting cycle for one source.

Stages run in order: scrape, deduplicate, rewrite, persist, reconcile images,
deliver. A stage that yields nothing ends the cycle quietly; setup failures
of the scraper and image service transport failures end it with an error on
the report. Nothing here stops other sources' schedules.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from analyzer.dedup import TitleDeduplicator
from formatter.formatter import ArticleFormatter
from notifier.telegram_notifier import TelegramNotifier
from scraper.browser_manager import ScraperSetupError
from scraper.config import ScraperSettings
from scraper.models import ArticleContent, Source
from scraper.reader import UnsupportedSourceError, read_source

from .database import ArticlesRepository
from .images import ImageReconciler, ImageReconciliationError

logger = logging.getLogger(__name__)

SourceReader = Callable[[Source, Optional[ScraperSettings]], Awaitable[List[ArticleContent]]]


class Stage(str, Enum):
    SCRAPING = "scraping"
    DEDUPLICATING = "deduplicating"
    REWRITING = "rewriting"
    PERSISTING = "persisting"
    RECONCILING = "reconciling"
    DELIVERING = "delivering"
    DONE = "done"


@dataclass
class CycleReport:
    """What one cycle did; ``stage`` is the last stage that ran."""
    source_key: str
    stage: Stage = Stage.SCRAPING
    scraped: int = 0
    unique: int = 0
    formatted: int = 0
    persisted: int = 0
    reconciled: int = 0
    delivery: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.stage is Stage.DONE


class SourcePipeline:
    """Wires the harvesting stages together for a single source."""

    def __init__(
        self,
        source: Source,
        repository: ArticlesRepository,
        deduplicator: TitleDeduplicator,
        formatter: ArticleFormatter,
        reconciler: ImageReconciler,
        notifier: TelegramNotifier,
        scraper_settings: Optional[ScraperSettings] = None,
        recent_titles_hours: float = 24.0,
        reader: SourceReader = read_source,
    ):
        self.source = source
        self.repository = repository
        self.deduplicator = deduplicator
        self.formatter = formatter
        self.reconciler = reconciler
        self.notifier = notifier
        self.scraper_settings = scraper_settings
        self.recent_titles_hours = recent_titles_hours
        self.reader = reader

    async def run_once(self) -> CycleReport:
        report = CycleReport(source_key=self.source.key.value)
        name = self.source.name

        try:
            articles = await self.reader(self.source, self.scraper_settings)
        except (ScraperSetupError, UnsupportedSourceError) as e:
            logger.error(f"{name}: scrape failed: {e}")
            report.error = str(e)
            return report
        report.scraped = len(articles)
        if not articles:
            logger.info(f"{name}: no new articles")
            return report

        report.stage = Stage.DEDUPLICATING
        existing_titles = await self.repository.get_recent_published_titles(self.recent_titles_hours)
        unique = await self.deduplicator.filter_duplicates(articles, existing_titles)
        report.unique = len(unique)
        if not unique:
            logger.info(f"{name}: all {len(articles)} articles were already published")
            return report

        report.stage = Stage.REWRITING
        formatted = await self.formatter.format_articles(unique)
        report.formatted = len(formatted)
        if not formatted:
            logger.info(f"{name}: nothing left after rewriting")
            return report

        report.stage = Stage.PERSISTING
        saved = await self.repository.save_articles(formatted)
        persisted = [a for a in saved if a.is_persisted]
        report.persisted = len(persisted)
        if not persisted:
            logger.warning(f"{name}: no articles could be saved")
            return report

        report.stage = Stage.RECONCILING
        try:
            reconciled = await self.reconciler.reconcile(persisted)
        except ImageReconciliationError as e:
            logger.error(f"{name}: image reconciliation failed: {e}")
            report.error = str(e)
            return report
        report.reconciled = len(reconciled)
        if not reconciled:
            logger.info(f"{name}: nothing to deliver after image reconciliation")
            return report

        report.stage = Stage.DELIVERING
        report.delivery = await self.notifier.deliver(reconciled)

        report.stage = Stage.DONE
        logger.info(
            f"{name}: cycle complete",
            extra={
                "scraped": report.scraped,
                "unique": report.unique,
                "formatted": report.formatted,
                "persisted": report.persisted,
                "sent": report.delivery.get("sent", 0),
            },
        )
        return report
