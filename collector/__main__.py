#!/usr/bin/env python3
"""
Command-line entry point for the collector.

Usage:
    python -m collector                 # run every active source forever
    python -m collector --once          # run one cycle per source and exit
    python -m collector --source football-ua --once
    python -m collector --init-db       # create the schema first
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from analyzer.dedup import TitleDeduplicator
from formatter.formatter import ArticleFormatter
from llm.openai_provider import OpenAIProvider, OpenAIProviderError
from notifier.telegram_notifier import NotifierSettings, TelegramNotifier, TelegramProviderError
from scraper.config import ScraperSettings
from scraper.models import Source
from scraper.sources import get_active_sources, get_source

from .config import Settings
from .database import ArticlesRepository, DatabaseManager
from .images import ImageReconciler
from .observability import setup_logging
from .pipeline import SourcePipeline
from .scheduler import Scheduler

logger = logging.getLogger("collector")


def select_sources(source_key: Optional[str]) -> List[Source]:
    if source_key:
        source = get_source(source_key)
        return [source] if source else []
    return get_active_sources()


async def async_main(args: argparse.Namespace) -> int:
    setup_logging()
    try:
        settings = Settings()
        notifier_settings = NotifierSettings()
        scraper_settings = ScraperSettings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    setup_logging(settings.log_level, settings.log_format)

    sources = select_sources(args.source)
    if not sources:
        logger.error(f"No source found for key: {args.source}")
        return 1

    try:
        provider = OpenAIProvider(settings.openai_api_key, base_url=settings.openai_api_base)
        notifier = TelegramNotifier(notifier_settings)
    except (OpenAIProviderError, TelegramProviderError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    db = DatabaseManager(settings.database_url, pool_size=settings.db_pool_size)
    await db.initialize()
    try:
        if args.init_db:
            await db.create_tables()

        repository = ArticlesRepository(db)
        deduplicator = TitleDeduplicator(
            provider, threshold=settings.similarity_threshold, model=settings.openai_embedding_model
        )
        formatter = ArticleFormatter(
            provider,
            model=settings.openai_chat_model,
            temperature=settings.rewrite_temperature,
            max_tokens=settings.rewrite_max_tokens,
        )
        reconciler = ImageReconciler(
            repository,
            settings.image_api_url,
            api_token=settings.image_api_token,
            timeout_seconds=settings.image_api_timeout_seconds,
        )
        pipelines = [
            SourcePipeline(
                source,
                repository,
                deduplicator,
                formatter,
                reconciler,
                notifier,
                scraper_settings=scraper_settings,
                recent_titles_hours=settings.recent_titles_hours,
            )
            for source in sources
        ]
        scheduler = Scheduler(pipelines, interval_seconds=settings.poll_interval_seconds)

        if args.once:
            reports = await scheduler.run_all_once()
            for report in reports:
                if report is not None:
                    logger.info(
                        f"{report.source_key}: stopped at {report.stage.value}",
                        extra={"delivery": report.delivery, "error": report.error},
                    )
        else:
            await scheduler.run()
    finally:
        await db.close()
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="News relay collector - scrape, rewrite and publish news to Telegram",
        prog="python -m collector",
    )
    parser.add_argument("--once", action="store_true", help="Run one cycle per source and exit")
    parser.add_argument("--source", type=str, default=None, help="Only run the source with this key")
    parser.add_argument("--init-db", action="store_true", help="Create database tables before running")
    args = parser.parse_args()

    try:
        exit_code = asyncio.run(async_main(args))
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
