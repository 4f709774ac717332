"""
PostgreSQL storage for published articles.

This module handles:
- The asyncpg connection pool
- Schema creation for the ``articles`` table
- Reads of recently published titles for duplicate detection
- Inserts of rewritten articles and image write-back
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

import asyncpg
from asyncpg import Pool

from scraper.models import ArticleContent

logger = logging.getLogger(__name__)

PUBLISHED_STATUS = "Published"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS articles (
    id SERIAL PRIMARY KEY,
    link TEXT NOT NULL,
    content TEXT NOT NULL,
    created TIMESTAMP WITH TIME ZONE NOT NULL,
    title TEXT NOT NULL,
    image TEXT,
    status VARCHAR(20) NOT NULL DEFAULT 'Published',
    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_articles_status_created ON articles(status, created);

-- Update trigger for updated_at
CREATE OR REPLACE FUNCTION update_updated_at()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS trigger_articles_updated_at ON articles;
CREATE TRIGGER trigger_articles_updated_at
    BEFORE UPDATE ON articles
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at();
"""

STORAGE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def row_to_article(row) -> ArticleContent:
    return ArticleContent(
        id=row["id"],
        title=row["title"],
        link=row["link"],
        content=row["content"],
        created=datetime_to_ms(row["created"]),
        image=row["image"],
    )


class DatabaseManager:
    """Manage the PostgreSQL connection pool."""

    def __init__(self, database_url: str, pool_size: int = 5):
        """
        Initialize database manager.

        Args:
            database_url: PostgreSQL connection URL
            pool_size: Maximum number of connections in pool
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.pool: Optional[Pool] = None

    async def initialize(self):
        """Initialize database connection pool."""
        logger.info("Initializing database connection pool")
        self.pool = await asyncpg.create_pool(
            self.database_url,
            min_size=1,
            max_size=self.pool_size,
            command_timeout=60,
        )
        logger.info("Database initialized successfully")

    async def close(self):
        """Close database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def get_connection(self):
        """Get a database connection from the pool."""
        if not self.pool:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        async with self.pool.acquire() as connection:
            yield connection

    async def create_tables(self):
        """Create database tables if they don't exist."""
        async with self.get_connection() as conn:
            await conn.execute(SCHEMA_SQL)
        logger.info("Database schema ensured")


class ArticlesRepository:
    """Queries against the ``articles`` table."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_recent_published_titles(self, hours: float = 24.0) -> List[str]:
        """Titles published within the last ``hours``, newest first.

        Storage failures are logged and yield an empty list.
        """
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        sql = """
        SELECT title FROM articles
        WHERE status = $1 AND created >= $2
        ORDER BY created DESC
        """
        try:
            async with self.db.get_connection() as conn:
                rows = await conn.fetch(sql, PUBLISHED_STATUS, since)
        except STORAGE_ERRORS as e:
            logger.error(f"Failed to fetch published articles from database: {e}")
            return []
        return [row["title"] for row in rows if row["title"]]

    async def save_articles(self, articles: Iterable[ArticleContent]) -> List[ArticleContent]:
        """Insert articles as published.

        Returns the articles in input order; saved ones carry their new id,
        ones whose insert failed are returned without an id.
        """
        articles = list(articles)
        if not articles:
            logger.warning("No articles to save")
            return []

        sql = """
        INSERT INTO articles (link, content, created, title, image, status)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING id
        """
        logger.info(f"Saving {len(articles)} articles to database")
        saved: List[ArticleContent] = []
        success_count = 0
        for article in articles:
            try:
                async with self.db.get_connection() as conn:
                    article_id = await conn.fetchval(
                        sql,
                        article.link,
                        article.content,
                        ms_to_datetime(article.created),
                        article.title,
                        article.image,
                        PUBLISHED_STATUS,
                    )
            except STORAGE_ERRORS as e:
                logger.error(
                    f"Failed to save individual article: {e}",
                    extra={"link": article.link, "timestamp_value": article.created},
                )
                saved.append(article)
                continue
            saved.append(article.evolve(id=article_id))
            success_count += 1

        logger.info(f"Successfully saved {success_count}/{len(articles)} articles")
        return saved

    async def update_article_image(self, article_id: int, image: str) -> bool:
        """Replace the stored image; True when a row was updated."""
        sql = "UPDATE articles SET image = $1 WHERE id = $2"
        async with self.db.get_connection() as conn:
            status = await conn.execute(sql, image, article_id)
        return status.split()[-1] != "0"

    async def get_articles_by_ids(self, ids: List[int]) -> List[ArticleContent]:
        """Fetch articles by id, in the order the ids were given."""
        if not ids:
            return []
        sql = """
        SELECT id, link, content, created, title, image
        FROM articles
        WHERE id = ANY($1::int[])
        """
        async with self.db.get_connection() as conn:
            rows = await conn.fetch(sql, list(ids))
        by_id = {row["id"]: row_to_article(row) for row in rows}
        return [by_id[i] for i in ids if i in by_id]
