"""Tests for the articles repository with a mocked asyncpg connection."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from collector.database import ArticlesRepository, DatabaseManager, datetime_to_ms, ms_to_datetime
from scraper.models import ArticleContent


class FakeDB:
    def __init__(self):
        self.conn = MagicMock()
        self.conn.fetch = AsyncMock(return_value=[])
        self.conn.fetchval = AsyncMock()
        self.conn.execute = AsyncMock(return_value="UPDATE 1")

    @asynccontextmanager
    async def get_connection(self):
        yield self.conn


def _article(n, **kw):
    values = dict(
        title=f"Title {n}",
        link=f"https://football.ua/{n}.html",
        content="body",
        created=1_764_010_560_000,
        image=f"https://img/{n}.jpg",
    )
    values.update(kw)
    return ArticleContent(**values)


def test_timestamp_conversion_roundtrip():
    ms = 1_764_010_560_000
    value = ms_to_datetime(ms)
    assert value.tzinfo is timezone.utc
    assert datetime_to_ms(value) == ms
    assert datetime_to_ms(datetime(1970, 1, 1, 0, 0, 1)) == 1000


@pytest.mark.asyncio
async def test_get_connection_requires_initialize():
    db = DatabaseManager("postgresql://localhost/test")
    with pytest.raises(RuntimeError):
        async with db.get_connection():
            pass


@pytest.mark.asyncio
async def test_recent_titles():
    db = FakeDB()
    db.conn.fetch.return_value = [{"title": "Newest"}, {"title": None}, {"title": "Older"}]

    titles = await ArticlesRepository(db).get_recent_published_titles(24)

    assert titles == ["Newest", "Older"]
    args = db.conn.fetch.call_args.args
    assert args[1] == "Published"
    assert args[2].tzinfo is not None


@pytest.mark.asyncio
async def test_recent_titles_storage_failure_is_empty():
    db = FakeDB()
    db.conn.fetch.side_effect = asyncpg.InterfaceError("connection lost")

    assert await ArticlesRepository(db).get_recent_published_titles() == []


@pytest.mark.asyncio
async def test_save_assigns_ids_and_keeps_failures():
    db = FakeDB()
    db.conn.fetchval.side_effect = [11, asyncpg.PostgresError("boom"), 13]
    articles = [_article(1), _article(2), _article(3)]

    saved = await ArticlesRepository(db).save_articles(articles)

    assert [a.id for a in saved] == [11, None, 13]
    assert saved[1] is articles[1]
    assert articles[0].id is None
    first_call = db.conn.fetchval.call_args_list[0].args
    assert first_call[1] == "https://football.ua/1.html"
    assert first_call[3] == ms_to_datetime(articles[0].created)
    assert first_call[6] == "Published"


@pytest.mark.asyncio
async def test_save_nothing():
    db = FakeDB()
    assert await ArticlesRepository(db).save_articles([]) == []
    db.conn.fetchval.assert_not_called()


@pytest.mark.asyncio
async def test_update_image_reports_missing_row():
    db = FakeDB()
    repo = ArticlesRepository(db)

    assert await repo.update_article_image(5, "https://img/new.jpg") is True
    db.conn.execute.return_value = "UPDATE 0"
    assert await repo.update_article_image(6, "https://img/new.jpg") is False


@pytest.mark.asyncio
async def test_get_by_ids_keeps_requested_order():
    db = FakeDB()
    created = ms_to_datetime(1_764_010_560_000)
    db.conn.fetch.return_value = [
        {"id": 2, "title": "B", "link": "l2", "content": "c2", "created": created, "image": "i2"},
        {"id": 1, "title": "A", "link": "l1", "content": "c1", "created": created, "image": None},
    ]

    articles = await ArticlesRepository(db).get_articles_by_ids([1, 2, 3])

    assert [a.id for a in articles] == [1, 2]
    assert articles[0].created == 1_764_010_560_000
    assert articles[0].image is None
