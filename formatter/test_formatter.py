"""Tests for the rewrite stage."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from formatter.formatter import ArticleFormatter, parse_rewrite
from llm.openai_provider import ChatCompletion, OpenAIProviderError
from scraper.models import ArticleContent


def _article(title, link=None):
    return ArticleContent(
        title=title,
        link=link or f"https://football.ua/news/{title}.html",
        content=f"{title} body",
        created=1_700_000_000_000,
        image="https://football.ua/img.jpg",
    )


def _reply(title="Новий заголовок", content="Новий *текст*", relevant=True):
    return ChatCompletion(
        content=json.dumps({"title": title, "content": content, "isRelevant": relevant}),
        model="gpt-4o-mini",
    )


def _formatter(*replies):
    provider = MagicMock()
    provider.chat = AsyncMock(side_effect=list(replies))
    return ArticleFormatter(provider), provider


class TestParseRewrite:
    def test_valid_reply(self):
        result = parse_rewrite('{"title": "t", "content": "c", "isRelevant": false}')
        assert result.title == "t"
        assert result.is_relevant is False

    def test_fenced_reply(self):
        result = parse_rewrite('```json\n{"title": "t", "content": "c", "isRelevant": true}\n```')
        assert result.is_relevant is True

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            '{"title": "t", "content": "c"}',
            '{"title": "", "content": "c", "isRelevant": true}',
            '{"title": "t", "content": "c", "isRelevant": "yes"}',
        ],
    )
    def test_unusable_reply(self, raw):
        assert parse_rewrite(raw) is None


class TestArticleFormatter:
    @pytest.mark.asyncio
    async def test_rewrites_relevant_article(self):
        formatter, provider = _formatter(_reply())
        original = _article("Old")

        result = await formatter.format_articles([original])

        assert len(result) == 1
        assert result[0].title == "Новий заголовок"
        assert result[0].content == "Новий *текст*"
        assert result[0].link == original.link
        assert result[0].created == original.created
        assert result[0].image == original.image
        assert original.title == "Old"
        kwargs = provider.chat.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 2000

    @pytest.mark.asyncio
    async def test_irrelevant_article_is_dropped(self):
        formatter, _ = _formatter(_reply(relevant=False), _reply(title="Kept"))

        result = await formatter.format_articles([_article("War"), _article("Match")])

        assert [a.title for a in result] == ["Kept"]

    @pytest.mark.asyncio
    async def test_unparseable_reply_keeps_original(self):
        formatter, _ = _formatter(ChatCompletion(content="sorry, no JSON", model="m"))
        original = _article("Original")

        result = await formatter.format_articles([original])

        assert result == [original]

    @pytest.mark.asyncio
    async def test_empty_reply_keeps_original(self):
        formatter, _ = _formatter(ChatCompletion(content="   ", model="m"))
        original = _article("Original")

        assert await formatter.format_articles([original]) == [original]

    @pytest.mark.asyncio
    async def test_provider_error_continues_batch(self):
        formatter, provider = _formatter(
            OpenAIProviderError("rate limited", code="rate_limit_exceeded", status_code=429),
            _reply(title="Second"),
        )
        first = _article("First")

        result = await formatter.format_articles([first, _article("Other")])

        assert result[0] == first
        assert result[1].title == "Second"
        assert provider.chat.await_count == 2

    @pytest.mark.asyncio
    async def test_order_preserved(self):
        formatter, _ = _formatter(_reply(title="1"), _reply(title="2"), _reply(title="3"))

        result = await formatter.format_articles([_article("a"), _article("b"), _article("c")])

        assert [a.title for a in result] == ["1", "2", "3"]
