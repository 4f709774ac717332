"""Tests for Telegram caption building and delivery."""

import aiohttp
import pytest

from notifier.telegram_notifier import (
    ELLIPSIS,
    NotifierSettings,
    TelegramNotifier,
    TelegramProviderError,
    build_caption,
    escape_markdown_v2,
    has_ukrainian_letters,
    normalize_channel_id,
    strip_markdown_markers,
)
from scraper.models import ArticleContent


class FakeResponse:
    def __init__(self, status=200, body=None):
        self.status = status
        self._body = body if body is not None else {"ok": True}

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self):
        return str(self._body)

    async def json(self):
        return self._body


class FakeSession:
    """Records posts; each queued item is a FakeResponse or an exception."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.posts = []

    def post(self, url, json=None):
        self.posts.append((url, json))
        outcome = self.outcomes.pop(0) if self.outcomes else FakeResponse()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _settings(**overrides):
    values = {"telegram_bot_token": "123:abc", "telegram_channel_id": "100200"}
    values.update(overrides)
    return NotifierSettings(**values)


def _article(title="Динамо перемогло", content="Київський клуб виграв матч.", image="https://img/x.jpg", id=1):
    return ArticleContent(
        title=title, link="https://football.ua/a.html", content=content, created=0, image=image, id=id
    )


class TestCaptionHelpers:
    def test_escape(self):
        assert escape_markdown_v2("2:1. (match)!") == "2:1\\. \\(match\\)\\!"

    def test_strip_markers(self):
        assert strip_markdown_markers("*bold* and _it_") == "bold and it"

    def test_ukrainian_gate(self):
        assert has_ukrainian_letters("Київ")
        assert not has_ukrainian_letters("Москва")
        assert not has_ukrainian_letters("London")

    @pytest.mark.parametrize(
        "raw,expected",
        [("100200", "-100200"), ("-100200", "-100200"), ("@channel", "@channel"), ("", "")],
    )
    def test_channel_id(self, raw, expected):
        assert normalize_channel_id(raw) == expected

    def test_short_caption(self):
        assert build_caption("Title", "*Body* text.") == "*Title*\n\nBody text\\."

    def test_long_caption_keeps_title(self):
        title = "Шахтар у фіналі."
        caption = build_caption(title, "Довгий текст. " * 300, limit=1024)

        assert len(caption) <= 1024
        assert caption.startswith("*Шахтар у фіналі\\.*\n\n")
        assert caption.endswith(ELLIPSIS)

    @pytest.mark.parametrize("limit", [60, 100, 257, 1024])
    def test_truncation_never_exceeds_limit(self, limit):
        caption = build_caption("Заголовок", "a.b_c*d!" * 500, limit=limit)
        assert len(caption) <= limit
        assert caption.startswith("*Заголовок*")

    def test_truncation_drops_dangling_escape(self):
        caption = build_caption("T", "ab.cdefghijkl", limit=17)
        assert caption == "*T*\n\nab" + ELLIPSIS

    def test_title_only_when_no_room(self):
        assert build_caption("Long title here", "content", limit=10) == "*Long title here*"


class TestTelegramNotifier:
    def test_missing_channel(self):
        with pytest.raises(TelegramProviderError) as exc:
            TelegramNotifier(_settings(telegram_channel_id=""))
        assert exc.value.code == "MISSING_CHANNEL_ID"

    def test_missing_token(self):
        with pytest.raises(TelegramProviderError) as exc:
            TelegramNotifier(_settings(telegram_bot_token=""))
        assert exc.value.code == "MISSING_BOT_TOKEN"

    @pytest.mark.asyncio
    async def test_sends_photo(self):
        session = FakeSession()
        notifier = TelegramNotifier(_settings(), session=session)

        result = await notifier.deliver([_article()])

        assert result == {"sent": 1, "skipped": 0, "failed": 0}
        url, payload = session.posts[0]
        assert url == "https://api.telegram.org/bot123:abc/sendPhoto"
        assert payload["chat_id"] == "-100200"
        assert payload["photo"] == "https://img/x.jpg"
        assert payload["parse_mode"] == "MarkdownV2"
        assert payload["caption"].startswith("*Динамо перемогло*\n\n")

    @pytest.mark.asyncio
    async def test_skips_incomplete_and_foreign(self):
        session = FakeSession()
        notifier = TelegramNotifier(_settings(), session=session)

        result = await notifier.deliver(
            [
                _article(image=None),
                _article(content=""),
                _article(title="Match report", content="Plain English text"),
                _article(),
            ]
        )

        assert result == {"sent": 1, "skipped": 3, "failed": 0}
        assert len(session.posts) == 1

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self):
        session = FakeSession(
            FakeResponse(status=400, body={"ok": False, "description": "Bad Request"}),
            aiohttp.ClientConnectionError("reset"),
            FakeResponse(),
        )
        notifier = TelegramNotifier(_settings(), session=session)

        result = await notifier.deliver([_article(id=1), _article(id=2), _article(id=3)])

        assert result == {"sent": 1, "skipped": 0, "failed": 2}
        assert len(session.posts) == 3

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        session = FakeSession()
        notifier = TelegramNotifier(_settings(), session=session)

        assert await notifier.deliver([]) == {"sent": 0, "skipped": 0, "failed": 0}
        assert session.posts == []
