"""
Telegram channel delivery.

Each article becomes one ``sendPhoto`` call whose caption is the bold title
followed by the body, escaped for MarkdownV2 and clipped to the caption limit.
Articles without an image, title or body, or without any Ukrainian letters,
are skipped.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic_settings import BaseSettings, SettingsConfigDict

from scraper.models import ArticleContent

logger = logging.getLogger(__name__)

TELEGRAM_CAPTION_LIMIT = 1024

MARKDOWN_V2_SPECIALS = re.compile(r"([\\_*\[\]()~`>#+\-=|{}.!])")
EMPHASIS_MARKERS = re.compile(r"[*_]")
UKRAINIAN_LETTERS = re.compile(r"[іїєґІЇЄҐ]")
ELLIPSIS = "\\.\\.\\."


class NotifierSettings(BaseSettings):
    """Configuration options for Telegram delivery."""

    telegram_bot_token: str
    telegram_channel_id: str
    telegram_api_base: str = "https://api.telegram.org"
    caption_limit: int = TELEGRAM_CAPTION_LIMIT
    telegram_timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class TelegramProviderError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


def escape_markdown_v2(value: str) -> str:
    return MARKDOWN_V2_SPECIALS.sub(r"\\\1", value)


def strip_markdown_markers(value: str) -> str:
    return EMPHASIS_MARKERS.sub("", value)


def has_ukrainian_letters(value: str) -> bool:
    return bool(UKRAINIAN_LETTERS.search(value))


def normalize_channel_id(raw: str) -> str:
    """Channel handles pass through; bare numeric ids get the ``-`` prefix."""
    raw = (raw or "").strip()
    if not raw or raw.startswith("-") or raw.startswith("@"):
        return raw
    return f"-{raw}"


def _drop_dangling_escape(value: str) -> str:
    trailing = len(value) - len(value.rstrip("\\"))
    if trailing % 2:
        return value[:-1]
    return value


def build_caption(title: str, content: str, limit: int = TELEGRAM_CAPTION_LIMIT) -> str:
    """Compose ``*title*\\n\\ncontent``, truncating only the content to fit ``limit``.

    When even the title leaves no room for content, the title line alone is
    returned.
    """
    safe_title = escape_markdown_v2(strip_markdown_markers(title.strip()))
    safe_content = escape_markdown_v2(strip_markdown_markers(content.strip()))
    title_line = f"*{safe_title}*"
    separator = "\n\n"
    full_caption = f"{title_line}{separator}{safe_content}"

    if len(full_caption) <= limit:
        return full_caption

    room = limit - len(title_line) - len(separator) - len(ELLIPSIS)
    if room <= 0:
        return title_line

    truncated = _drop_dangling_escape(safe_content[:room].rstrip())
    if not truncated:
        return title_line
    return f"{title_line}{separator}{truncated}{ELLIPSIS}"


class TelegramNotifier:
    """Sends articles to a Telegram channel through the Bot API."""

    def __init__(self, settings: NotifierSettings, session: Optional[aiohttp.ClientSession] = None):
        if not settings.telegram_bot_token:
            raise TelegramProviderError("TELEGRAM_BOT_TOKEN is not configured", "MISSING_BOT_TOKEN")
        channel_id = normalize_channel_id(settings.telegram_channel_id)
        if not channel_id:
            raise TelegramProviderError("TELEGRAM_CHANNEL_ID is not configured", "MISSING_CHANNEL_ID")

        self.settings = settings
        self.channel_id = channel_id
        self.base_url = f"{settings.telegram_api_base.rstrip('/')}/bot{settings.telegram_bot_token}"
        self._session = session
        logger.info("Telegram notifier initialized")

    async def _post(self, session: aiohttp.ClientSession, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with session.post(f"{self.base_url}/{method}", json=payload) as response:
            if response.status < 200 or response.status >= 300:
                text = await response.text()
                raise TelegramProviderError(f"Telegram API error: {response.status} {text}", "API_ERROR")
            return await response.json()

    async def send_article(self, session: aiohttp.ClientSession, article: ArticleContent) -> None:
        if not article.image or not article.title or not article.content:
            raise TelegramProviderError("Article is missing image, title, or content", "INVALID_ARTICLE")

        payload = {
            "chat_id": self.channel_id,
            "photo": article.image,
            "caption": build_caption(article.title, article.content, self.settings.caption_limit),
            "parse_mode": "MarkdownV2",
        }
        await self._post(session, "sendPhoto", payload)

    @staticmethod
    def skip_reason(article: ArticleContent) -> Optional[str]:
        if not article.image or not article.title or not article.content:
            return "missing image/title/content"
        if not has_ukrainian_letters(f"{article.title} {article.content}"):
            return "non-Ukrainian text"
        return None

    async def deliver(self, articles: List[ArticleContent]) -> Dict[str, int]:
        """
        Send articles to the channel in order.

        Args:
            articles: Finished articles

        Returns:
            Counts of ``sent``, ``skipped`` and ``failed`` articles
        """
        result = {"sent": 0, "skipped": 0, "failed": 0}
        if not articles:
            return result

        if self._session is not None:
            await self._deliver_with(self._session, articles, result)
        else:
            timeout = aiohttp.ClientTimeout(total=self.settings.telegram_timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                await self._deliver_with(session, articles, result)

        logger.info(
            "Telegram delivery complete",
            extra={"sent": result["sent"], "skipped": result["skipped"], "failed": result["failed"]},
        )
        return result

    async def _deliver_with(
        self, session: aiohttp.ClientSession, articles: List[ArticleContent], result: Dict[str, int]
    ) -> None:
        for article in articles:
            reason = self.skip_reason(article)
            if reason:
                result["skipped"] += 1
                logger.warning(f"Skipping article: {reason}", extra={"article_id": article.id, "title": article.title})
                continue
            try:
                await self.send_article(session, article)
                result["sent"] += 1
            except (TelegramProviderError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                result["failed"] += 1
                logger.error(f"Failed to send article to Telegram: {e}", extra={"article_id": article.id})
