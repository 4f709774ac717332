"""
Article rewriting and relevance gate.

Each article gets one chat round trip. The model returns a rewritten title,
a rewritten body and a relevance flag:

- relevant reply: the article continues with the new title and body
- irrelevant reply: the article is dropped
- empty or unparseable reply, or a provider error: the original article is
  kept unchanged and the batch continues
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from llm.openai_provider import DEFAULT_CHAT_MODEL, OpenAIProvider, OpenAIProviderError
from llm.utils import extract_json_object

from scraper.models import ArticleContent

from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
MAX_TOKENS = 2000


class RewriteResult(BaseModel):
    """Structured reply expected from the model."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, description="Rewritten title")
    content: str = Field(..., min_length=1, description="Rewritten body in Telegram Markdown")
    is_relevant: StrictBool = Field(..., alias="isRelevant")


def parse_rewrite(raw: Optional[str]) -> Optional[RewriteResult]:
    """Validate a model reply; None when it is not a usable rewrite."""
    data = extract_json_object(raw)
    if data is None:
        return None
    try:
        result = RewriteResult.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Rewrite reply failed validation: {e.error_count()} errors")
        return None
    if not result.title.strip() or not result.content.strip():
        return None
    return result


class ArticleFormatter:
    """Rewrites articles one at a time with an OpenAI chat model."""

    def __init__(
        self,
        provider: OpenAIProvider,
        model: str = DEFAULT_CHAT_MODEL,
        temperature: float = TEMPERATURE,
        max_tokens: int = MAX_TOKENS,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        logger.info(f"Initialized ArticleFormatter with model: {self.model}")

    async def rewrite_article(self, article: ArticleContent) -> Optional[RewriteResult]:
        """
        Ask the model for a rewrite of one article.

        Args:
            article: Article to rewrite

        Returns:
            RewriteResult, or None when the reply was empty or unparseable

        Raises:
            OpenAIProviderError: the chat request itself failed
        """
        completion = await self.provider.chat(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(article.title, article.content)},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=True,
        )
        if not completion.content.strip():
            logger.warning(f"Empty rewrite reply for {article.link}")
            return None
        return parse_rewrite(completion.content)

    async def format_articles(self, articles: List[ArticleContent]) -> List[ArticleContent]:
        """Rewrite a batch in order, dropping irrelevant articles."""
        formatted: List[ArticleContent] = []
        total = len(articles)

        for i, article in enumerate(articles, start=1):
            logger.info(f"Formatting article {i}/{total}", extra={"original_title": article.title})
            try:
                result = await self.rewrite_article(article)
            except OpenAIProviderError as e:
                logger.error(
                    f"Error formatting article {i}: {e}",
                    extra={"link": article.link, "code": e.code, "status": e.status_code},
                )
                formatted.append(article)
                continue

            if result is None:
                logger.error(f"Could not parse rewrite for article {i}; keeping original", extra={"link": article.link})
                formatted.append(article)
                continue

            if not result.is_relevant:
                logger.info(f"Article {i} was filtered out as irrelevant", extra={"original_title": article.title})
                continue

            formatted.append(article.evolve(title=result.title.strip(), content=result.content.strip()))
            logger.info(f"Successfully formatted article {i}", extra={"new_title": result.title})

        logger.info(f"Formatting complete: {len(formatted)}/{total} articles kept")
        return formatted
