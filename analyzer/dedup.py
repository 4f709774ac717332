"""
Embedding-based suppression of recently published stories.

New article titles are embedded together with the titles already published
in the recent window; any new title whose best cosine match reaches the
threshold is treated as a re-telling of a known story and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from llm.openai_provider import DEFAULT_EMBEDDING_MODEL, OpenAIProvider, OpenAIProviderError

from scraper.models import ArticleContent

from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.75


class TitleDeduplicator:
    """Flags and removes near-duplicate titles."""

    def __init__(
        self,
        provider: OpenAIProvider,
        threshold: float = SIMILARITY_THRESHOLD,
        model: str = DEFAULT_EMBEDDING_MODEL,
    ):
        self.provider = provider
        self.threshold = threshold
        self.model = model

    async def find_similar(
        self, new_titles: Sequence[str], existing_titles: Sequence[str]
    ) -> Optional[List[bool]]:
        """Return one verdict per *new* title (True = near duplicate).

        Blank new titles always get False. Returns None when there is nothing
        to compare against or the embedding call fails.
        """
        valid_new = [(i, t) for i, t in enumerate(new_titles) if t and t.strip()]
        valid_existing = [t for t in existing_titles if t and t.strip()]
        if not valid_new or not valid_existing:
            return None

        try:
            new_resp, existing_resp = await asyncio.gather(
                self.provider.create_embedding([t for _, t in valid_new], model=self.model),
                self.provider.create_embedding(valid_existing, model=self.model),
            )
        except OpenAIProviderError as e:
            logger.error(f"Failed to compare titles: {e}", extra={"code": e.code, "status": e.status_code})
            return None

        if len(new_resp.vectors) != len(valid_new) or len(existing_resp.vectors) != len(valid_existing):
            logger.error("Embedding provider returned an unexpected number of vectors")
            return None

        verdicts = [False] * len(new_titles)
        for (index, title), new_vec in zip(valid_new, new_resp.vectors):
            best = max(cosine_similarity(new_vec, vec) for vec in existing_resp.vectors)
            if best >= self.threshold:
                verdicts[index] = True
                logger.info(
                    "Similar title detected",
                    extra={"new_title": title, "max_similarity": round(best, 4), "threshold": self.threshold},
                )

        removed = sum(verdicts)
        logger.info(
            "Title comparison complete",
            extra={"total_titles": len(new_titles), "similar_titles": removed, "retained_titles": len(new_titles) - removed},
        )
        return verdicts

    async def filter_duplicates(
        self, articles: List[ArticleContent], existing_titles: Sequence[str]
    ) -> List[ArticleContent]:
        """Drop articles whose title matches a recently published one.

        Insufficient data or a provider failure means no filtering at all.
        """
        verdicts = await self.find_similar([a.title for a in articles], existing_titles)
        if verdicts is None:
            return list(articles)
        return [article for article, duplicate in zip(articles, verdicts) if not duplicate]
