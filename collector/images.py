"""
Image reconciliation through the external image service.

Persisted articles with an image are posted as ``[{id, image}]``. Each result
item that succeeded and carries a replacement image is written back to
storage, then the submitted articles are re-read so callers get the stored
values. A non-2xx reply fails the whole step.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scraper.models import ArticleContent

from .database import STORAGE_ERRORS, ArticlesRepository

logger = logging.getLogger(__name__)


class ImageReconciliationError(Exception):
    """The image service could not be reached or answered with an error status."""


class ImageUpdateData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    article_id: Optional[int] = Field(default=None, alias="articleId")
    old_image: Optional[str] = Field(default=None, alias="oldImage")
    new_image: Optional[str] = Field(default=None, alias="newImage")
    saved_path: Optional[str] = Field(default=None, alias="savedPath")


class ImageUpdateResult(BaseModel):
    id: int
    success: bool
    error: Optional[str] = None
    data: Optional[ImageUpdateData] = None


class ImageUpdateSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0


class ImageUpdateResponse(BaseModel):
    success: bool
    message: str = ""
    summary: ImageUpdateSummary = Field(default_factory=ImageUpdateSummary)
    results: List[ImageUpdateResult] = Field(default_factory=list)


class ImageReconciler:
    """Replaces article images via the image service and persists the result."""

    def __init__(
        self,
        repository: ArticlesRepository,
        api_url: Optional[str],
        api_token: Optional[str] = None,
        timeout_seconds: float = 60.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.repository = repository
        self.api_url = api_url
        self.api_token = api_token
        self.timeout_seconds = timeout_seconds
        self._session = session

    async def _post(self, payload: List[Dict[str, Any]]) -> ImageUpdateResponse:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        async def send(session: aiohttp.ClientSession) -> Any:
            async with session.post(self.api_url, json=payload, headers=headers) as response:
                if response.status < 200 or response.status >= 300:
                    text = await response.text()
                    raise ImageReconciliationError(f"Image API error: {response.status} - {text}")
                return await response.json()

        try:
            if self._session is not None:
                body = await send(self._session)
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    body = await send(session)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ImageReconciliationError(f"Image API request failed: {e}") from e

        try:
            return ImageUpdateResponse.model_validate(body)
        except ValidationError as e:
            raise ImageReconciliationError(f"Unexpected image API response: {e}") from e

    async def reconcile(self, articles: List[ArticleContent]) -> List[ArticleContent]:
        """
        Run one reconciliation batch.

        Args:
            articles: Articles as returned by storage

        Returns:
            The re-read articles when at least one image was updated, otherwise
            the input unchanged

        Raises:
            ImageReconciliationError: transport failure, non-2xx status or a
                failed re-read from storage
        """
        if not self.api_url:
            logger.debug("Image API not configured; skipping reconciliation")
            return articles

        candidates = [a for a in articles if a.is_persisted and a.image]
        if not candidates:
            logger.info("No persisted articles with images to reconcile")
            return articles

        payload = [{"id": a.id, "image": a.image} for a in candidates]
        logger.info(f"Submitting {len(payload)} images for reconciliation")
        response = await self._post(payload)
        if not response.success:
            logger.warning(f"Image API reported failure: {response.message}")

        updated_ids: List[int] = []
        for item in response.results:
            new_image = item.data.new_image if item.data else None
            if not item.success or not new_image:
                logger.warning(
                    "Image update failed for article",
                    extra={"article_id": item.id, "error": item.error or "no replacement image"},
                )
                continue
            try:
                if await self.repository.update_article_image(item.id, new_image):
                    updated_ids.append(item.id)
                else:
                    logger.warning("No stored article to update", extra={"article_id": item.id})
            except STORAGE_ERRORS as e:
                logger.error(f"Failed to store new image: {e}", extra={"article_id": item.id})

        logger.info(
            "Image reconciliation complete",
            extra={
                "total": response.summary.total,
                "succeeded": response.summary.succeeded,
                "failed": response.summary.failed,
                "updated": len(updated_ids),
            },
        )
        if not updated_ids:
            return articles

        try:
            return await self.repository.get_articles_by_ids([a.id for a in candidates])
        except STORAGE_ERRORS as e:
            raise ImageReconciliationError(f"Failed to re-read reconciled articles: {e}") from e
