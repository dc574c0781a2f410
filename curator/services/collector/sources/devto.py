"""dev.to source collector.

Collects top articles for a set of tags from the public dev.to API.
https://developers.forem.com/api/v1#tag/articles
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from curator.config.sources import DevToConfig
from curator.core.config import get_config
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.transformer import build_item

logger = get_logger(__name__)

DEVTO_ARTICLES_URL = "https://dev.to/api/articles"


class DevToSource(BaseSource[DevToConfig]):
    """dev.to article collector.

    One request per configured tag; articles appearing under several tags
    are kept once, in first-seen order.
    """

    content_type = ContentType.RESOURCE

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> DevToConfig:
        """Build DevToConfig; the API key falls back to the DEVTO_API_KEY setting."""
        params = dict(overrides)
        if not params.get("api_key"):
            params["api_key"] = get_config().devto_api_key or None
        return DevToConfig.model_validate(params)

    async def _fetch_raw(self) -> list[dict[str, Any]]:
        headers = {"api-key": self._config.api_key} if self._config.api_key else {}

        articles: list[dict[str, Any]] = []
        seen: set[int] = set()
        for tag in self._config.tags:
            logger.info("Collecting from dev.to", tag=tag)
            response = await self._http_client.get(
                DEVTO_ARTICLES_URL,
                params={
                    "tag": tag,
                    "top": self._config.top_days,
                    "per_page": self._config.per_page,
                },
                headers=headers,
                timeout=self._config.request_timeout,
            )
            response.raise_for_status()
            for article in response.json():
                article_id = article.get("id")
                if article_id in seen:
                    continue
                seen.add(article_id)
                articles.append(article)
        return articles

    def _records(self, data: Any) -> Iterable[dict[str, Any]]:
        return data

    def _transform_record(self, record: dict[str, Any], fetched_at: datetime) -> ContentItem | None:
        reactions = int(record.get("positive_reactions_count") or 0)
        if reactions < self._config.min_reactions:
            return None

        tags = record.get("tag_list") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]
        user = record.get("user") or {}

        return build_item(
            title=record["title"],
            url=record.get("canonical_url") or record["url"],
            description=record.get("description"),
            source=self.name,
            content_type=self.content_type,
            fetched_at=fetched_at,
            metadata={
                "author": user.get("name") or user.get("username"),
                "resource_type": "article",
                "published_at": record.get("published_at"),
                "reactions": reactions,
                "comments": record.get("comments_count") or 0,
                "reading_time": record.get("reading_time_minutes"),
                "tags": tags,
            },
        )


__all__ = ["DevToSource", "DEVTO_ARTICLES_URL"]
