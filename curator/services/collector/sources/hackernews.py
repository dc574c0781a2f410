"""Hacker News source collector.

Collects "Show HN" launches through the Algolia HN search API.
https://hn.algolia.com/api
"""

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from curator.config.sources import HackerNewsConfig
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.transformer import build_item

logger = get_logger(__name__)

HN_SEARCH_URL = "https://hn.algolia.com/api/v1/search_by_date"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"

_SHOW_HN_RE = re.compile(r"^\s*show\s+hn\s*[:\-]\s*", re.IGNORECASE)


class HackerNewsSource(BaseSource[HackerNewsConfig]):
    """Hacker News launch collector.

    Config options:
        tags: Algolia tag filter (default: show_hn)
        limit: Maximum hits to fetch (default: 50)
        min_points: Minimum points (default: 10)
    """

    content_type = ContentType.PROJECT

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> HackerNewsConfig:
        """Build HackerNewsConfig from catalog parameters."""
        return HackerNewsConfig.model_validate(overrides)

    async def _fetch_raw(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "tags": self._config.tags,
            "hitsPerPage": self._config.limit,
        }
        if self._config.query:
            params["query"] = self._config.query

        logger.info("Collecting from Hacker News", tags=self._config.tags)
        response = await self._http_client.get(
            HN_SEARCH_URL, params=params, timeout=self._config.request_timeout
        )
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        return data

    def _records(self, data: Any) -> Iterable[dict[str, Any]]:
        return data.get("hits", [])

    def _transform_record(self, record: dict[str, Any], fetched_at: datetime) -> ContentItem | None:
        points = int(record.get("points") or 0)
        if points < self._config.min_points:
            return None

        story_id = record["objectID"]
        discussion_url = HN_ITEM_URL.format(id=story_id)
        # Text-only posts have no external URL
        url = record.get("url") or discussion_url
        title = _SHOW_HN_RE.sub("", record.get("title") or "")

        return build_item(
            title=title,
            url=url,
            description=record.get("story_text"),
            source=self.name,
            content_type=self.content_type,
            fetched_at=fetched_at,
            metadata={
                "points": points,
                "comments": record.get("num_comments") or 0,
                "owner": record.get("author"),
                "launch_date": record.get("created_at"),
                "hn_id": story_id,
                "hn_url": discussion_url,
            },
        )


__all__ = ["HackerNewsSource", "HN_SEARCH_URL"]
