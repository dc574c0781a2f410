"""RSS/Atom feed source collector.

Generic collector for RSS and Atom feeds, parsed with feedparser. Each
catalog entry decides which content type its entries become, so the same
collector serves news feeds and funding announcement feeds.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import feedparser

from curator.config.sources import RSSConfig
from curator.core.exceptions import SourceFetchError
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.transformer import build_item

logger = get_logger(__name__)

_DATE_FIELDS = ("published_parsed", "updated_parsed", "created_parsed")


class RSSSource(BaseSource[RSSConfig]):
    """RSS/Atom feed source collector.

    Config options:
        feed_url: URL of the RSS/Atom feed
        limit: Maximum entries to fetch (default: 20)
        name: Display name for the source
        content_type: project, funding or resource (default: resource)
    """

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> RSSConfig:
        """Build RSSConfig from catalog parameters.

        Raises:
            ValueError: If no feed_url is configured
        """
        config = RSSConfig.model_validate(overrides)
        if not config.feed_url:
            raise ValueError("RSS source requires feed_url")
        return config

    @property
    def item_type(self) -> ContentType:
        """Content type assigned to every entry of this feed."""
        return ContentType(self._config.content_type)

    async def _fetch_raw(self) -> Any:
        feed_url = self._config.feed_url or ""
        logger.info("Collecting from RSS feed", feed_url=feed_url, source=self.name)

        response = await self._http_client.get(feed_url, timeout=self._config.request_timeout)
        response.raise_for_status()

        feed = feedparser.parse(response.text)
        if feed.bozo and feed.bozo_exception:
            if not feed.entries:
                raise SourceFetchError(self.name, f"unparseable feed: {feed.bozo_exception}")
            logger.warning(
                "Feed parsing had issues",
                feed_url=feed_url,
                error=str(feed.bozo_exception),
            )
        return feed

    def _records(self, data: Any) -> Iterable[Any]:
        return data.entries[: self._config.limit]

    def _transform_record(self, entry: Any, fetched_at: datetime) -> ContentItem | None:
        # Prefer link, fall back to id
        url = entry.get("link") or entry.get("id")

        content = None
        if entry.get("content"):
            # Atom feeds carry content as a list
            content = entry.content[0].get("value")
        content = content or entry.get("summary") or entry.get("description")

        published = _entry_date(entry)
        author = entry.get("author") or entry.get("dc_creator")
        tags = [tag.get("term") for tag in entry.get("tags", []) if tag.get("term")]

        return build_item(
            title=entry.get("title"),
            url=url,
            description=content,
            source=self.name,
            content_type=self.item_type,
            fetched_at=fetched_at,
            metadata=self._metadata(published, author, tags),
        )

    def _metadata(
        self, published: datetime | None, author: str | None, tags: list[str]
    ) -> dict[str, Any]:
        meta: dict[str, Any] = {"tags": tags, "feed": self._config.name}
        if self.item_type == ContentType.RESOURCE:
            meta.update(author=author, resource_type="news", published_at=published)
        elif self.item_type == ContentType.PROJECT:
            meta.update(owner=author, launch_date=published)
        else:
            meta.update(organization=author, published_at=published)
        return meta


def _entry_date(entry: Any) -> datetime | None:
    # feedparser normalizes dates to UTC struct_time
    for field in _DATE_FIELDS:
        parsed = entry.get(field)
        if parsed:
            return datetime(*parsed[:6], tzinfo=UTC)
    return None


__all__ = ["RSSSource"]
