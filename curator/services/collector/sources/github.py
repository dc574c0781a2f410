"""GitHub source collector.

Collects recently created repositories from the GitHub search API as
project candidates.
https://docs.github.com/en/rest/search/search#search-repositories
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from curator.config.sources import GitHubConfig
from curator.core.config import get_config
from curator.core.logging import get_logger
from curator.models.content import ContentType
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.transformer import build_item, parse_datetime

logger = get_logger(__name__)

GITHUB_SEARCH_URL = "https://api.github.com/search/repositories"


class GitHubSource(BaseSource[GitHubConfig]):
    """GitHub repository search collector.

    Config options:
        query: Search query (default: popular repos created since 2024)
        sort: stars, updated or forks
        per_page: Repositories per request (default: 30)
        min_stars: Drop repositories below this star count
    """

    content_type = ContentType.PROJECT

    @classmethod
    def build_config(cls, overrides: dict[str, Any]) -> GitHubConfig:
        """Build GitHubConfig; the token falls back to the GITHUB_TOKEN setting."""
        params = dict(overrides)
        if not params.get("token"):
            params["token"] = get_config().github_token or None
        return GitHubConfig.model_validate(params)

    async def _fetch_raw(self) -> dict[str, Any]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"

        logger.info("Collecting from GitHub", query=self._config.query)
        response = await self._http_client.get(
            GITHUB_SEARCH_URL,
            params={
                "q": self._config.query,
                "sort": self._config.sort,
                "order": "desc",
                "per_page": self._config.per_page,
            },
            headers=headers,
            timeout=self._config.request_timeout,
        )
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        return data

    def _records(self, data: Any) -> Iterable[dict[str, Any]]:
        return data.get("items", [])

    def _transform_record(self, record: dict[str, Any], fetched_at: datetime) -> ContentItem | None:
        stars = int(record.get("stargazers_count") or 0)
        if stars < self._config.min_stars or record.get("fork"):
            return None

        created = parse_datetime(record.get("created_at"))
        owner = record.get("owner") or {}

        return build_item(
            title=record["name"],
            url=record["html_url"],
            description=record.get("description"),
            source=self.name,
            content_type=self.content_type,
            fetched_at=fetched_at,
            metadata={
                "stars": stars,
                "owner": owner.get("login"),
                "language": record.get("language"),
                "launch_date": created,
                "founded_year": created.year if created else None,
                "tags": record.get("topics") or [],
                "full_name": record.get("full_name"),
                "forks": record.get("forks_count"),
            },
        )


__all__ = ["GitHubSource", "GITHUB_SEARCH_URL"]
