"""Source collector configuration models.

Defines default settings and configuration for each source type, and the
catalog entry that binds a source name to its type and parameters.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ContentTypeName = Literal["project", "funding", "resource"]


class GitHubConfig(BaseModel):
    """GitHub repository search configuration.

    Attributes:
        query: Search query (GitHub search syntax)
        sort: Sort field (stars, updated, forks)
        per_page: Repositories per request
        min_stars: Minimum stargazers to keep a repository
        request_timeout: HTTP request timeout in seconds
        token: Optional API token for higher rate limits
    """

    query: str = Field(default="stars:>100 created:>2024-01-01")
    sort: str = Field(default="updated", pattern="^(stars|updated|forks)$")
    per_page: int = Field(default=30, ge=1, le=100)
    min_stars: int = Field(default=0, ge=0)
    request_timeout: float = Field(default=15.0, ge=1.0, le=60.0)
    token: str | None = Field(default=None)


class HackerNewsConfig(BaseModel):
    """Hacker News (Algolia search API) configuration.

    Attributes:
        tags: Algolia tag filter (show_hn for launches)
        query: Optional full-text query
        limit: Maximum hits to fetch
        min_points: Minimum points threshold for filtering
        request_timeout: HTTP request timeout in seconds
    """

    tags: str = Field(default="show_hn")
    query: str = Field(default="")
    limit: int = Field(default=50, ge=1, le=100)
    min_points: int = Field(default=10, ge=0)
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


class DevToConfig(BaseModel):
    """dev.to articles API configuration.

    Attributes:
        tags: Tags to fetch articles for (one request per tag)
        per_page: Articles per tag
        top_days: Only articles in the top list of the last N days
        min_reactions: Minimum positive reactions to keep an article
        request_timeout: HTTP request timeout in seconds
        api_key: Optional API key
    """

    tags: list[str] = Field(default_factory=lambda: ["startup", "web3"])
    per_page: int = Field(default=20, ge=1, le=100)
    top_days: int = Field(default=7, ge=1, le=365)
    min_reactions: int = Field(default=5, ge=0)
    request_timeout: float = Field(default=15.0, ge=1.0, le=60.0)
    api_key: str | None = Field(default=None)


class RSSConfig(BaseModel):
    """RSS/Atom feed source configuration.

    Attributes:
        feed_url: URL of the RSS/Atom feed
        name: Display name for the source
        limit: Maximum entries to fetch
        content_type: Content type assigned to every entry
        request_timeout: HTTP request timeout in seconds
    """

    feed_url: str | None = None
    name: str = Field(default="RSS Feed")
    limit: int = Field(default=20, ge=1, le=100)
    content_type: ContentTypeName = Field(default="resource")
    request_timeout: float = Field(default=15.0, ge=1.0, le=60.0)


class ProgramEntry(BaseModel):
    """Inline funding program catalog entry."""

    name: str
    url: str
    description: str = ""
    organization: str | None = None
    amount_min: float | None = None
    amount_max: float | None = None
    deadline: str | None = None
    ecosystem: str | None = None
    tags: list[str] = Field(default_factory=list)


class EcosystemProgramsConfig(BaseModel):
    """Ecosystem grant program catalog configuration.

    Programs come from a JSON document at ``catalog_url`` when set,
    otherwise from the inline ``programs`` list.

    Attributes:
        catalog_url: URL of a JSON list of programs
        programs: Inline program entries
        request_timeout: HTTP request timeout in seconds
    """

    catalog_url: str | None = None
    programs: list[ProgramEntry] = Field(default_factory=list)
    request_timeout: float = Field(default=15.0, ge=1.0, le=60.0)


class SourceDefinition(BaseModel):
    """Source catalog entry.

    Attributes:
        name: Unique source name (used in run configs and as item ``source``)
        type: Source implementation key (github, hackernews, devto, rss, ecosystem_programs)
        enabled: Whether the source runs when no explicit list is given
        params: Parameters passed to the source's ``build_config``
    """

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    enabled: bool = Field(default=True)
    params: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "ContentTypeName",
    "GitHubConfig",
    "HackerNewsConfig",
    "DevToConfig",
    "RSSConfig",
    "ProgramEntry",
    "EcosystemProgramsConfig",
    "SourceDefinition",
]
