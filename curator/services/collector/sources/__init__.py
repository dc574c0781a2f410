"""Source collectors for content collection.

API Sources:
- GitHub: repository search (projects)
- HackerNews: Algolia search for Show HN launches (projects)
- DevTo: dev.to articles API (resources)

Feed Sources:
- RSS: Generic RSS/Atom feed collector (any content type)

Catalog Sources:
- EcosystemPrograms: curated grant program list (funding)
"""

from curator.services.collector.sources.devto import DevToSource
from curator.services.collector.sources.ecosystem_programs import EcosystemProgramsSource
from curator.services.collector.sources.factory import (
    SOURCE_CLASSES,
    create_source,
    get_all_source_names,
    get_source_class,
)
from curator.services.collector.sources.github import GitHubSource
from curator.services.collector.sources.hackernews import HackerNewsSource
from curator.services.collector.sources.rss import RSSSource

__all__ = [
    # API sources
    "GitHubSource",
    "HackerNewsSource",
    "DevToSource",
    # Feed sources
    "RSSSource",
    # Catalog sources
    "EcosystemProgramsSource",
    # Factory
    "SOURCE_CLASSES",
    "create_source",
    "get_source_class",
    "get_all_source_names",
]
