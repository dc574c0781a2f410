"""Source factory for catalog-driven source instantiation.

Source names come from ``config/sources.yaml``; each catalog entry names
an implementation type and the parameters passed to that type's
``build_config``.
"""

from typing import Any

from pydantic import ValidationError

from curator.core.config_loader import get_source_definition, load_source_catalog
from curator.core.exceptions import ConfigValidationError
from curator.core.logging import get_logger
from curator.infrastructure.http_client import HTTPClient
from curator.services.collector.base import BaseSource
from curator.services.collector.sources.devto import DevToSource
from curator.services.collector.sources.ecosystem_programs import EcosystemProgramsSource
from curator.services.collector.sources.github import GitHubSource
from curator.services.collector.sources.hackernews import HackerNewsSource
from curator.services.collector.sources.rss import RSSSource

logger = get_logger(__name__)

# Implementation type to class mapping
SOURCE_CLASSES: dict[str, type[BaseSource[Any]]] = {
    "github": GitHubSource,
    "hackernews": HackerNewsSource,
    "devto": DevToSource,
    "rss": RSSSource,
    "ecosystem_programs": EcosystemProgramsSource,
}


def get_source_class(source_type: str) -> type[BaseSource[Any]] | None:
    """Get the source class for an implementation type.

    Args:
        source_type: Implementation type (e.g., "github", "rss")

    Returns:
        Source class or None if the type is unknown
    """
    return SOURCE_CLASSES.get(source_type)


def create_source(
    source_name: str,
    overrides: dict[str, Any] | None = None,
    http_client: HTTPClient | None = None,
) -> BaseSource[Any]:
    """Create a source instance from its catalog name.

    Args:
        source_name: Catalog name (e.g., "github", "yc_blog")
        overrides: Parameters taking precedence over the catalog's
        http_client: Shared HTTP client for connection reuse

    Returns:
        Configured source instance

    Raises:
        ConfigNotFoundError: If the name is not in the catalog
        ConfigValidationError: If the type is unknown or parameters are invalid
    """
    definition = get_source_definition(source_name)
    source_class = get_source_class(definition.type)
    if source_class is None:
        raise ConfigValidationError(
            field=f"sources.{source_name}.type",
            value=definition.type,
            reason=f"unknown source type (known: {', '.join(SOURCE_CLASSES)})",
        )

    params = {**definition.params, **(overrides or {})}
    try:
        config = source_class.build_config(params)
    except (ValidationError, ValueError) as e:
        raise ConfigValidationError(
            field=f"sources.{source_name}.params",
            value=params,
            reason=str(e),
        ) from e

    logger.debug("Source created", source=source_name, type=definition.type)
    return source_class(config=config, name=source_name, http_client=http_client)


def get_all_source_names(enabled_only: bool = False) -> list[str]:
    """Catalog source names in catalog order.

    Args:
        enabled_only: Only return enabled sources

    Returns:
        List of source names
    """
    return [
        name
        for name, definition in load_source_catalog().items()
        if definition.enabled or not enabled_only
    ]


__all__ = [
    "create_source",
    "get_source_class",
    "get_all_source_names",
    "SOURCE_CLASSES",
]
