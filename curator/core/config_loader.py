"""Configuration loader for global defaults and the source catalog.

This module loads YAML configuration from the project ``config/`` directory:
- Global defaults (scoring, dedup)
- Source catalog (which sources exist, their type and parameters)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from curator.config import DedupConfig, ScoringConfig, SourceDefinition
from curator.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from curator.core.logging import get_logger

logger = get_logger(__name__)

# Base config directory (project root/config)
_CONFIG_BASE_DIR = Path(__file__).parent.parent.parent / "config"


# =============================================================================
# Global Config Loaders (Module-level cached functions)
# =============================================================================


@lru_cache(maxsize=1)
def load_defaults() -> dict[str, Any]:
    """Load global defaults from config/defaults.yaml.

    Returns:
        Dictionary containing default values for scoring and dedup.

    Raises:
        ConfigError: If the file doesn't exist or is invalid YAML.
    """
    defaults_path = _CONFIG_BASE_DIR / "defaults.yaml"
    return _load_yaml_file(defaults_path, "defaults")


@lru_cache(maxsize=1)
def load_scoring_config() -> ScoringConfig:
    """Load the ``scoring`` section of defaults.yaml as a ScoringConfig.

    Raises:
        ConfigValidationError: If the section fails validation.
    """
    return _validate_section(ScoringConfig, load_defaults().get("scoring"), "scoring")


@lru_cache(maxsize=1)
def load_dedup_config() -> DedupConfig:
    """Load the ``dedup`` section of defaults.yaml as a DedupConfig.

    Raises:
        ConfigValidationError: If the section fails validation.
    """
    return _validate_section(DedupConfig, load_defaults().get("dedup"), "dedup")


@lru_cache(maxsize=1)
def load_source_catalog() -> dict[str, SourceDefinition]:
    """Load the source catalog from config/sources.yaml.

    Returns:
        Mapping of source name to definition, in file order.

    Raises:
        ConfigError: If the file is missing, invalid, or names a source twice.
    """
    raw = _load_yaml_file(_CONFIG_BASE_DIR / "sources.yaml", "sources")
    entries = raw.get("sources") or []
    if not isinstance(entries, list):
        raise ConfigValidationError(
            field="sources", value=type(entries).__name__, reason="must be a list"
        )

    catalog: dict[str, SourceDefinition] = {}
    for entry in entries:
        definition = _validate_section(SourceDefinition, entry, "sources")
        if definition.name in catalog:
            raise ConfigValidationError(
                field="sources", value=definition.name, reason="duplicate source name"
            )
        catalog[definition.name] = definition

    logger.debug("Loaded source catalog", count=len(catalog))
    return catalog


def get_source_definition(name: str) -> SourceDefinition:
    """Look up one source in the catalog.

    Raises:
        ConfigNotFoundError: If the catalog has no source with that name.
    """
    catalog = load_source_catalog()
    if name not in catalog:
        raise ConfigNotFoundError(f"sources.{name}")
    return catalog[name]


def _validate_section(model: type[Any], raw: Any, name: str) -> Any:
    """Validate a raw YAML section against a pydantic model.

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        return model.model_validate(raw or {})
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(loc_part) for loc_part in error["loc"])
            error_messages.append(f"{loc}: {error['msg']}")
        logger.error("Config validation failed", section=name, errors=error_messages)
        raise ConfigValidationError(
            f"Invalid configuration for {name}:\n" + "\n".join(error_messages)
        ) from e


def _load_yaml_file(path: Path, name: str) -> dict[str, Any]:
    """Load a YAML file from disk.

    Args:
        path: Path to the YAML file.
        name: Human-readable name for error messages.

    Returns:
        Parsed YAML content as dictionary.

    Raises:
        ConfigError: If file doesn't exist or parsing fails.
    """
    if not path.exists():
        logger.error("Config file not found", name=name, path=str(path))
        raise ConfigNotFoundError(str(path))

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)

        if not isinstance(content, dict):
            raise ConfigError(f"Config file must contain a YAML object: {path}", str(path))

        logger.debug("Loaded config file", name=name, path=str(path))
        return content

    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", name=name, path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}", str(path)) from e


def clear_global_config_cache() -> None:
    """Clear all cached global configurations.

    Call this if config files are modified at runtime and need to be reloaded.
    """
    load_defaults.cache_clear()
    load_scoring_config.cache_clear()
    load_dedup_config.cache_clear()
    load_source_catalog.cache_clear()
    logger.info("Global config cache cleared")


__all__ = [
    "load_defaults",
    "load_scoring_config",
    "load_dedup_config",
    "load_source_catalog",
    "get_source_definition",
    "clear_global_config_cache",
]
