"""Configuration models."""

from curator.config.dedup import DEFAULT_TRACKING_PARAMS, DedupConfig
from curator.config.pipeline import PipelineConfig
from curator.config.scoring import (
    CategoryThresholds,
    FitBands,
    ScoringConfig,
    ScoringWeights,
)
from curator.config.sources import (
    DevToConfig,
    EcosystemProgramsConfig,
    GitHubConfig,
    HackerNewsConfig,
    ProgramEntry,
    RSSConfig,
    SourceDefinition,
)

__all__ = [
    "DEFAULT_TRACKING_PARAMS",
    "DedupConfig",
    "PipelineConfig",
    "CategoryThresholds",
    "FitBands",
    "ScoringConfig",
    "ScoringWeights",
    "DevToConfig",
    "EcosystemProgramsConfig",
    "GitHubConfig",
    "HackerNewsConfig",
    "ProgramEntry",
    "RSSConfig",
    "SourceDefinition",
]
