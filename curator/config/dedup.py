"""Deduplication configuration models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from curator.config.validators import normalize_string_list

DEFAULT_TRACKING_PARAMS: list[str] = [
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "ref",
    "ref_src",
    "fbclid",
    "gclid",
    "mc_cid",
    "mc_eid",
]


class DedupConfig(BaseModel):
    """Configuration for content deduplication.

    Attributes:
        similarity_threshold: Fuzzy similarity at or above which an item is a duplicate
        title_weight: Share of title similarity when descriptions are compared too
        compare_description: Blend description similarity when both sides have one
        tracking_params: Query parameters stripped during URL normalization
        tracking_prefixes: Query parameter prefixes stripped during URL normalization
        candidate_limit: Most recent records per table considered for fuzzy matching
    """

    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    title_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    compare_description: bool = Field(default=True)
    tracking_params: list[str] = Field(default_factory=lambda: list(DEFAULT_TRACKING_PARAMS))
    tracking_prefixes: list[str] = Field(default_factory=lambda: ["utm_"])
    candidate_limit: int = Field(default=500, ge=1, le=10_000)

    @field_validator("tracking_params", "tracking_prefixes", mode="before")
    @classmethod
    def normalize_params(cls, v: Any) -> list[str]:
        """Lower-case parameter names."""
        return normalize_string_list(v)


__all__ = ["DEFAULT_TRACKING_PARAMS", "DedupConfig"]
