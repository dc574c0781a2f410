"""Scoring configuration models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from curator.config.validators import normalize_string_list, validate_weights_sum

DEFAULT_KEYWORDS: list[str] = [
    "blockchain", "ai", "ml", "web3", "defi", "nft", "dao",
    "startup", "founder", "funding", "seed", "series",
    "developer", "builder", "open source", "github",
    "accelerator", "incubator", "venture", "investment",
    "saas", "platform", "api", "framework", "tool",
    "react", "nextjs", "typescript", "python", "rust",
]  # fmt: skip

DEFAULT_QUALITY_INDICATORS: list[str] = [
    "production", "enterprise", "customers", "revenue",
    "team", "backed", "yc", "techstars", "funded",
]  # fmt: skip


class ScoringWeights(BaseModel):
    """Maximum points for each rule-based factor.

    Factor maxima must sum to 100 so the rule-based score is already on
    the 0-100 scale.
    """

    quality: int = Field(default=30, ge=0, le=100)
    relevance: int = Field(default=30, ge=0, le=100)
    freshness: int = Field(default=20, ge=0, le=100)
    completeness: int = Field(default=20, ge=0, le=100)

    @model_validator(mode="after")
    def check_weights_sum(self) -> "ScoringWeights":
        """Validate that factor maxima sum to 100."""
        validate_weights_sum(
            {
                "quality": self.quality,
                "relevance": self.relevance,
                "freshness": self.freshness,
                "completeness": self.completeness,
            },
            tolerance=0,
            expected_sum=100,
        )
        return self


class CategoryThresholds(BaseModel):
    """Score cut-offs for category labels.

    Attributes:
        high_fit: Minimum score for "high-fit"
        medium_fit: Minimum score for "medium-fit"
    """

    high_fit: int = Field(default=80, ge=0, le=100)
    medium_fit: int = Field(default=50, ge=0, le=100)

    @model_validator(mode="after")
    def check_order(self) -> "CategoryThresholds":
        """Validate that high_fit is not below medium_fit."""
        if self.high_fit < self.medium_fit:
            raise ValueError(
                f"high_fit ({self.high_fit}) must be >= medium_fit ({self.medium_fit})"
            )
        return self

    def label(self, score: int) -> str:
        """Bucket a final score into its category label."""
        if score >= self.high_fit:
            return "high-fit"
        if score >= self.medium_fit:
            return "medium-fit"
        return "low-fit"


class FitBands(BaseModel):
    """Type-specific target bands for the fit adjustment.

    Attributes:
        max_team_size: Largest team still considered early-stage
        max_funding_raised: Largest raise (USD) still considered early-stage
        min_founded_year: Earliest founding year that earns the bonus
        deadline_window_days: Funding deadlines closer than this are urgent
        bonus: Points added per satisfied band
        penalty: Points removed per violated band
    """

    max_team_size: int = Field(default=10, ge=1)
    max_funding_raised: float = Field(default=500_000, ge=0)
    min_founded_year: int = Field(default=2024, ge=1990)
    deadline_window_days: int = Field(default=60, ge=1)
    bonus: int = Field(default=5, ge=0, le=20)
    penalty: int = Field(default=10, ge=0, le=50)


class ScoringConfig(BaseModel):
    """Configuration for content scoring.

    All fields have defaults - can be used without any configuration.
    """

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    categories: CategoryThresholds = Field(default_factory=CategoryThresholds)
    fit_bands: FitBands = Field(default_factory=FitBands)

    keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    quality_indicators: list[str] = Field(
        default_factory=lambda: list(DEFAULT_QUALITY_INDICATORS)
    )
    min_keyword_matches: int = Field(
        default=2, ge=0, description="Keyword matches below this earn no relevance"
    )
    points_per_keyword: int = Field(default=3, ge=1, le=30)
    high_star_count: int = Field(
        default=100, ge=0, description="Stars above this count as traction metrics"
    )

    # AI blending
    ai_weight: float = Field(
        default=0.4, ge=0.0, le=1.0, description="Share of the final score from AI"
    )

    @field_validator("keywords", "quality_indicators", mode="before")
    @classmethod
    def normalize_terms(cls, v: Any) -> list[str]:
        """Lower-case and strip keyword lists."""
        return normalize_string_list(v)


__all__ = [
    "DEFAULT_KEYWORDS",
    "DEFAULT_QUALITY_INDICATORS",
    "ScoringWeights",
    "CategoryThresholds",
    "FitBands",
    "ScoringConfig",
]
