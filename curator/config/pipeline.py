"""Pipeline run configuration."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from curator.core.config import Config


class PipelineConfig(BaseModel):
    """Per-run pipeline configuration.

    Passed explicitly to ``ContentPipeline.run`` so concurrent runs with
    different settings never interfere.

    Attributes:
        batch_size: Maximum items in flight per source
        max_items_per_source: Cap on items processed per source (None means all)
        score_threshold: Minimum final score to enqueue
        sources: Source names to run, in order (empty means every enabled source)
        source_timeout_seconds: Fetch timeout per source
        use_ai: Blend AI sub-scores into the rule-based score
    """

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(default=10, ge=1, le=100)
    max_items_per_source: int | None = Field(default=None, ge=1)
    score_threshold: int = Field(default=50, ge=0, le=100)
    sources: list[str] = Field(default_factory=list)
    source_timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    use_ai: bool = Field(default=True)

    @classmethod
    def from_config(cls, config: "Config", **overrides: object) -> "PipelineConfig":
        """Build from application settings, applying explicit overrides.

        Args:
            config: Application config
            **overrides: Field values taking precedence over settings

        Returns:
            PipelineConfig instance
        """
        values: dict[str, object] = {
            "batch_size": config.pipeline_batch_size,
            "score_threshold": config.pipeline_score_threshold,
            "source_timeout_seconds": config.pipeline_source_timeout,
            "use_ai": config.pipeline_use_ai and config.ai_enabled,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)


__all__ = ["PipelineConfig"]
