"""AI-assisted content assessment.

Asks an LLM for relevance, quality and urgency sub-scores (0-10) plus a
short summary and reasoning. Any failure (no provider key, timeout,
transport error, malformed JSON) is raised as AIScoringError so the
scorer can fall back to rule-based scoring.
"""

import asyncio
import json

from curator.core.exceptions import AIScoringError
from curator.core.logging import get_logger
from curator.infrastructure.llm import LLMClient, LLMConfig, LLMError
from curator.models.content import ContentType
from curator.services.collector.base import AIAssessment, ContentItem

logger = get_logger(__name__)

SYSTEM_CONTEXT = (
    "You are an expert content curator for early-stage builders. "
    "Score content on relevance to builders, quality and urgency."
)

TYPE_CRITERIA: dict[ContentType, str] = {
    ContentType.PROJECT: (
        "Prefer early-stage projects: founded 2024 or later, raised less than "
        "$500k, team smaller than 10 people. Penalize established companies."
    ),
    ContentType.FUNDING: (
        "Prefer open programs with clear eligibility, concrete amounts and "
        "deadlines that are still reachable. Closed programs are not urgent."
    ),
    ContentType.RESOURCE: (
        "Prefer practical, technical material a small team can act on. "
        "Penalize marketing copy and generic news."
    ),
}

RESPONSE_SCHEMA = {
    "relevance": "number 0-10",
    "quality": "number 0-10",
    "urgency": "number 0-10",
    "summary": "one or two sentences",
    "reasoning": "why these scores",
    "confidence": "number 0-1",
    "details": "object with any type-specific observations",
}

MAX_FIELD_CHARS = 1500


class AIScorer:
    """LLM-backed assessment of one content item.

    Attributes:
        llm_client: LLM client (injected)
        llm_config: Model, token and timeout settings
        timeout_seconds: Overall bound for one assessment
    """

    def __init__(
        self,
        llm_client: LLMClient,
        llm_config: LLMConfig,
        timeout_seconds: float = 20.0,
    ):
        """Initialize AI scorer.

        Args:
            llm_client: LLM client
            llm_config: LLM configuration
            timeout_seconds: Overall bound for one assessment
        """
        self.llm_client = llm_client
        self.llm_config = llm_config
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, item: ContentItem) -> str:
        """Bounded prompt with the item's fields and type criteria."""
        metadata = json.dumps(item.metadata, sort_keys=True, default=str)[:MAX_FIELD_CHARS]
        return "\n".join(
            [
                SYSTEM_CONTEXT,
                "",
                f"Content type: {item.type.value}",
                f"Criteria: {TYPE_CRITERIA[item.type]}",
                "",
                f"Title: {item.title[:300]}",
                f"URL: {item.url}",
                f"Source: {item.source}",
                f"Description: {item.description[:MAX_FIELD_CHARS]}",
                f"Metadata: {metadata}",
                "",
                "Return a JSON object with exactly these keys:",
                json.dumps(RESPONSE_SCHEMA, indent=2),
            ]
        )

    async def assess(self, item: ContentItem) -> AIAssessment:
        """Assess one item.

        Raises:
            AIScoringError: On timeout, transport failure or malformed output
        """
        prompt = self.build_prompt(item)
        try:
            async with asyncio.timeout(self.timeout_seconds):
                assessment = await self.llm_client.complete_json(
                    config=self.llm_config,
                    prompt=prompt,
                    response_model=AIAssessment,
                )
        except TimeoutError as e:
            raise AIScoringError(
                f"AI scoring timed out after {self.timeout_seconds}s",
                context={"url": item.url},
            ) from e
        except LLMError as e:
            raise AIScoringError(str(e), context={"url": item.url}) from e

        logger.debug(
            "AI assessment complete",
            title=item.title[:50],
            relevance=assessment.relevance,
            quality=assessment.quality,
            urgency=assessment.urgency,
        )
        return assessment


__all__ = ["AIScorer", "TYPE_CRITERIA", "SYSTEM_CONTEXT"]
