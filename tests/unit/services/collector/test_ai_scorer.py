"""Unit tests for AIScorer."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from curator.core.exceptions import AIScoringError
from curator.infrastructure.llm import LLMClient, LLMConfig, LLMError, LLMResponseFormatError
from curator.models.content import ContentType
from curator.services.collector.ai_scorer import TYPE_CRITERIA, AIScorer
from curator.services.collector.base import AIAssessment


@pytest.fixture
def llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = MagicMock(spec=LLMClient)
    client.complete_json = AsyncMock()
    return client


@pytest.fixture
def ai_scorer(llm_client) -> AIScorer:
    """Create AI scorer with a short timeout."""
    return AIScorer(llm_client, LLMConfig(model="test/model", temperature=0.2), timeout_seconds=1)


class TestBuildPrompt:
    """Tests for prompt construction."""

    def test_contains_item_and_criteria(self, ai_scorer, make_item):
        """Test that the prompt carries the item fields and type criteria."""
        item = make_item(content_type=ContentType.FUNDING, metadata={"organization": "DAO Fund"})

        prompt = ai_scorer.build_prompt(item)

        assert item.title in prompt
        assert item.url in prompt
        assert TYPE_CRITERIA[ContentType.FUNDING] in prompt
        assert "DAO Fund" in prompt
        assert '"urgency"' in prompt

    def test_bounded(self, ai_scorer, make_item):
        """Test that very long descriptions are truncated."""
        prompt = ai_scorer.build_prompt(make_item(description="x" * 50_000))
        assert len(prompt) < 6000


class TestAssess:
    """Tests for assess."""

    @pytest.mark.asyncio
    async def test_success(self, ai_scorer, llm_client, make_item):
        """Test a valid structured answer."""
        expected = AIAssessment(relevance=8, quality=7, urgency=6, summary="Solid")
        llm_client.complete_json.return_value = expected

        assessment = await ai_scorer.assess(make_item())

        assert assessment == expected
        call = llm_client.complete_json.call_args.kwargs
        assert call["response_model"] is AIAssessment
        assert call["config"].model == "test/model"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [LLMError("connection reset"), LLMResponseFormatError("bad json")]
    )
    async def test_llm_errors(self, ai_scorer, llm_client, make_item, error):
        """Test that client errors become AIScoringError."""
        llm_client.complete_json.side_effect = error

        with pytest.raises(AIScoringError):
            await ai_scorer.assess(make_item())

    @pytest.mark.asyncio
    async def test_timeout(self, llm_client, make_item):
        """Test that slow answers time out."""

        async def hang(**kwargs):
            await asyncio.sleep(5)

        llm_client.complete_json.side_effect = hang
        scorer = AIScorer(llm_client, LLMConfig(model="test/model"), timeout_seconds=0.01)

        with pytest.raises(AIScoringError, match="timed out"):
            await scorer.assess(make_item())
