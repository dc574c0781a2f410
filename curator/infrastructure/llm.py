"""LLM client abstraction using LiteLLM.

This module provides a unified interface for LLM calls across different providers
(Anthropic, OpenAI, etc.) using LiteLLM as the backend. The pipeline only
uses it for structured JSON answers validated against a pydantic model.
"""

import re
from dataclasses import dataclass
from typing import Any, TypeVar

import litellm
from litellm import acompletion
from pydantic import BaseModel, ValidationError

from curator.core.config import get_config
from curator.core.logging import get_logger

logger = get_logger(__name__)

# Configure LiteLLM
litellm.drop_params = True  # Drop unsupported params for each provider

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class LLMConfig:
    """LLM configuration for a specific use case.

    Attributes:
        model: Model identifier (e.g., "openai/gpt-4o-mini")
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature (0-1)
        timeout: Request timeout in seconds
    """

    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 60


@dataclass
class LLMResponse:
    """Standardized LLM response.

    Attributes:
        content: Generated text content
        model: Model used for generation
        usage: Token usage statistics
        raw_response: Raw response from provider
    """

    content: str
    model: str
    usage: dict[str, int]
    raw_response: Any = None


class LLMError(Exception):
    """LLM operation failed."""

    pass


class LLMResponseFormatError(LLMError):
    """LLM answered, but not with the requested JSON structure."""

    pass


class LLMClient:
    """Unified LLM client using LiteLLM.

    Model naming convention:
        - Anthropic: "anthropic/claude-3-5-haiku-20241022"
        - OpenAI: "openai/gpt-4o-mini"

    Example:
        >>> client = LLMClient()
        >>> scores = await client.complete_json(
        ...     config=LLMConfig(model="openai/gpt-4o-mini"),
        ...     prompt="Rate this project...",
        ...     response_model=AIAssessment,
        ... )
    """

    def __init__(self) -> None:
        """Initialize LLM client with API keys from settings."""
        config = get_config()
        if config.anthropic_api_key:
            litellm.api_key = config.anthropic_api_key
        if config.openai_api_key:
            litellm.openai_key = config.openai_api_key

        logger.info("LLMClient initialized")

    async def complete(
        self,
        config: LLMConfig,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion from LLM.

        Args:
            config: LLM configuration
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters passed to the model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        try:
            logger.debug(
                "LLM request",
                model=config.model,
                max_tokens=config.max_tokens,
                message_count=len(messages),
            )

            response = await acompletion(
                model=config.model,
                messages=messages,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                timeout=config.timeout,
                **kwargs,
            )

            content = response.choices[0].message.content or ""

            usage = {}
            if response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens or 0,
                    "completion_tokens": response.usage.completion_tokens or 0,
                    "total_tokens": response.usage.total_tokens or 0,
                }

            logger.debug(
                "LLM response",
                model=response.model,
                content_length=len(content),
                usage=usage,
            )

            return LLMResponse(
                content=content,
                model=response.model or config.model,
                usage=usage,
                raw_response=response,
            )

        except Exception as e:
            logger.error(
                "LLM request failed",
                model=config.model,
                error=str(e),
                exc_info=True,
            )
            raise LLMError(f"LLM request failed: {e}") from e

    async def complete_json(
        self,
        config: LLMConfig,
        prompt: str,
        response_model: type[ModelT],
    ) -> ModelT:
        """Single-turn completion parsed into a pydantic model.

        Args:
            config: LLM configuration
            prompt: User prompt asking for a JSON object
            response_model: Model the JSON answer must satisfy

        Returns:
            Validated response_model instance

        Raises:
            LLMError: If the request fails
            LLMResponseFormatError: If the answer is not valid JSON for the model
        """
        response = await self.complete(
            config=config,
            messages=[
                {"role": "system", "content": "Respond with a single JSON object only."},
                {"role": "user", "content": prompt},
            ],
        )
        return parse_json_response(response.content, response_model)


def parse_json_response(content: str, response_model: type[ModelT]) -> ModelT:
    """Validate an LLM answer against a model, tolerating markdown fences.

    Raises:
        LLMResponseFormatError: If the content is not valid JSON for the model
    """
    text = _FENCE_RE.sub("", content.strip())
    try:
        return response_model.model_validate_json(text)
    except ValidationError as e:
        raise LLMResponseFormatError(
            f"Malformed {response_model.__name__} response: {e.error_count()} errors"
        ) from e


__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "LLMError",
    "LLMResponseFormatError",
    "parse_json_response",
]
