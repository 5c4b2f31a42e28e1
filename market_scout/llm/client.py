"""LLM client for OpenAI-compatible chat completion endpoints."""

from typing import Any

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from market_scout.config.settings import OpenAIConfig, get_settings

logger = structlog.get_logger()


class CompletionResult(BaseModel):
    """Result from an LLM completion call."""

    content: str = Field(..., description="The generated content")
    model: str = Field(..., description="Model that generated the response")
    prompt_tokens: int = Field(default=0, description="Number of prompt tokens")
    completion_tokens: int = Field(default=0, description="Number of completion tokens")
    finish_reason: str | None = Field(default=None, description="Why generation stopped")

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.prompt_tokens + self.completion_tokens


class LLMClient:
    """Client for making chat completion calls."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        config: OpenAIConfig | None = None,
    ) -> None:
        """Initialize the LLM client.

        Args:
            api_key: API key for the endpoint. If None, uses settings.
            base_url: Base URL for the API. If None, uses settings.
            config: Full model configuration. If None, uses settings.openai.
        """
        self._config = config or get_settings().openai
        self._api_key = api_key if api_key is not None else self._config.api_key.get_secret_value()
        self._base_url = base_url if base_url is not None else self._config.base_url

        self._client: AsyncOpenAI | None = None

    @property
    def base_url(self) -> str:
        """Get the base URL."""
        return self._base_url

    @property
    def model(self) -> str:
        """Default model for completions."""
        return self._config.model

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the async OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._config.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> CompletionResult:
        """Make a completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier. Defaults to the configured model.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional arguments passed to the API.

        Returns:
            CompletionResult with the generated content.
        """
        client = self._get_client()
        selected = model or self._config.model

        params: dict[str, Any] = {
            "model": selected,
            "messages": messages,
            "temperature": self._config.temperature if temperature is None else temperature,
            "max_tokens": self._config.max_tokens if max_tokens is None else max_tokens,
        }
        params.update(kwargs)

        logger.debug("Making completion request", model=selected)

        response = await client.chat.completions.create(**params)

        if not response.choices:
            raise ValueError(
                f"Model {selected} returned empty choices "
                f"(finish_reason may indicate content filtering)"
            )
        choice = response.choices[0]
        usage = response.usage

        return CompletionResult(
            content=choice.message.content or "",
            model=selected,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            finish_reason=choice.finish_reason,
        )

    async def close(self) -> None:
        """Close the client connection."""
        if self._client is not None:
            await self._client.close()
            self._client = None
