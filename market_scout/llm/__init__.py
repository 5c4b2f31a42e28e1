"""LLM integration layer for structured extraction."""

from market_scout.llm.client import CompletionResult, LLMClient
from market_scout.llm.exceptions import LLMError, MalformedOutputError

__all__ = [
    "CompletionResult",
    "LLMClient",
    "LLMError",
    "MalformedOutputError",
]
