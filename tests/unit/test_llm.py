"""Tests for the LLM client and extractor."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from market_scout.config.settings import OpenAIConfig
from market_scout.core.types import AgentState, Session
from market_scout.llm.client import CompletionResult, LLMClient
from market_scout.llm.exceptions import MalformedOutputError


def _config() -> OpenAIConfig:
    return OpenAIConfig(_env_file=None, api_key="test-key", model="test-model")


def _mock_response(content: str | None = "{}", choices: bool = True) -> MagicMock:
    mock_response = MagicMock()
    mock_choice = MagicMock()
    mock_choice.message.content = content
    mock_choice.finish_reason = "stop"
    mock_response.choices = [mock_choice] if choices else []
    mock_response.usage.prompt_tokens = 10
    mock_response.usage.completion_tokens = 20
    return mock_response


class TestCompletionResult:
    def test_total_tokens(self) -> None:
        result = CompletionResult(content="x", model="m", prompt_tokens=3, completion_tokens=4)
        assert result.total_tokens == 7


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_complete_basic(self) -> None:
        with patch("market_scout.llm.client.AsyncOpenAI") as mock_openai:
            mock_instance = AsyncMock()
            mock_instance.chat.completions.create = AsyncMock(return_value=_mock_response("Test"))
            mock_openai.return_value = mock_instance

            client = LLMClient(config=_config())
            result = await client.complete(messages=[{"role": "user", "content": "Hello"}])

            assert result.content == "Test"
            assert result.model == "test-model"
            assert result.prompt_tokens == 10
            assert result.completion_tokens == 20

            kwargs = mock_instance.chat.completions.create.call_args.kwargs
            assert kwargs["temperature"] == 0.2
            assert kwargs["max_tokens"] == 2048
            assert mock_openai.call_args.kwargs["max_retries"] == 0

    @pytest.mark.asyncio
    async def test_overrides(self) -> None:
        with patch("market_scout.llm.client.AsyncOpenAI") as mock_openai:
            mock_instance = AsyncMock()
            mock_instance.chat.completions.create = AsyncMock(return_value=_mock_response())
            mock_openai.return_value = mock_instance

            client = LLMClient(config=_config())
            result = await client.complete(
                messages=[{"role": "user", "content": "Hi"}],
                model="other-model",
                temperature=0.0,
            )

            kwargs = mock_instance.chat.completions.create.call_args.kwargs
            assert kwargs["model"] == "other-model"
            assert kwargs["temperature"] == 0.0
            assert result.model == "other-model"

    @pytest.mark.asyncio
    async def test_empty_choices(self) -> None:
        with patch("market_scout.llm.client.AsyncOpenAI") as mock_openai:
            mock_instance = AsyncMock()
            mock_instance.chat.completions.create = AsyncMock(
                return_value=_mock_response(choices=False)
            )
            mock_openai.return_value = mock_instance

            client = LLMClient(config=_config())
            with pytest.raises(ValueError, match="empty choices"):
                await client.complete(messages=[{"role": "user", "content": "Hi"}])

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        with patch("market_scout.llm.client.AsyncOpenAI") as mock_openai:
            mock_instance = AsyncMock()
            mock_instance.chat.completions.create = AsyncMock(return_value=_mock_response())
            mock_openai.return_value = mock_instance

            client = LLMClient(config=_config())
            await client.complete(messages=[{"role": "user", "content": "Hi"}])
            await client.close()

            mock_instance.close.assert_awaited_once()


class TestExtractor:
    def _client(self, content: str) -> AsyncMock:
        client = AsyncMock()
        client.complete.return_value = CompletionResult(content=content, model="test-model")
        return client

    @pytest.mark.asyncio
    async def test_extract(self) -> None:
        from market_scout.llm.extractor import Extractor

        client = self._client('{"questions": ["Max budget?"]}')
        extractor = Extractor(client=client)
        session = Session(id="s", state=AgentState.CAPTURE)

        response = await extractor.extract(session, "I want a Boxster")

        assert response.questions == ["Max budget?"]
        messages = client.complete.call_args.args[0]
        assert messages[0]["role"] == "system"
        assert "S1_CAPTURE" in messages[1]["content"]
        assert "I want a Boxster" in messages[1]["content"]

    @pytest.mark.asyncio
    async def test_malformed_output_raises(self) -> None:
        from market_scout.llm.extractor import Extractor

        extractor = Extractor(client=self._client("Sorry, I can't help with that."))
        with pytest.raises(MalformedOutputError):
            await extractor.extract(Session(id="s"), "hi")
