"""Extraction collaborator: turns free text into a validated model response."""

from __future__ import annotations

import structlog

from market_scout.agent.patch import ModelResponse, parse_model_output
from market_scout.agent.prompts import build_extraction_messages
from market_scout.core.types import Session
from market_scout.llm.client import LLMClient
from market_scout.llm.exceptions import MalformedOutputError

logger = structlog.get_logger()


class Extractor:
    """Calls the extraction model and validates its output.

    Output is untrusted: anything that is not a schema-valid JSON object
    raises :class:`MalformedOutputError` and must not be merged.
    """

    def __init__(self, client: LLMClient | None = None) -> None:
        self._client = client or LLMClient()

    async def extract(self, session: Session, message: str) -> ModelResponse:
        """Extract a structured response for *message* in the session's state.

        Raises:
            MalformedOutputError: If the model output fails parsing or validation.
            LLMError / transport errors: Propagated from the client.
        """
        messages = build_extraction_messages(session, message)
        result = await self._client.complete(messages)
        try:
            response = parse_model_output(result.content)
        except MalformedOutputError as e:
            logger.warning(
                "Extraction output rejected",
                session_id=session.id,
                model=result.model,
                reason=e.reason,
            )
            raise
        logger.debug(
            "Extraction output accepted",
            session_id=session.id,
            has_patch=response.patch is not None,
            questions=len(response.questions or []),
        )
        return response

    async def close(self) -> None:
        await self._client.close()
