"""One conversation turn as an atomic request/response cycle.

The caller's session is never mutated: the turn works on a deep copy and
returns it. The extraction call and the retrieval call are the only awaits;
either failing degrades to a deterministic render instead of an error.
"""

from __future__ import annotations

import structlog
from openai import OpenAIError
from pydantic import BaseModel, Field

from market_scout.agent.normalize import compute_canonical_boundary, normalize_session
from market_scout.agent.patch import BoundaryProposal, ModelResponse, apply_patch
from market_scout.agent.render import (
    render_capture,
    render_close,
    render_confirm,
    render_explore,
    render_iterate,
    render_watch,
)
from market_scout.agent.state_machine import (
    Command,
    clamp_discovery,
    clamp_finalists,
    command_transition,
    next_state,
    parse_command,
)
from market_scout.config.settings import Settings, get_settings
from market_scout.core.types import AgentState, Session
from market_scout.llm.exceptions import LLMError, MalformedOutputError
from market_scout.llm.extractor import Extractor
from market_scout.market.autodev import AutoDevClient
from market_scout.market.decide import decide_session, render_decision
from market_scout.market.exceptions import MarketError
from market_scout.market.explore import ExploreMeta, apply_tiers, placeholder_candidates, run_live_explore
from market_scout.market.watch import WatchService

logger = structlog.get_logger()


class TurnResult(BaseModel):
    """Output of one turn."""

    message: str
    session: Session
    extraction: str = Field(default="skipped", description="model | fallback | skipped")
    explore: ExploreMeta | None = None
    watch_created: bool | None = None
    proposed_boundary: BoundaryProposal | None = None


class TurnPipeline:
    """Sequences state machine, extraction, normalization and the market pipeline."""

    def __init__(
        self,
        settings: Settings | None = None,
        extractor: Extractor | None = None,
        watch_service: WatchService | None = None,
        retrieval: AutoDevClient | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings. If None, uses get_settings().
            extractor: Extraction collaborator. If None and ``llm_enabled``,
                one is created lazily.
            watch_service: Shared watch registry. Defaults to an in-memory one.
            retrieval: Listings client. If None, a client is opened per explore.
        """
        self._settings = settings or get_settings()
        self._extractor = extractor
        self._watch_service = watch_service or WatchService(sources=self._settings.watch_sources)
        self._retrieval = retrieval

    @property
    def watch_service(self) -> WatchService:
        return self._watch_service

    def _get_extractor(self) -> Extractor | None:
        if self._extractor is None and self._settings.llm_enabled:
            self._extractor = Extractor()
        return self._extractor

    async def _extract(self, session: Session, message: str) -> tuple[ModelResponse | None, str]:
        extractor = self._get_extractor()
        if extractor is None:
            return None, "skipped"
        try:
            return await extractor.extract(session, message), "model"
        except MalformedOutputError:
            # Already logged by the extractor; nothing from it is merged.
            return None, "fallback"
        except (LLMError, OpenAIError, ValueError) as e:
            logger.warning("Extraction failed, using fallback", session_id=session.id, error=str(e))
            return None, "fallback"

    async def _explore(self, session: Session) -> tuple[Session, ExploreMeta | None, str | None]:
        if not self._settings.live_search_enabled:
            return apply_tiers(session, placeholder_candidates()), None, "live search disabled"

        try:
            if self._retrieval is not None:
                result = await run_live_explore(session, self._retrieval, self._settings.autodev)
            else:
                async with AutoDevClient(self._settings.autodev) as client:
                    result = await run_live_explore(session, client, self._settings.autodev)
        except MarketError as e:
            logger.warning("Live explore failed, using placeholders", session_id=session.id, error=str(e))
            fallback = apply_tiers(session, placeholder_candidates())
            fallback.notes.append(f"Live explore failed: {e}")
            return fallback, None, str(e)
        return result.session, result.meta, None

    async def process_turn(self, session: Session, message: str) -> TurnResult:
        """Advance *session* by one user message.

        Returns:
            TurnResult with the rendered message and a new session.
        """
        working = session.copy_for_turn()
        working.last_user_message = message

        command = parse_command(message)
        override = command_transition(working.state, command)
        working.state = override if override is not None else next_state(working)
        logger.debug(
            "Turn state resolved",
            session_id=working.id,
            state=working.state.value,
            command=command.value if command else None,
        )

        response, extraction = await self._extract(working, message)
        if response is not None:
            working = apply_patch(working, response.patch)
        working = normalize_session(working)

        result = TurnResult(message="", session=working, extraction=extraction)
        state = working.state

        if state in (AgentState.INIT, AgentState.CAPTURE):
            questions = response.questions if response is not None else None
            result.message = render_capture(working, questions)
        elif state == AgentState.CONFIRM:
            proposal = response.boundary if response is not None else None
            result.proposed_boundary = proposal
            result.message = render_confirm(
                working, proposal.acceptable_compromises if proposal is not None else None
            )
        elif state == AgentState.EXPLORE:
            working, meta, reason = await self._explore(working)
            result.explore = meta
            result.message = render_explore(working, reason)
        elif state == AgentState.DECIDE:
            decision = decide_session(working)
            working.last_decision = decision
            result.message = render_decision(
                decision, compute_canonical_boundary(working), working.discovery
            )
        elif state == AgentState.WATCH:
            if command == Command.WATCH:
                hints = response.watch if response is not None else None
                created = self._watch_service.ensure_watch(working, hints)
                working.watch = created.watch
                result.watch_created = created.created
            result.message = render_watch(working.watch, result.watch_created)
        elif state == AgentState.ITERATE:
            result.message = render_iterate(working)
        else:
            result.message = render_close(working)

        # Caps hold on every path out of a turn.
        working.finalists = clamp_finalists(working.finalists)
        working.discovery = clamp_discovery(working.discovery)
        result.session = working
        return result
