"""Idempotent watch creation keyed by canonical boundary content."""

from __future__ import annotations

import json
import threading

import structlog
from pydantic import BaseModel

from market_scout.agent.normalize import compute_canonical_boundary
from market_scout.agent.patch import WatchProposal
from market_scout.core.types import GoalType, Session, WatchSpec
from market_scout.market.watch_store import InMemoryWatchStore, WatchStore

logger = structlog.get_logger()

DEFAULT_SOURCES = ["auto.dev"]


class WatchResult(BaseModel):
    watch: WatchSpec
    created: bool


def canonical_watch_key(goal_type: GoalType, spec: WatchSpec) -> str:
    """Deterministic content key; list order is significant."""
    return json.dumps(
        {
            "goal": goal_type,
            "must_have": spec.must_have,
            "acceptable": spec.acceptable,
            "reject": spec.reject,
            "sources": spec.sources,
        },
        ensure_ascii=False,
        separators=(",", ":"),
    )


def build_watch_spec(session: Session, sources: list[str] | None = None) -> WatchSpec:
    """Watch spec projected from the session's canonical boundary."""
    boundary = compute_canonical_boundary(session)
    budget = session.intent.budget
    return WatchSpec(
        must_have=boundary.tier1,
        acceptable=boundary.tier2,
        reject=boundary.hard_rejections,
        sources=list(sources if sources is not None else DEFAULT_SOURCES),
        budget=budget.model_copy() if budget is not None and budget.max is not None else None,
    )


class WatchService:
    """Shared watch registry.

    The lookup-then-insert sequence runs under one lock, so concurrent
    requests for the same boundary never produce two entries.
    """

    def __init__(
        self,
        store: WatchStore | None = None,
        sources: list[str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Backing store. Defaults to an in-memory store.
            sources: Source list written into new specs.
        """
        self._store = store if store is not None else InMemoryWatchStore()
        self._sources = list(sources) if sources is not None else list(DEFAULT_SOURCES)
        self._lock = threading.Lock()

    @property
    def store(self) -> WatchStore:
        return self._store

    def ensure_watch(self, session: Session, hints: WatchProposal | None = None) -> WatchResult:
        """Return the existing watch for this boundary, or create it.

        Args:
            session: Session whose canonical boundary defines the watch.
            hints: Model-proposed cadence, geography and search strings. They
                decorate a newly created spec but never take part in the key.
        """
        spec = build_watch_spec(session, self._sources)
        if hints is not None:
            spec.cadence = hints.cadence
            spec.geography = hints.geography
            spec.search_strings = hints.search_strings
        key = canonical_watch_key(session.goal_type, spec)

        with self._lock:
            existing = self._store.get(key)
            if existing is not None:
                logger.debug("Watch already exists", session_id=session.id)
                return WatchResult(watch=existing, created=False)
            self._store.set(key, spec)

        logger.info("Watch created", session_id=session.id, must_have=len(spec.must_have))
        return WatchResult(watch=spec, created=True)

    def list_watches(self) -> list[WatchSpec]:
        return self._store.list()
