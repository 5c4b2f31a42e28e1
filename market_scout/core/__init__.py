"""Core types for Market Scout."""

from market_scout.core.types import (
    AgentState,
    CanonicalBoundary,
    Candidate,
    CandidateSignals,
    ConstraintTiers,
    Decision,
    ExploreSeed,
    Intent,
    Session,
    Taste,
    WatchSpec,
)

__all__ = [
    "AgentState",
    "CanonicalBoundary",
    "Candidate",
    "CandidateSignals",
    "ConstraintTiers",
    "Decision",
    "ExploreSeed",
    "Intent",
    "Session",
    "Taste",
    "WatchSpec",
]
