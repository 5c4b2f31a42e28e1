"""Decision engine: ACT, WATCH or REVISE from a tiered candidate set."""

from __future__ import annotations

from market_scout.agent.normalize import compute_canonical_boundary
from market_scout.core.types import (
    ActDecision,
    CanonicalBoundary,
    Candidate,
    Decision,
    ReviseDecision,
    Session,
    WatchDecision,
)

MAX_BLOCKERS = 4
BLOCKER_MARKER = "not confirmed"

ACT_RATIONALE = [
    "At least one listing meets all Tier 1 constraints.",
    "This is the best-scoring qualifying candidate right now.",
]
WATCH_RATIONALE = [
    "No listings currently meet all Tier 1 constraints.",
    "Near-miss listings exist, but they fail strict requirements or lack confirmation.",
    "Waiting is the correct decision for this specification; set a watch.",
]
REVISE_RATIONALE = [
    "No listings meet Tier 1 constraints and no near-misses were found in the current retrieval window.",
    "This specification may be unrealistically strict, or the market is temporarily empty.",
]
REVISE_SUGGESTIONS = [
    "Relax one Tier 1 constraint (e.g., color, trim, transmission) if acceptable.",
    "Increase budget ceiling.",
    "Broaden acceptable years or mileage.",
    "Expand search radius / allow shipping if not already.",
]


def top_by_score(candidates: list[Candidate]) -> Candidate | None:
    """Highest score; ties keep the earliest candidate."""
    best: Candidate | None = None
    for candidate in candidates:
        if best is None or candidate.score > best.score:
            best = candidate
    return best


def extract_blockers(candidates: list[Candidate], limit: int = MAX_BLOCKERS) -> list[str]:
    """Distinct "not confirmed" rationale lines, in candidate order."""
    out: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        for line in candidate.rationale:
            text = line.strip()
            key = text.lower()
            if not text or BLOCKER_MARKER not in key or key in seen:
                continue
            seen.add(key)
            out.append(text)
            if len(out) >= limit:
                return out
    return out


def decide(
    finalists: list[Candidate],
    discovery: list[Candidate],
    boundary: CanonicalBoundary,
) -> Decision:
    """Recommend one action. Pure: identical inputs give identical decisions.

    Any non-empty finalist list yields ACT, whatever the finalists' verdicts.
    """
    best = top_by_score(finalists)
    if best is not None:
        return ActDecision(rationale=list(ACT_RATIONALE), selected=best)

    if discovery:
        return WatchDecision(
            rationale=list(WATCH_RATIONALE),
            watch_seed_summary=list(boundary.tier1),
            blockers=extract_blockers(discovery),
        )

    return ReviseDecision(
        rationale=list(REVISE_RATIONALE),
        suggested_edits=list(REVISE_SUGGESTIONS),
    )


def decide_session(session: Session) -> Decision:
    """Decide from a session's current finalists, discovery and boundary."""
    return decide(session.finalists, session.discovery, compute_canonical_boundary(session))


def _candidate_line(candidate: Candidate) -> str:
    title = f"[{candidate.title}]({candidate.url})" if candidate.url else candidate.title
    return f"- [{candidate.verdict}] {title} (score {candidate.score})"


def _bullets(items: list[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else f"- {empty}"


def render_decision(
    decision: Decision,
    boundary: CanonicalBoundary,
    discovery: list[Candidate],
) -> str:
    """Deterministic user-facing text for a decision."""
    header = f"S4 Decide\n\nRecommendation: {decision.action}\n\nWhy:\n{_bullets(decision.rationale, '')}"

    if isinstance(decision, ActDecision):
        return (
            f"{header}\n\nSelected:\n{_candidate_line(decision.selected)}"
            "\n\nNext: Inspect details, verify history/service, and move to outreach/PPI."
        )

    if isinstance(decision, WatchDecision):
        closest = "\n".join(_candidate_line(c) for c in discovery[:3])
        return (
            f"{header}\n\nTier 1 boundary:\n{_bullets(boundary.tier1, '(none captured)')}"
            f"\n\nBlocking signals (from listings):\n"
            f"{_bullets(decision.blockers, '(no explicit blockers captured)')}"
            f"\n\nClosest matches (Discovery):\n{closest}"
            "\n\nNext: Create a watch (reply \"watch\") or revise constraints if you want more supply."
        )

    return (
        f"{header}\n\nSuggested edits:\n{_bullets(decision.suggested_edits, '')}"
        "\n\nNext: Update constraints and re-run Explore."
    )
