"""Deterministic user-facing renders for each state.

The extraction model never writes chat text; every message the user sees
comes from these templates, so a rejected model output still yields a
complete turn.
"""

from __future__ import annotations

from market_scout.agent.normalize import compute_canonical_boundary
from market_scout.core.types import Candidate, Session, WatchSpec

MAX_QUESTIONS = 4


def capture_questions(session: Session) -> list[str]:
    """Questions for whatever the capture step is still missing."""
    questions: list[str] = []
    if len(session.constraints.tier1) < 3:
        questions.append("List your Tier 1 deal-breakers (3-6 items).")
    if not session.intent.vehicle.make:
        questions.append("What is the make/model/generation?")
    if session.intent.budget is None or session.intent.budget.max is None:
        questions.append("What is your max budget (even rough)?")
    if not session.intent.horizon:
        questions.append("Is this a short-term buy or long-term keep?")
    return questions[:MAX_QUESTIONS]


def render_capture(session: Session, questions: list[str] | None = None) -> str:
    asked = (questions or capture_questions(session))[:MAX_QUESTIONS]
    if not asked:
        return (
            "S1 Capture\n\nI have enough to draft your boundary. "
            "Reply \"confirm\" to review it, or keep editing."
        )
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(asked, start=1))
    return (
        f"S1 Capture\n\nSession goal: **{session.goal_type}**. "
        f"To proceed to confirmation, answer:\n{numbered}"
    )


def render_confirm(session: Session, compromises: list[str] | None = None) -> str:
    """Boundary confirmation; model-suggested compromises are shown but never gate."""
    boundary = compute_canonical_boundary(session)
    tier1 = "; ".join(boundary.tier1) or "(add Tier 1 constraints)"
    tier2 = "; ".join(boundary.tier2) or "(add Tier 2 constraints)"
    rejects = "; ".join(boundary.hard_rejections) or "(add rejection rules)"
    suggested = ""
    if compromises:
        suggested = f"**Acceptable compromises (suggested):** {'; '.join(compromises)}\n\n"
    return (
        "S2 Confirm\n\n"
        "**Boundary (what counts as correct):**\n"
        f"- Tier 1 (non-negotiable): {tier1}\n"
        f"- Tier 2 (strong prefs): {tier2}\n\n"
        f"**Hard rejections:** {rejects}\n\n"
        f"{suggested}"
        "Reply \"confirm\" to proceed to market explore, or edit any rule."
    )


def _numbered(candidates: list[Candidate], with_score: bool = True) -> str:
    if not candidates:
        return "(none)"
    lines = []
    for i, c in enumerate(candidates, start=1):
        suffix = f" (score {c.score})" if with_score else ""
        lines.append(f"{i}. [{c.verdict}] {c.title}{suffix}")
    return "\n".join(lines)


def render_explore(session: Session, fallback_reason: str | None = None) -> str:
    placeholder = any(c.is_placeholder for c in [*session.finalists, *session.discovery])
    if placeholder:
        reason = f" ({fallback_reason})" if fallback_reason else ""
        intro = (
            f"Returning **placeholder candidates**{reason}. "
            "Nothing below was retrieved or verified."
        )
    else:
        intro = "Scored the current retrieval window against your boundary."
    return (
        f"S3 Explore\n\n{intro}\n\n"
        f"Finalists (<=5):\n{_numbered(session.finalists)}\n\n"
        f"Discovery (<=3):\n{_numbered(session.discovery, with_score=False)}\n\n"
        "Next: Decide (buy now vs watch vs revise)."
    )


def render_watch(watch: WatchSpec | None, created: bool | None) -> str:
    if watch is None:
        return (
            "S5 Watch\n\nNo ACCEPTED finalists. Recommendation: wait and watch.\n"
            "Reply \"watch\" to save a watch spec for this boundary, or \"revise\" to edit it."
        )
    if created is None:
        status = "Current watch spec"
    elif created:
        status = "Created a watch spec"
    else:
        status = "A watch for this boundary already exists"
    cadence = watch.cadence or "unspecified"
    return (
        f"S5 Watch\n\n{status} with:\n"
        f"- Must-have: {'; '.join(watch.must_have) or '(none)'}\n"
        f"- Acceptable: {'; '.join(watch.acceptable) or '(none)'}\n"
        f"- Reject: {'; '.join(watch.reject) or '(none)'}\n"
        f"- Sources: {', '.join(watch.sources) or '(none)'}\n"
        f"- Cadence: {cadence}\n\n"
        "Export the watch with `market-scout export`."
    )


def render_iterate(session: Session) -> str:
    return (
        "S6 Iterate\n\nEdit any Tier 1, Tier 2 or rejection rule. "
        "Your next message returns to boundary confirmation."
    )


def render_close(session: Session) -> str:
    lines = ["S7 Close", "", "Session closed.", "- State snapshot saved in artifacts"]
    if session.watch is not None:
        lines.append("- Watch spec attached")
    return "\n".join(lines)
