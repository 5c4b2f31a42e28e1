"""Evidence-based scoring and tiering of candidate listings.

Each signal record is gated and scored against the explore seed, then
assigned to one of three tiers:

- finalists: passed every hard gate and the compound Tier-1 check
- discovery: passed the hard gates but lacks confirmation (near-miss)
- rejected: failed a hard gate (identity, year, transmission, budget)

Evidence is two-valued. A required attribute is ``confirmed`` only on a
literal case-insensitive substring match; everything else is ``unknown``,
which downgrades a candidate to discovery but never rejects it.
"""

from __future__ import annotations

from typing import Literal

import structlog
from pydantic import BaseModel, Field

from market_scout.agent.state_machine import clamp_discovery, clamp_finalists
from market_scout.core.types import Candidate, CandidateSignals, ExploreSeed
from market_scout.market.signals import build_candidate

logger = structlog.get_logger()

MatchResult = Literal["confirmed", "unknown"]

BASE_SCORE = 50
ACCEPT_THRESHOLD = 75

MANUAL_BONUS = 10
TRIM_BONUS = 8
COLOR_BONUS = 12
BUDGET_BONUS = 8
MILEAGE_IDEAL_BONUS = 10
MILEAGE_OK_BONUS = 5
MILEAGE_OVER_PENALTY = 8


class TieredCandidates(BaseModel):
    """Partition of one retrieval batch."""

    finalists: list[Candidate] = Field(default_factory=list)
    discovery: list[Candidate] = Field(default_factory=list)
    rejected: list[Candidate] = Field(default_factory=list)


def includes_ci(haystack: str | None, needle: str | None) -> bool:
    if not haystack or not needle:
        return False
    return needle.lower() in haystack.lower()


def normalize_transmission(value: str | None) -> Literal["manual", "automatic"] | None:
    text = (value or "").lower()
    if not text:
        return None
    if "manual" in text:
        return "manual"
    if "automatic" in text or "pdk" in text or "dsg" in text:
        return "automatic"
    return None


def strict_attribute_match(required: str | None, evidence: list[str | None]) -> MatchResult:
    """Confirmed only when *required* literally appears in the evidence."""
    if not required:
        return "confirmed"
    haystack = " ".join(e for e in evidence if e).lower()
    if haystack and required.lower() in haystack:
        return "confirmed"
    return "unknown"


def _reject(signals: CandidateSignals, reason: str) -> Candidate:
    return build_candidate(signals, score=0, verdict="REJECT", rationale=[reason])


def _format_miles(value: int) -> str:
    return f"{value:,}"


def score_candidate(seed: ExploreSeed, signals: CandidateSignals) -> tuple[Candidate, bool]:
    """Score one record.

    Returns:
        ``(candidate, tier1_pass)``. Hard-rejected candidates carry verdict
        ``REJECT`` and score 0.
    """
    reasons: list[str] = []
    score = BASE_SCORE

    # Identity gates
    if seed.make and signals.make and not includes_ci(signals.make, seed.make):
        return _reject(signals, "Wrong make"), False
    if seed.model and signals.model and not includes_ci(signals.model, seed.model):
        return _reject(signals, "Wrong model"), False

    # Year gate: only a known, out-of-range year rejects
    if seed.year_min is not None and signals.year is not None:
        too_old = signals.year < seed.year_min
        too_new = seed.year_max is not None and signals.year > seed.year_max
        if too_old or too_new:
            return _reject(signals, "Year outside required range"), False
    if seed.year_min is not None and signals.year is None:
        reasons.append("Year not specified (verify)")

    # Transmission gate
    if seed.transmission == "manual":
        if normalize_transmission(signals.transmission) != "manual":
            return _reject(signals, "Transmission does not meet requirement"), False
        score += MANUAL_BONUS
        reasons.append("Manual transmission")

    # Trim evidence
    trim_match = strict_attribute_match(seed.trim, [signals.trim, signals.raw_text])
    if seed.trim:
        if trim_match == "confirmed":
            score += TRIM_BONUS
            reasons.append(f"Trim confirmed ({seed.trim})")
        else:
            reasons.append(f"Trim not confirmed ({seed.trim})")

    # Color evidence
    color_match = strict_attribute_match(
        seed.exterior_color, [signals.exterior_color, signals.raw_text]
    )
    if seed.exterior_color:
        if color_match == "confirmed":
            score += COLOR_BONUS
            reasons.append(f"Color confirmed ({seed.exterior_color})")
        else:
            reasons.append(f"Color not confirmed ({seed.exterior_color})")

    # Budget gate: over-budget only when the price is known, but an
    # unknown price never passes Tier 1
    budget_ok = seed.budget_max_usd is None
    if seed.budget_max_usd is not None:
        if signals.price is None:
            reasons.append("Price unknown")
        elif signals.price > seed.budget_max_usd:
            return _reject(signals, "Over budget"), False
        else:
            budget_ok = True
            score += BUDGET_BONUS
            reasons.append("Within budget")

    # Mileage (soft)
    if signals.miles is not None:
        if seed.mileage_ideal_max is not None and signals.miles <= seed.mileage_ideal_max:
            score += MILEAGE_IDEAL_BONUS
            reasons.append(f"Mileage ideal (<={_format_miles(seed.mileage_ideal_max)} mi)")
        elif seed.mileage_ok_max is not None and signals.miles <= seed.mileage_ok_max:
            score += MILEAGE_OK_BONUS
            reasons.append(f"Mileage acceptable (<={_format_miles(seed.mileage_ok_max)} mi)")
        elif seed.mileage_ok_max is not None and signals.miles > seed.mileage_ok_max:
            score -= MILEAGE_OVER_PENALTY
            reasons.append("Mileage above preference")
    else:
        reasons.append("Mileage unknown")

    # Advisory only; location is not evidence of salt exposure
    if seed.avoid_salt_history and signals.state:
        reasons.append("Verify salt-road history")

    final_score = max(0, min(100, round(score)))
    tier1_pass = trim_match == "confirmed" and color_match == "confirmed" and budget_ok
    verdict = "ACCEPT" if tier1_pass and final_score >= ACCEPT_THRESHOLD else "CONDITIONAL"
    return build_candidate(signals, score=final_score, verdict=verdict, rationale=reasons), tier1_pass


def score_and_tier(seed: ExploreSeed, records: list[CandidateSignals]) -> TieredCandidates:
    """Score every record and partition the batch, enforcing the tier caps."""
    finalists: list[Candidate] = []
    discovery: list[Candidate] = []
    rejected: list[Candidate] = []

    for signals in records:
        candidate, tier1_pass = score_candidate(seed, signals)
        if candidate.verdict == "REJECT":
            rejected.append(candidate)
        elif tier1_pass:
            finalists.append(candidate)
        else:
            discovery.append(candidate)

    logger.debug(
        "Scored retrieval batch",
        records=len(records),
        finalists=len(finalists),
        discovery=len(discovery),
        rejected=len(rejected),
    )
    return TieredCandidates(
        finalists=clamp_finalists(finalists),
        discovery=clamp_discovery(discovery),
        rejected=rejected,
    )
