"""Constraint normalization and canonical boundary derivation.

Normalization keeps the session retrieval-friendly:
- Tier hygiene: preference phrasing ("avoid", "prefer", "ideal", ...) never
  stays in tier1; explicit hard phrasing is promoted to tier1.
- Vehicle back-fill: generation and year range are pulled out of constraint
  text only when the structured fields are empty.
- De-duplication across tiers, keeping the first occurrence.
"""

from __future__ import annotations

import re
from typing import Literal

from market_scout.agent.patterns import (
    DEFAULT_INDICATORS,
    TierIndicators,
    extract_generation_token,
    extract_year_range,
)
from market_scout.core.types import CanonicalBoundary, ConstraintTiers, Session

TierName = Literal["tier1", "tier2", "tier3"]

_WHITESPACE_RE = re.compile(r"\s+")
_DASH_RE = re.compile(r"[–—]")


def normalize_line(text: str) -> str:
    """Comparison form of a rule: lowercase, single spaces, ASCII dashes."""
    lowered = _WHITESPACE_RE.sub(" ", text.lower())
    return _DASH_RE.sub("-", lowered).strip()


def dedupe_strings(items: list[str]) -> list[str]:
    """Drop empty and repeated rules, keeping the first occurrence trimmed."""
    out: list[str] = []
    seen: set[str] = set()
    for item in items:
        key = normalize_line(item)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(item.strip())
    return out


def classify_constraint_tier(
    text: str,
    prior: TierName,
    indicators: TierIndicators = DEFAULT_INDICATORS,
) -> TierName:
    """Classify one rule given the tier it arrived in.

    Hard language wins, then nice-to-have language. Preference language is
    capped at tier2: it keeps a tier3 rule in tier3 and demotes a tier1 rule.
    """
    normalized = normalize_line(text)
    if indicators.hard.search(normalized):
        return "tier1"
    if indicators.soft.search(normalized):
        return "tier3"
    if indicators.preference.search(normalized):
        return "tier3" if prior == "tier3" else "tier2"
    return prior


def normalize_constraints(
    constraints: ConstraintTiers,
    indicators: TierIndicators = DEFAULT_INDICATORS,
) -> ConstraintTiers:
    """Reclassify every rule and de-duplicate across all three tiers."""
    buckets: dict[TierName, list[str]] = {"tier1": [], "tier2": [], "tier3": []}
    seen: set[str] = set()

    sources: list[tuple[TierName, list[str]]] = [
        ("tier1", constraints.tier1),
        ("tier2", constraints.tier2),
        ("tier3", constraints.tier3),
    ]
    for prior, rules in sources:
        for rule in rules:
            key = normalize_line(rule)
            if not key or key in seen:
                continue
            seen.add(key)
            buckets[classify_constraint_tier(rule, prior, indicators)].append(rule.strip())

    return ConstraintTiers(**buckets)


def normalize_session(session: Session) -> Session:
    """Return a normalized copy of *session*; the input is left untouched."""
    normalized = session.copy_for_turn()

    all_text = " | ".join(normalized.constraints.all_text())
    vehicle = normalized.intent.vehicle
    if not vehicle.gen:
        vehicle.gen = extract_generation_token(all_text)
    if not vehicle.year_range:
        vehicle.year_range = extract_year_range(all_text)

    normalized.constraints = normalize_constraints(normalized.constraints)
    return normalized


def compute_canonical_boundary(session: Session) -> CanonicalBoundary:
    """Derive the authoritative boundary used for gating and watch keys."""
    tier1 = list(session.constraints.tier1)
    tier2 = list(session.constraints.tier2)
    derived = [f"No listings that violate: {rule}" for rule in tier1]
    hard_rejections = dedupe_strings([*session.taste.rejection_rules, *derived])
    return CanonicalBoundary(tier1=tier1, tier2=tier2, hard_rejections=hard_rejections)
