"""Explore seed derivation from intent and constraint text."""

from __future__ import annotations

import re

from market_scout.agent.patterns import (
    BUDGET_PATTERN,
    CLEAN_TITLE_PHRASES,
    MILEAGE_ACCEPTABLE_PATTERN,
    MILEAGE_IDEAL_PATTERN,
    SALT_HISTORY_PHRASES,
    TRANSMISSION_AUTOMATIC,
    TRANSMISSION_MANUAL,
    contains_any,
    extract_generation_token,
    extract_year_bounds,
    match_color,
)
from market_scout.core.types import ExploreSeed, Session, Transmission


def _transmission(text: str) -> Transmission:
    if contains_any(text, TRANSMISSION_MANUAL):
        return "manual"
    if contains_any(text, TRANSMISSION_AUTOMATIC):
        return "automatic"
    return "either"


def _thousands(match: re.Match[str] | None) -> int | None:
    return int(match.group(1)) * 1000 if match else None


def derive_explore_seed(session: Session) -> ExploreSeed:
    """Build the explore seed for *session*.

    Make, model and trim come only from structured intent; everything else is
    best-effort text extraction. Never raises: an unmatched rule simply
    leaves its field unset.
    """
    vehicle = session.intent.vehicle
    raw = " | ".join(session.constraints.all_text())
    text = raw.lower()

    seed = ExploreSeed(
        make=vehicle.make or None,
        model=vehicle.model or None,
        trim=vehicle.trim or None,
    )

    bounds = extract_year_bounds(text)
    if bounds:
        seed.year_min, seed.year_max = bounds

    seed.generation = extract_generation_token(raw)
    seed.transmission = _transmission(text)
    seed.exterior_color = match_color(text)
    seed.title_clean = contains_any(text, CLEAN_TITLE_PHRASES)
    seed.avoid_salt_history = contains_any(text, SALT_HISTORY_PHRASES)
    seed.mileage_ideal_max = _thousands(MILEAGE_IDEAL_PATTERN.search(text))
    seed.mileage_ok_max = _thousands(MILEAGE_ACCEPTABLE_PATTERN.search(text))

    budget = session.intent.budget
    if budget is not None and budget.max is not None:
        seed.budget_max_usd = budget.max
    else:
        seed.budget_max_usd = _thousands(BUDGET_PATTERN.search(text))

    return seed
