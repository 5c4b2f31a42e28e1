"""One explore cycle: seed, retrieve, dedupe, extract signals, score and tier."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import BaseModel, Field

from market_scout.agent.state_machine import clamp_discovery, clamp_finalists
from market_scout.config.settings import AutoDevConfig, get_settings
from market_scout.core.types import Candidate, ExploreSeed, Session
from market_scout.market.autodev import MAX_PAGE_LIMIT, AutoDevClient, AutoDevSearchParams
from market_scout.market.exceptions import InsufficientSeedError, RetrievalTimeoutError
from market_scout.market.scoring import TieredCandidates, score_and_tier
from market_scout.market.seed import derive_explore_seed
from market_scout.market.signals import listing_key, listing_to_signals

logger = structlog.get_logger()


class ExploreMeta(BaseModel):
    fetched: int = 0
    used: int = 0
    rejected: int = 0
    seed: ExploreSeed = Field(default_factory=ExploreSeed)


class ExploreResult(BaseModel):
    session: Session
    meta: ExploreMeta


def dedupe_listings(listings: list[Any]) -> list[Any]:
    """Keep the first listing per VIN (else URL); drop listings with neither."""
    seen: set[str] = set()
    out: list[Any] = []
    for listing in listings:
        key = listing_key(listing)
        if key is None or key in seen:
            continue
        seen.add(key)
        out.append(listing)
    return out


def build_search_params(seed: ExploreSeed, top_n: int, sort: str | None = None) -> AutoDevSearchParams:
    """Provider query, deliberately broader than the Tier-1 boundary.

    Color is never sent: provider color data is unreliable, so it is
    judged during scoring instead.
    """
    year = f"{seed.year_min}-{seed.year_max}" if seed.year_min and seed.year_max else None
    price = f"0-{int(seed.budget_max_usd)}" if seed.budget_max_usd else None
    miles = f"0-{seed.mileage_ok_max}" if seed.mileage_ok_max else None
    return AutoDevSearchParams(
        page=1,
        limit=min(MAX_PAGE_LIMIT, max(1, top_n)),
        sort=sort,
        year=year,
        make=seed.make,
        model=seed.model,
        transmission="manual" if seed.transmission == "manual" else None,
        price=price,
        miles=miles,
    )


def require_retrievable(seed: ExploreSeed) -> None:
    """Raise InsufficientSeedError when make or model is missing."""
    missing = [name for name in ("make", "model") if not getattr(seed, name)]
    if missing:
        raise InsufficientSeedError(missing)


def apply_tiers(session: Session, tiered: TieredCandidates) -> Session:
    """Copy of *session* carrying the tiered candidates, caps re-enforced."""
    updated = session.copy_for_turn()
    updated.finalists = clamp_finalists(tiered.finalists)
    updated.discovery = clamp_discovery(tiered.discovery)
    return updated


async def run_live_explore(
    session: Session,
    client: AutoDevClient,
    config: AutoDevConfig | None = None,
) -> ExploreResult:
    """Run one bounded explore cycle against the listings provider.

    Raises:
        InsufficientSeedError: Seed lacks make/model; the provider is not called.
        RetrievalTimeoutError: The provider did not answer within the timeout.
        RetrievalError: The provider failed.
    """
    config = config or get_settings().autodev
    seed = derive_explore_seed(session)
    require_retrievable(seed)

    params = build_search_params(seed, config.top_n, config.sort)
    try:
        listings = await asyncio.wait_for(
            client.search_listings(params),
            timeout=config.timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        raise RetrievalTimeoutError(config.timeout_ms) from e

    deduped = dedupe_listings(listings)
    sliced = deduped[: config.top_n]
    tiered = score_and_tier(seed, [listing_to_signals(listing) for listing in sliced])

    logger.info(
        "Explore completed",
        session_id=session.id,
        fetched=len(listings),
        used=len(sliced),
        finalists=len(tiered.finalists),
        discovery=len(tiered.discovery),
    )
    return ExploreResult(
        session=apply_tiers(session, tiered),
        meta=ExploreMeta(
            fetched=len(listings),
            used=len(sliced),
            rejected=len(tiered.rejected),
            seed=seed,
        ),
    )


def placeholder_candidates() -> TieredCandidates:
    """Deterministic, clearly labeled stand-ins used when live retrieval is off or fails."""
    finalists = [
        Candidate(
            id="placeholder-a",
            title="Placeholder Candidate A (mechanically strong, spec-aligned)",
            verdict="ACCEPT",
            score=90,
            rationale=[
                "Meets Tier 1 constraints (placeholder assumption)",
                "Strong maintenance narrative (placeholder)",
                "Best expected decision-quality trade-off",
            ],
            is_placeholder=True,
        ),
        Candidate(
            id="placeholder-b",
            title="Placeholder Candidate B (spec-aligned, missing key proof)",
            verdict="CONDITIONAL",
            score=76,
            rationale=["Meets Tier 1 (placeholder)", "Missing documentation or verification item"],
            is_placeholder=True,
        ),
    ]
    discovery = [
        Candidate(
            id="placeholder-discovery-1",
            title="Placeholder Discovery Option 1 (adjacent, taste-coherent)",
            verdict="CONDITIONAL",
            score=65,
            rationale=["Shown because it improves availability while preserving taste boundaries"],
            is_placeholder=True,
        ),
    ]
    return TieredCandidates(finalists=finalists, discovery=discovery)
