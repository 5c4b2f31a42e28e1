"""Tests for the explore cycle."""

import asyncio

import pytest

from market_scout.config.settings import AutoDevConfig
from market_scout.core.types import ExploreSeed, Session
from market_scout.market.exceptions import InsufficientSeedError, RetrievalTimeoutError
from market_scout.market.explore import (
    build_search_params,
    dedupe_listings,
    placeholder_candidates,
    run_live_explore,
)


class FakeRetrieval:
    """Stands in for AutoDevClient."""

    def __init__(self, listings=None, delay: float = 0.0) -> None:
        self.listings = listings or []
        self.delay = delay
        self.calls = []

    async def search_listings(self, params):
        self.calls.append(params)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.listings


def _config(**kwargs) -> AutoDevConfig:
    return AutoDevConfig(_env_file=None, api_key="test-key", **kwargs)


class TestBuildSearchParams:
    def test_broader_than_boundary(self) -> None:
        seed = ExploreSeed(
            make="Porsche",
            model="Boxster",
            year_min=2003,
            year_max=2004,
            transmission="manual",
            exterior_color="speed yellow",
            budget_max_usd=30000,
            mileage_ok_max=100000,
        )
        params = build_search_params(seed, top_n=50, sort="price.asc")

        assert params.exterior_color is None
        assert params.transmission == "manual"
        assert params.year == "2003-2004"
        assert params.price == "0-30000"
        assert params.miles == "0-100000"
        assert params.limit == 50

    def test_automatic_not_sent(self) -> None:
        params = build_search_params(ExploreSeed(transmission="automatic"), top_n=500)
        assert params.transmission is None
        assert params.limit == 100


class TestDedupe:
    def test_first_wins_and_identity_required(self, make_listing) -> None:
        listings = [
            make_listing(vin="A", price=1),
            make_listing(vin="A", price=2),
            make_listing(vin=None, url="https://example.com/x"),
            make_listing(vin=None, url="https://example.com/x"),
            {"vehicle": {"make": "Porsche"}},
        ]
        deduped = dedupe_listings(listings)
        assert len(deduped) == 2
        assert deduped[0]["retailListing"]["price"] == 1


class TestRunLiveExplore:
    @pytest.mark.asyncio
    async def test_scores_and_tiers(self, boxster_session, make_listing) -> None:
        retrieval = FakeRetrieval(
            [
                make_listing(vin="A"),
                make_listing(vin="A"),
                make_listing(vin="B", exterior_color="Black"),
                make_listing(vin="C", make="Honda", model="S2000"),
            ]
        )
        result = await run_live_explore(boxster_session, retrieval, _config())

        assert result.meta.fetched == 4
        assert result.meta.used == 3
        assert result.meta.rejected == 1
        assert len(result.session.finalists) == 1
        assert len(result.session.discovery) == 1
        assert boxster_session.finalists == []

    @pytest.mark.asyncio
    async def test_slices_to_top_n(self, boxster_session, make_listing) -> None:
        retrieval = FakeRetrieval([make_listing(vin=f"V{i}") for i in range(10)])
        result = await run_live_explore(boxster_session, retrieval, _config(top_n=4))
        assert result.meta.used == 4
        assert retrieval.calls[0].limit == 4

    @pytest.mark.asyncio
    async def test_insufficient_seed_skips_retrieval(self) -> None:
        retrieval = FakeRetrieval()
        with pytest.raises(InsufficientSeedError) as exc_info:
            await run_live_explore(Session(id="s"), retrieval, _config())
        assert exc_info.value.missing == ["make", "model"]
        assert retrieval.calls == []

    @pytest.mark.asyncio
    async def test_timeout(self, boxster_session) -> None:
        retrieval = FakeRetrieval(delay=1.0)
        with pytest.raises(RetrievalTimeoutError, match="10ms"):
            await run_live_explore(boxster_session, retrieval, _config(timeout_ms=10))


class TestPlaceholders:
    def test_labeled(self) -> None:
        tiered = placeholder_candidates()
        everything = tiered.finalists + tiered.discovery

        assert all(c.is_placeholder for c in everything)
        assert all(c.title.startswith("Placeholder") for c in everything)
        assert len(tiered.finalists) <= 5
        assert len(tiered.discovery) <= 3
