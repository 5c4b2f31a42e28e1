"""Tests for explore seed derivation."""

from market_scout.core.types import BudgetIntent, ConstraintTiers, Session, VehicleIntent
from market_scout.market.seed import derive_explore_seed


class TestDeriveExploreSeed:
    def test_full_boundary(self, boxster_session) -> None:
        seed = derive_explore_seed(boxster_session)

        assert seed.make == "Porsche"
        assert seed.model == "Boxster"
        assert seed.trim == "S"
        assert seed.generation == "986.2"
        assert (seed.year_min, seed.year_max) == (2003, 2004)
        assert seed.transmission == "manual"
        assert seed.exterior_color == "speed yellow"
        assert seed.title_clean is True
        assert seed.avoid_salt_history is True
        assert seed.mileage_ideal_max == 60000
        assert seed.mileage_ok_max == 100000
        assert seed.budget_max_usd == 30000

    def test_empty_session_is_unconstrained(self) -> None:
        seed = derive_explore_seed(Session(id="empty"))

        assert seed.make is None
        assert seed.year_min is None
        assert seed.transmission == "either"
        assert seed.exterior_color is None
        assert seed.title_clean is False
        assert seed.budget_max_usd is None

    def test_make_never_inferred_from_text(self) -> None:
        session = Session(id="s", constraints=ConstraintTiers(tier1=["Porsche Boxster only"]))
        seed = derive_explore_seed(session)
        assert seed.make is None
        assert seed.model is None

    def test_budget_from_text_when_intent_missing(self) -> None:
        session = Session(id="s", constraints=ConstraintTiers(tier1=["Max budget $35k"]))
        assert derive_explore_seed(session).budget_max_usd == 35000

    def test_structured_budget_wins(self) -> None:
        session = Session(id="s", constraints=ConstraintTiers(tier1=["Max budget $35k"]))
        session.intent.budget = BudgetIntent(max=42000)
        assert derive_explore_seed(session).budget_max_usd == 42000

    def test_automatic_transmission(self) -> None:
        session = Session(id="s", constraints=ConstraintTiers(tier2=["PDK preferred"]))
        assert derive_explore_seed(session).transmission == "automatic"

    def test_empty_strings_become_none(self) -> None:
        session = Session(id="s")
        session.intent.vehicle = VehicleIntent(make="", model="Boxster")
        seed = derive_explore_seed(session)
        assert seed.make is None
        assert seed.model == "Boxster"
