"""Shared fixtures for Market Scout tests."""

from typing import Any

import pytest

from market_scout.config import settings as settings_module
from market_scout.core.types import BudgetIntent, ConstraintTiers, Intent, Session, VehicleIntent


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the user config at an empty location and reset the settings cache."""
    monkeypatch.setattr(settings_module, "USER_CONFIG_FILE", tmp_path / "no-user-config.yaml")
    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


def build_listing(
    vin: str | None = "WP0CB29894U660001",
    year: Any = 2004,
    make: str | None = "Porsche",
    model: str | None = "Boxster",
    trim: str | None = "S",
    transmission: str | None = "6-Speed Manual",
    exterior_color: str | None = "Speed Yellow",
    price: Any = 28000,
    miles: Any = 55000,
    state: str | None = "CA",
    url: str | None = None,
) -> dict[str, Any]:
    """Raw listing in the auto.dev response shape."""
    listing: dict[str, Any] = {
        "vehicle": {
            "year": year,
            "make": make,
            "model": model,
            "trim": trim,
            "transmission": transmission,
            "exteriorColor": exterior_color,
        },
        "retailListing": {
            "price": price,
            "miles": miles,
            "state": state,
            "dealer": "Coastal Motorcars",
            "vdp": url or (f"https://listings.example.com/{vin}" if vin else None),
        },
    }
    if vin:
        listing["vin"] = vin
    return listing


@pytest.fixture
def make_listing():
    """Factory for raw listings."""
    return build_listing


@pytest.fixture
def boxster_session() -> Session:
    """Session with a fully captured 986.2 Boxster S boundary."""
    return Session(
        id="boxster-hunt",
        intent=Intent(
            vehicle=VehicleIntent(make="Porsche", model="Boxster", trim="S"),
            budget=BudgetIntent(max=30000),
        ),
        constraints=ConstraintTiers(
            tier1=[
                "986.2 generation (2003–2004) only",
                "Manual transmission only",
                "Speed Yellow exterior must",
                "Clean title only",
            ],
            tier2=["Avoid salt-road cars", "Under 60k ideal", "Under 100k acceptable"],
            tier3=["Hardtop is nice to have"],
        ),
    )
