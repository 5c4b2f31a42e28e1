"""Candidate signal extraction from raw auto.dev listings."""

from __future__ import annotations

import math
from typing import Any

from market_scout.core.types import Candidate, CandidateSignals, Verdict

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619


def to_number(value: Any) -> float | None:
    """Coerce numbers and numeric strings; anything else is unknown."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").lstrip("$").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any) -> str | None:
    """Trimmed string, or None for non-strings and blanks."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def listing_to_signals(listing: Any) -> CandidateSignals:
    """Flatten one raw listing. Never raises on missing or odd-typed fields."""
    raw = _as_mapping(listing)
    vehicle = _as_mapping(raw.get("vehicle"))
    retail = _as_mapping(raw.get("retailListing"))

    year = to_number(vehicle.get("year"))
    make = to_text(vehicle.get("make"))
    model = to_text(vehicle.get("model"))
    trim = to_text(vehicle.get("trim"))
    transmission = to_text(vehicle.get("transmission"))
    exterior_color = to_text(vehicle.get("exteriorColor"))
    state = to_text(retail.get("state"))
    dealer = to_text(retail.get("dealer"))

    raw_text = " ".join(
        part
        for part in (
            make,
            model,
            trim,
            transmission,
            exterior_color,
            to_text(vehicle.get("engine")),
            to_text(vehicle.get("series")),
            to_text(retail.get("city")),
            state,
            dealer,
        )
        if part
    ).lower()

    return CandidateSignals(
        year=int(year) if year is not None else None,
        make=make,
        model=model,
        trim=trim,
        transmission=transmission,
        exterior_color=exterior_color,
        price=to_number(retail.get("price")),
        miles=to_number(retail.get("miles")),
        state=state,
        dealer=dealer,
        url=to_text(retail.get("vdp")) or to_text(raw.get("@id")),
        photo=to_text(retail.get("primaryImage")),
        vin=to_text(raw.get("vin")) or to_text(vehicle.get("vin")),
        raw_text=raw_text,
    )


def listing_key(listing: Any) -> str | None:
    """Deduplication key: ``vin:<VIN>`` when present, else ``url:<URL>``."""
    raw = _as_mapping(listing)
    vehicle = _as_mapping(raw.get("vehicle"))
    retail = _as_mapping(raw.get("retailListing"))
    vin = to_text(raw.get("vin")) or to_text(vehicle.get("vin"))
    if vin:
        return f"vin:{vin}"
    url = to_text(retail.get("vdp")) or to_text(raw.get("@id"))
    if url:
        return f"url:{url}"
    return None


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def stable_candidate_id(signals: CandidateSignals) -> str:
    """Deterministic id from VIN-or-URL plus year/make/model/trim/price.

    32-bit FNV-1a over the ``|``-joined non-empty parts, so an unchanged
    listing keeps its identity across retrievals.
    """
    parts = [
        signals.vin,
        signals.url,
        str(signals.year) if signals.year else None,
        signals.make,
        signals.model,
        signals.trim,
        _format_number(signals.price) if signals.price else None,
    ]
    payload = "|".join(part for part in parts if part)
    digest = _FNV_OFFSET
    for byte in payload.encode("utf-8"):
        digest ^= byte
        digest = (digest * _FNV_PRIME) & 0xFFFFFFFF
    return f"autodev-{digest:x}"


def candidate_title(signals: CandidateSignals) -> str:
    """Human title: ``2004 Porsche Boxster S - $45,000, 61,000 mi, CA``."""
    head = " ".join(
        str(part)
        for part in (signals.year, signals.make, signals.model, signals.trim)
        if part
    )
    meta: list[str] = []
    if signals.price is not None:
        meta.append(f"${round(signals.price):,}")
    if signals.miles is not None:
        meta.append(f"{round(signals.miles):,} mi")
    if signals.state:
        meta.append(signals.state)
    title = f"{head} - {', '.join(meta)}" if meta else head
    return title.strip() or "Untitled listing"


def build_candidate(
    signals: CandidateSignals,
    score: int,
    verdict: Verdict,
    rationale: list[str],
) -> Candidate:
    """Candidate artifact for a scored signal record."""
    return Candidate(
        id=stable_candidate_id(signals),
        title=candidate_title(signals),
        url=signals.url,
        images=[signals.photo] if signals.photo else None,
        verdict=verdict,
        score=score,
        rationale=rationale,
        is_placeholder=False,
    )
