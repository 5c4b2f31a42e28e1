"""Validated patches from the extraction model.

The model never writes session state directly. It returns a structured
object; this module validates it against a strict schema (rejecting the
whole object on any structural violation) and merges it into a session with
explicit per-field precedence.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from market_scout.core.types import BudgetIntent, Cadence, GeographyHint, Session
from market_scout.llm.exceptions import MalformedOutputError
from market_scout.utils.json_recovery import extract_json_object

logger = structlog.get_logger()

MAX_QUESTIONS = 4


def _to_string_list(value: Any) -> Any:
    """Coerce loose list-ish model output into a list of strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v)]
    if isinstance(value, dict):
        return [f"{k}: {v}" for k, v in value.items()]
    if isinstance(value, str):
        return [value] if value else []
    return value


def _normalize_cadence(value: Any) -> Cadence | None:
    if not value:
        return None
    text = str(value).lower().strip()
    if text in ("daily", "weekly"):
        return text  # type: ignore[return-value]
    if text in ("twice_weekly", "twice weekly", "2x weekly", "regular"):
        return "twice_weekly"
    return None


class _PatchModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class VehiclePatch(_PatchModel):
    make: str | None = None
    model: str | None = None
    gen: str | None = None
    trim: str | None = None
    year_range: str | None = None
    transmission: str | None = None
    color: str | None = None
    engine: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Alias keys the model sometimes emits
        if data.get("gen") is None and isinstance(data.get("generation"), str):
            data["gen"] = data["generation"]
        if data.get("color") is None and isinstance(data.get("exterior_color"), str):
            data["color"] = data["exterior_color"]
        return data

    @field_validator("year_range", mode="before")
    @classmethod
    def _year_range(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and len(value) == 2:
            start, end = (int(v) for v in value)
            return f"{start}-{end}"
        if isinstance(value, dict) and {"min", "max"} <= value.keys():
            return f"{int(value['min'])}-{int(value['max'])}"
        return value


class IntentPatch(_PatchModel):
    vehicle: VehiclePatch | None = None
    budget: BudgetIntent | None = None


class ConstraintsPatch(_PatchModel):
    tier1: list[str] | None = None
    tier2: list[str] | None = None
    tier3: list[str] | None = None


class TastePatch(_PatchModel):
    rejection_rules: list[str] | None = None


class SessionPatch(_PatchModel):
    intent: IntentPatch | None = None
    constraints: ConstraintsPatch | None = None
    taste: TastePatch | None = None


class BoundaryProposal(_PatchModel):
    """Model-proposed boundary. Informational only; never used for gating."""

    tier1: list[str] = Field(default_factory=list)
    tier2: list[str] = Field(default_factory=list)
    hard_rejections: list[str] = Field(default_factory=list)
    acceptable_compromises: list[str] = Field(default_factory=list)

    @field_validator("acceptable_compromises", mode="before")
    @classmethod
    def _compromises(cls, value: Any) -> Any:
        return _to_string_list(value)


class WatchProposal(_PatchModel):
    must_have: list[str] = Field(default_factory=list)
    acceptable: list[str] = Field(default_factory=list)
    reject: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    geography: GeographyHint | None = None
    budget: BudgetIntent | None = None
    cadence: Cadence | None = None
    search_strings: dict[str, list[str]] | None = None

    @field_validator("must_have", "acceptable", "reject", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _to_string_list(value)

    @field_validator("cadence", mode="before")
    @classmethod
    def _cadence(cls, value: Any) -> Cadence | None:
        return _normalize_cadence(value)


class ModelResponse(_PatchModel):
    """Everything the extraction model may return; every part is optional."""

    patch: SessionPatch | None = None
    questions: list[str] | None = Field(default=None, max_length=MAX_QUESTIONS)
    boundary: BoundaryProposal | None = None
    watch: WatchProposal | None = None


def parse_model_output(raw: str) -> ModelResponse:
    """Parse and validate raw model text.

    Raises:
        MalformedOutputError: If no JSON object is present or it fails the schema.
    """
    data = extract_json_object(raw)
    if data is None:
        raise MalformedOutputError("no JSON object found", raw=raw)
    try:
        return ModelResponse.model_validate(data)
    except (ValidationError, ValueError, TypeError) as e:
        raise MalformedOutputError(str(e), raw=raw) from e


def apply_patch(session: Session, patch: SessionPatch | None) -> Session:
    """Merge a validated patch into a copy of *session*.

    Precedence: a field is written only when the patch provides a value;
    provided constraint tiers and rejection rules replace the previous list.
    """
    merged = session.copy_for_turn()
    if patch is None:
        return merged

    if patch.intent is not None:
        if patch.intent.vehicle is not None:
            provided = patch.intent.vehicle.model_dump(exclude_none=True)
            merged.intent.vehicle = merged.intent.vehicle.model_copy(update=provided)
        if patch.intent.budget is not None:
            provided = patch.intent.budget.model_dump(exclude_none=True)
            current = merged.intent.budget or BudgetIntent()
            merged.intent.budget = current.model_copy(update=provided)

    if patch.constraints is not None:
        for tier in ("tier1", "tier2", "tier3"):
            rules = getattr(patch.constraints, tier)
            if rules is not None:
                setattr(merged.constraints, tier, list(rules))

    if patch.taste is not None and patch.taste.rejection_rules is not None:
        merged.taste.rejection_rules = list(patch.taste.rejection_rules)

    logger.debug("Applied session patch", session_id=merged.id)
    return merged

