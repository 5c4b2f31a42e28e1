"""Core data types for Market Scout."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class AgentState(str, Enum):
    """Conversation states, in pipeline order."""

    INIT = "S0_INIT"
    CAPTURE = "S1_CAPTURE"
    CONFIRM = "S2_CONFIRM"
    EXPLORE = "S3_EXPLORE"
    DECIDE = "S4_DECIDE"
    WATCH = "S5_WATCH"
    ITERATE = "S6_ITERATE"
    CLOSE = "S7_CLOSE"


GoalType = Literal["vehicle_hunt", "part_sourcing", "styling_package"]
Verdict = Literal["ACCEPT", "CONDITIONAL", "REJECT"]
Bias = Literal["low", "medium", "high"]
Cadence = Literal["daily", "twice_weekly", "weekly"]
Transmission = Literal["manual", "automatic", "either"]


# =============================================================================
# Intent
# =============================================================================


class VehicleIntent(BaseModel):
    """Structured vehicle descriptors captured from the user."""

    make: str | None = None
    model: str | None = None
    gen: str | None = Field(default=None, description="Generation token, e.g. 986.2 or E92")
    trim: str | None = None
    year_range: str | None = Field(default=None, description="YYYY-YYYY")
    body_style: str | None = None
    transmission: str | None = None
    color: str | None = None
    engine: str | None = None


class UsageIntent(BaseModel):
    """How the vehicle will be used."""

    street_bias: Bias | None = None
    track_bias: Bias | None = None
    show_bias: Bias | None = None


class BudgetIntent(BaseModel):
    """Budget ceiling in USD plus free-text notes."""

    max: float | None = None
    notes: str | None = None


class Intent(BaseModel):
    """What the user is trying to acquire."""

    goal_type: GoalType = "vehicle_hunt"
    vehicle: VehicleIntent = Field(default_factory=VehicleIntent)
    usage: UsageIntent | None = None
    horizon: Literal["short_term", "long_term"] | None = None
    budget: BudgetIntent | None = None


# =============================================================================
# Constraints and taste
# =============================================================================


class ConstraintTiers(BaseModel):
    """Free-text rules split into non-negotiable, strong and nice-to-have tiers."""

    tier1: list[str] = Field(default_factory=list, description="Non-negotiable")
    tier2: list[str] = Field(default_factory=list, description="Strong preference")
    tier3: list[str] = Field(default_factory=list, description="Nice to have")

    def all_text(self) -> list[str]:
        """All rules in tier order."""
        return [*self.tier1, *self.tier2, *self.tier3]


class Aesthetics(BaseModel):
    aggression: Bias = "medium"
    branding: Literal["subtle", "medium", "loud"] = "subtle"


class Authenticity(BaseModel):
    oem: Literal["required", "preferred"] = "preferred"
    repro: Literal["no", "conditional"] = "conditional"


class Taste(BaseModel):
    """Explicit rejection rules plus categorical aesthetic preferences."""

    era_correctness: Literal["strict", "medium", "flexible"] = "medium"
    materials_allowed: list[str] = Field(default_factory=list)
    materials_excluded: list[str] = Field(default_factory=list)
    aesthetics: Aesthetics = Field(default_factory=Aesthetics)
    authenticity: Authenticity = Field(default_factory=Authenticity)
    rejection_rules: list[str] = Field(default_factory=list)


class CanonicalBoundary(BaseModel):
    """Authoritative decision boundary derived from the session.

    This, not any model-proposed boundary, gates candidates and keys watches.
    """

    tier1: list[str] = Field(default_factory=list)
    tier2: list[str] = Field(default_factory=list)
    hard_rejections: list[str] = Field(default_factory=list)


# =============================================================================
# Market artifacts
# =============================================================================


class Candidate(BaseModel):
    """A scored listing (or placeholder) presented to the user."""

    id: str = Field(..., description="Stable identifier")
    title: str
    url: str | None = None
    images: list[str] | None = None
    verdict: Verdict = "CONDITIONAL"
    score: int = Field(default=0, ge=0, le=100)
    rationale: list[str] = Field(default_factory=list)
    is_placeholder: bool = False


class ExploreSeed(BaseModel):
    """Provider-queryable projection of intent and constraints.

    Every field is optional; ``None`` means unconstrained on that axis.
    """

    make: str | None = None
    model: str | None = None
    trim: str | None = None
    generation: str | None = None
    year_min: int | None = None
    year_max: int | None = None
    transmission: Transmission = "either"
    exterior_color: str | None = None

    # Not provider-queryable; scoring hints only
    title_clean: bool = False
    avoid_salt_history: bool = False
    mileage_ideal_max: int | None = None
    mileage_ok_max: int | None = None

    budget_max_usd: float | None = None


class CandidateSignals(BaseModel):
    """Flat, provider-agnostic extraction from one raw listing."""

    year: int | None = None
    make: str | None = None
    model: str | None = None
    trim: str | None = None
    transmission: str | None = None
    exterior_color: str | None = None
    price: float | None = None
    miles: float | None = None
    state: str | None = None
    dealer: str | None = None
    url: str | None = None
    photo: str | None = None
    vin: str | None = None
    raw_text: str = ""


class GeographyHint(BaseModel):
    include: list[str] | None = None
    exclude: list[str] | None = None
    deprioritize: list[str] | None = None


class WatchSpec(BaseModel):
    """Persisted monitoring specification for a boundary."""

    must_have: list[str] = Field(default_factory=list)
    acceptable: list[str] = Field(default_factory=list)
    reject: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    geography: GeographyHint | None = None
    budget: BudgetIntent | None = None
    cadence: Cadence | None = None
    search_strings: dict[str, list[str]] | None = None


# =============================================================================
# Decisions
# =============================================================================


class ActDecision(BaseModel):
    action: Literal["ACT"] = "ACT"
    rationale: list[str] = Field(default_factory=list)
    selected: Candidate


class WatchDecision(BaseModel):
    action: Literal["WATCH"] = "WATCH"
    rationale: list[str] = Field(default_factory=list)
    watch_seed_summary: list[str] = Field(default_factory=list)
    blockers: list[str] = Field(default_factory=list)


class ReviseDecision(BaseModel):
    action: Literal["REVISE"] = "REVISE"
    rationale: list[str] = Field(default_factory=list)
    suggested_edits: list[str] = Field(default_factory=list)


Decision = Annotated[
    Union[ActDecision, WatchDecision, ReviseDecision],
    Field(discriminator="action"),
]


# =============================================================================
# Session
# =============================================================================


class Session(BaseModel):
    """One conversation's state.

    Pipeline steps never mutate a session in place; each returns a deep copy.
    """

    id: str = Field(..., description="Unique session ID")
    state: AgentState = AgentState.INIT
    goal_type: GoalType = "vehicle_hunt"
    intent: Intent = Field(default_factory=Intent)
    constraints: ConstraintTiers = Field(default_factory=ConstraintTiers)
    taste: Taste = Field(default_factory=Taste)
    finalists: list[Candidate] = Field(default_factory=list)
    discovery: list[Candidate] = Field(default_factory=list)
    watch: WatchSpec | None = None
    last_decision: Decision | None = None
    last_user_message: str | None = None
    notes: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def copy_for_turn(self) -> Session:
        """Deep copy used as the working session of a pipeline step."""
        return self.model_copy(deep=True)
