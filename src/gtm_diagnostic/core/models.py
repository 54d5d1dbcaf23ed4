"""Pydantic data models: the shared business objects.

The scoring engine, copy renderer, report builder and server all exchange
these models. Rule configuration models are frozen so a validated table can
be shared across requests.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SCHEMA_VERSION = "1.0"
UNKNOWN_BAND = "Unknown"


class Pillar(str, Enum):
    """The five evaluation dimensions, in tie-break order."""

    POSITIONING = "positioning"
    VALUE_ARCHITECTURE = "value_architecture"
    PRICING_PACKAGING = "pricing_packaging"
    GTM_FOCUS = "gtm_focus"
    MEASUREMENT = "measurement"


PILLAR_ORDER: tuple[str, ...] = tuple(p.value for p in Pillar)

PILLAR_LABELS = {
    Pillar.POSITIONING.value: "Positioning & Category",
    Pillar.VALUE_ARCHITECTURE.value: "Value Architecture",
    Pillar.PRICING_PACKAGING.value: "Pricing & Packaging",
    Pillar.GTM_FOCUS.value: "GTM Focus",
    Pillar.MEASUREMENT.value: "Measurement",
}


def pillar_label(key: str) -> str:
    """Display name for a pillar key. Unknown keys are returned unchanged."""
    return PILLAR_LABELS.get(key, key)


class Tier(str, Enum):
    """Output mode."""

    EXEC = "exec"
    AUDIT = "audit"


TIER_ALIASES = {
    "exec": Tier.EXEC,
    "audit": Tier.AUDIT,
    "full": Tier.AUDIT,
}


def normalize_tier(value: object) -> Tier:
    """Map a raw tier value to a Tier. "full" is an alias for audit; anything unrecognized is exec."""
    if isinstance(value, Tier):
        return value
    if not isinstance(value, str):
        return Tier.EXEC
    return TIER_ALIASES.get(value.strip().lower(), Tier.EXEC)


class PillarBand(str, Enum):
    """Qualitative band for a single pillar score."""

    STRONG = "Strong"
    MIXED = "Mixed"
    AT_RISK = "At Risk"


# ─── Rule configuration ──────────────────────────────────────────────────────


class Rule(BaseModel):
    """One condition -> delta rule. The flag is surfaced to the client when the rule fires."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    delta: int
    flag: Optional[str] = None


class AlignmentBand(BaseModel):
    """Inclusive total-score range mapped to a label."""

    model_config = ConfigDict(frozen=True)

    min: int
    max: int
    label: str

    @model_validator(mode="after")
    def _check_range(self) -> "AlignmentBand":
        if self.min > self.max:
            raise ValueError(f"band {self.label!r} has min {self.min} > max {self.max}")
        return self

    def contains(self, total: int) -> bool:
        return self.min <= total <= self.max


class RuleConfig(BaseModel):
    """A complete, validated scoring configuration."""

    model_config = ConfigDict(frozen=True)

    version: str = "v1"
    pillar_base_score: int = 3
    pillar_min: int = 0
    pillar_max: int = 5
    score_rules: dict[Pillar, tuple[Rule, ...]] = Field(default_factory=dict)
    alignment_bands: tuple[AlignmentBand, ...]

    @model_validator(mode="after")
    def _check_bounds(self) -> "RuleConfig":
        if self.pillar_min > self.pillar_max:
            raise ValueError(f"pillar_min {self.pillar_min} > pillar_max {self.pillar_max}")
        if not self.alignment_bands:
            raise ValueError("alignment_bands must not be empty")
        return self

    @property
    def max_total(self) -> int:
        return self.pillar_max * len(PILLAR_ORDER)

    def rules_for(self, pillar: str) -> tuple[Rule, ...]:
        return self.score_rules.get(Pillar(pillar), ())


# ─── Scoring output ──────────────────────────────────────────────────────────


class ScoredResult(BaseModel):
    """Deterministic output of the scoring engine."""

    total: int
    band: str
    pillars: dict[str, int] = Field(description="Clamped score per pillar, in fixed pillar order")
    primary_constraint: str = Field(description="Lowest-scoring pillar key")
    flags: list[str] = Field(default_factory=list, description="Fired rule flags, in evaluation order")


class RenderedCopy(BaseModel):
    """Email subject and plain-text body."""

    subject: str
    body_text: str


# ─── Report document ─────────────────────────────────────────────────────────


class ClientInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None


class ReportInputs(BaseModel):
    answers_raw: dict[str, Optional[str]]
    answers_normalized: dict[str, Optional[str]]


class PillarDetail(BaseModel):
    key: str
    label: str
    score: int
    max: int
    band: PillarBand
    risk_note: Optional[str] = None


class PrimaryConstraintDetail(BaseModel):
    key: str
    label: str
    score: int
    explanation: str


class ReportFlag(BaseModel):
    key: str = Field(description="Synthetic key: flag_1, flag_2, ...")
    message: str
    severity: str = "medium"


class ScoringDetail(BaseModel):
    rules_version: str
    overall_score: int
    max_score: int
    band: str
    pillars: dict[str, PillarDetail]
    primary_constraint: PrimaryConstraintDetail
    flags: list[ReportFlag]


class Narrative(BaseModel):
    headline: str
    summary: str
    primary_constraint_focus: str
    key_observations: list[str]
    what_to_do_next: list[str]


class EmailDeliverable(BaseModel):
    subject: str
    body_text: str


class PdfDeliverable(BaseModel):
    status: str = "pending"
    url: Optional[str] = None
    template: str
    page_estimate: int


class Deliverables(BaseModel):
    email: EmailDeliverable
    pdf: PdfDeliverable


class UpgradeOffer(BaseModel):
    product: str
    price_usd: int
    description: str
    call_to_action: str


class ExecTierSection(BaseModel):
    next_30_days: list[str]
    upgrade_offer: UpgradeOffer


class AppendixAnswer(BaseModel):
    question: str
    answer: Optional[str] = None
    notes: Optional[str] = None


class FullTierSection(BaseModel):
    """Audit-only sections. SWOT, competitive, pricing and roadmap are placeholders in v1."""

    swot: dict[str, list[str]]
    competitive_landscape: dict[str, Optional[Any]]
    pricing_audit: dict[str, Optional[Any]]
    roadmap: dict[str, list[str]]
    appendix: dict[str, list[AppendixAnswer]]


class Report(BaseModel):
    """Versioned diagnostic report. Exactly one of exec_tier / full_tier is set."""

    schema_version: str = SCHEMA_VERSION
    generated_at: datetime
    tier: Tier
    client: ClientInfo
    inputs: ReportInputs
    scoring: ScoringDetail
    narrative: Narrative
    deliverables: Deliverables
    exec_tier: Optional[ExecTierSection] = None
    full_tier: Optional[FullTierSection] = None

    @model_validator(mode="after")
    def _check_tier_section(self) -> "Report":
        if (self.exec_tier is None) == (self.full_tier is None):
            raise ValueError("report must carry exactly one of exec_tier or full_tier")
        expected = "full_tier" if self.tier == Tier.AUDIT else "exec_tier"
        if getattr(self, expected) is None:
            raise ValueError(f"{self.tier.value} report must carry {expected}")
        return self

    def to_document(self) -> dict:
        """JSON-ready dict. The absent tier section is omitted rather than null."""
        absent = "exec_tier" if self.exec_tier is None else "full_tier"
        return self.model_dump(mode="json", exclude={absent})
