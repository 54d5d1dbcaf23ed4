"""Versioned report document.

Turns a ScoredResult plus the original answers into the nested report that
downstream automation stores and renders. The narrative is templated text;
the audit-only SWOT, competitive, pricing and roadmap sections are empty
placeholders in schema 1.0.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .answers import raw_answers
from .models import (
    PILLAR_ORDER,
    AppendixAnswer,
    ClientInfo,
    Deliverables,
    EmailDeliverable,
    ExecTierSection,
    FullTierSection,
    Narrative,
    PdfDeliverable,
    PillarBand,
    PillarDetail,
    PrimaryConstraintDetail,
    RenderedCopy,
    Report,
    ReportFlag,
    ReportInputs,
    RuleConfig,
    ScoredResult,
    ScoringDetail,
    Tier,
    UpgradeOffer,
    normalize_tier,
    pillar_label,
)
from .rendering import EXEC_NO_FLAGS

DEFAULT_FLAG_SEVERITY = "medium"
NARRATIVE_FLAG_LIMIT = 4
RISK_NOTE_THRESHOLD = 2

PDF_PAGE_ESTIMATES = {Tier.EXEC: 3, Tier.AUDIT: 10}
PDF_TEMPLATES = {Tier.EXEC: "exec_summary_v1", Tier.AUDIT: "strategic_audit_v1"}

# Report field name -> exact questionnaire wording.
NORMALIZED_FIELDS: list[tuple[str, str]] = [
    ("company_stage", "What stage is your company?"),
    ("annual_revenue", "What is your annual revenue range?"),
    ("primary_icp", "Who is your primary ideal customer (ICP)?"),
    ("average_deal_size", "What is your average deal size?"),
    ("sales_cycle_length", "How long is your typical sales cycle?"),
    ("primary_channel", "What is your primary acquisition channel?"),
    ("win_reason", "Why do you most often win deals?"),
    ("loss_reason", "Why do you most often lose deals?"),
    ("description_consistency", "Do customers describe your company consistently?"),
    ("roi_quantified", "Can you quantify ROI for most customers?"),
    ("sales_lead_with", "Sales conversations primarily lead with:"),
    ("financial_metrics_improved", "What financial metrics do customers see improve due to your product?"),
    ("discount_frequency", "How often are discounts required to close deals?"),
    ("pricing_tier_clarity", "Do customers clearly understand your pricing tiers?"),
    ("gross_margin", "What is your gross margin (%)?"),
    ("cac_by_channel_known", "Do you know CAC by channel?"),
    ("growth_status", "How would you rate your growth status?"),
    ("marketing_measured_by", "Marketing is measured primarily by:"),
    ("attribution_trusted", "Is attribution trusted internally?"),
    ("forecast_accuracy_within_10pct", "Are revenue forecasts accurate within 10%?"),
]

RISK_NOTES = {
    "positioning": "Buyers are not hearing a distinct reason to choose you, so deals drift toward price comparison.",
    "value_architecture": "Customer outcomes are not translated into economic value, which weakens pricing power.",
    "pricing_packaging": "Discounting and unclear packaging are eroding margin and deal quality.",
    "gtm_focus": "Channel economics and growth momentum are unclear, so spend is hard to direct.",
    "measurement": "Leadership lacks trusted revenue signal, so planning and attribution decisions carry risk.",
}

CONSTRAINT_EXPLANATIONS = {
    "positioning": "Positioning is the weakest link: until buyers can repeat why you are different, every downstream motion works harder than it should.",
    "value_architecture": "Value architecture is the weakest link: without quantified, repeatable ROI the price conversation defaults to features and discounts.",
    "pricing_packaging": "Pricing and packaging is the weakest link: margin is leaking through discounting and tiers customers do not understand.",
    "gtm_focus": "GTM focus is the weakest link: without clear channel economics, investment is spread across motions that do not compound.",
    "measurement": "Measurement is the weakest link: the team cannot see which activities create revenue, so fixes elsewhere are hard to verify.",
}

BAND_HEADLINES = {
    "Structurally Aligned": "Your brand, value story and go-to-market engine are pulling in the same direction.",
    "Operational Friction": "The strategy holds together, but friction in execution is costing you efficiency.",
    "Strategic Leakage": "Value is leaking between what you deliver and what you capture.",
    "Structural Misalignment": "Core parts of your go-to-market system are working against each other.",
}
DEFAULT_HEADLINE = "Your Brand-to-GTM OS diagnostic is complete."

WHAT_TO_DO_NEXT = [
    "Review the primary constraint with your leadership team and agree on a single owner.",
    "Pick one flagged issue and define the metric that proves it is fixed.",
    "Re-run the diagnostic in 90 days to measure movement across all five pillars.",
]

NEXT_30_DAYS = [
    "Write a one-sentence positioning statement and test it on five recent customers.",
    "Document one customer ROI story with before/after financial metrics.",
    "Set a discount approval guardrail and track every exception.",
    "Pick the single channel with the best known CAC and concentrate spend there.",
    "Agree on one revenue metric marketing and sales both report against.",
]

UPGRADE_OFFER = UpgradeOffer(
    product="Strategic Audit",
    price_usd=499,
    description="A full Brand-to-GTM OS audit with pillar-by-pillar findings, competitive context and a 90-day roadmap.",
    call_to_action="Reply to this email or book your 30-minute intro call.",
)


def pillar_band(score: int) -> PillarBand:
    if score >= 4:
        return PillarBand.STRONG
    if score >= 3:
        return PillarBand.MIXED
    return PillarBand.AT_RISK


def normalized_answers(answers: object) -> dict[str, Optional[str]]:
    """Project the answer set onto the fixed report fields by exact question key."""
    raw = raw_answers(answers)
    return {field: raw.get(question) for field, question in NORMALIZED_FIELDS}


def _pillar_details(scored: ScoredResult, config: RuleConfig) -> dict[str, PillarDetail]:
    details = {}
    for p in PILLAR_ORDER:
        value = scored.pillars.get(p, config.pillar_base_score)
        details[p] = PillarDetail(
            key=p,
            label=pillar_label(p),
            score=value,
            max=config.pillar_max,
            band=pillar_band(value),
            risk_note=RISK_NOTES.get(p) if value <= RISK_NOTE_THRESHOLD else None,
        )
    return details


def _narrative(scored: ScoredResult, max_score: int) -> Narrative:
    label = pillar_label(scored.primary_constraint)
    observations = scored.flags[:NARRATIVE_FLAG_LIMIT] or [EXEC_NO_FLAGS]
    return Narrative(
        headline=BAND_HEADLINES.get(scored.band, DEFAULT_HEADLINE),
        summary=f"Overall alignment: {scored.band} ({scored.total}/{max_score}). Primary constraint: {label}.",
        primary_constraint_focus=f"Start with {label}. It is the lowest-scoring pillar and the main lever for improvement.",
        key_observations=observations,
        what_to_do_next=list(WHAT_TO_DO_NEXT),
    )


def _full_tier(answers: dict[str, Optional[str]]) -> FullTierSection:
    return FullTierSection(
        swot={"strengths": [], "weaknesses": [], "opportunities": [], "threats": []},
        competitive_landscape={"competitors": [], "positioning_map": None, "notes": None},
        pricing_audit={"current_model": None, "benchmarks": [], "recommendations": []},
        roadmap={"days_30": [], "days_60": [], "days_90": []},
        appendix={
            "answers": [AppendixAnswer(question=q, answer=a, notes=None) for q, a in answers.items()],
        },
    )


def build_report(
    tier: object,
    client_name: str,
    client_email: str,
    answers: object,
    scored: ScoredResult,
    config: RuleConfig,
    rendered_copy: RenderedCopy,
    generated_at: Optional[datetime] = None,
) -> Report:
    """Assemble the report for one diagnostic run.

    Args:
        tier: Raw or normalized tier; "full" is treated as audit, anything unknown as exec.
        client_name: Client display name; empty becomes null.
        client_email: Client email; empty becomes null.
        answers: The answer set that was scored.
        scored: Output of the scoring engine for these answers.
        config: The rule configuration used for scoring.
        rendered_copy: Email copy for the same tier.
        generated_at: Generation timestamp; defaults to now (UTC).

    Returns:
        A fresh Report. Inputs are not modified.
    """
    tier = normalize_tier(tier)
    raw = raw_answers(answers)
    max_score = config.max_total
    constraint = scored.primary_constraint

    scoring = ScoringDetail(
        rules_version=config.version,
        overall_score=scored.total,
        max_score=max_score,
        band=scored.band,
        pillars=_pillar_details(scored, config),
        primary_constraint=PrimaryConstraintDetail(
            key=constraint,
            label=pillar_label(constraint),
            score=scored.pillars.get(constraint, config.pillar_base_score),
            explanation=CONSTRAINT_EXPLANATIONS.get(constraint, ""),
        ),
        flags=[
            ReportFlag(key=f"flag_{i}", message=message, severity=DEFAULT_FLAG_SEVERITY)
            for i, message in enumerate(scored.flags, start=1)
        ],
    )

    deliverables = Deliverables(
        email=EmailDeliverable(subject=rendered_copy.subject, body_text=rendered_copy.body_text),
        pdf=PdfDeliverable(template=PDF_TEMPLATES[tier], page_estimate=PDF_PAGE_ESTIMATES[tier]),
    )

    return Report(
        generated_at=generated_at or datetime.now(timezone.utc),
        tier=tier,
        client=ClientInfo(name=client_name or None, email=client_email or None),
        inputs=ReportInputs(answers_raw=raw, answers_normalized=normalized_answers(raw)),
        scoring=scoring,
        narrative=_narrative(scored, max_score),
        deliverables=deliverables,
        exec_tier=ExecTierSection(next_30_days=list(NEXT_30_DAYS), upgrade_offer=UPGRADE_OFFER) if tier == Tier.EXEC else None,
        full_tier=_full_tier(raw) if tier == Tier.AUDIT else None,
    )
