"""Email copy for the two deliverable tiers."""

from __future__ import annotations

from .models import PILLAR_ORDER, RenderedCopy, ScoredResult, Tier, normalize_tier, pillar_label

SENDER_NAME = "Jasper"
DEFAULT_MAX_SCORE = 25
EXEC_FLAG_LIMIT = 2

EXEC_SUBJECT = "Your Brand-to-GTM OS Executive Summary"
AUDIT_SUBJECT = "Your Brand-to-GTM OS Strategic Audit"

EXEC_NO_FLAGS = "No major red flags detected from the structured inputs."
AUDIT_NO_FLAGS = "None detected from structured rules."

AUDIT_HYPOTHESES = [
    "If your wins/losses are price-driven, strengthen economic value proof + differentiation narrative.",
    "If ROI is not repeatable, build a value architecture and case study system tied to measurable outcomes.",
    "If discounting is frequent, tighten packaging and value-based pricing anchors.",
]

# Short pillar names for the audit score list; the primary constraint uses pillar_label.
AUDIT_PILLAR_NAMES = {
    "positioning": "Positioning",
    "value_architecture": "Value Architecture",
    "pricing_packaging": "Pricing & Packaging",
    "gtm_focus": "GTM Focus",
    "measurement": "Measurement",
}

AUDIT_NEXT_STEPS = [
    "Confirm ICP + buying trigger clarity (Positioning)",
    "Convert outcomes to economic value (Value Architecture)",
    "Rebuild packaging and pricing guardrails (Pricing)",
    "Focus channels around one dominant motion (GTM)",
    "Align metrics around pipeline velocity and revenue signal (Measurement)",
]


def _bullets(items: list[str], empty_line: str) -> str:
    if not items:
        return f"- {empty_line}"
    return "\n".join(f"- {item}" for item in items)


def render_exec_summary(scored: ScoredResult, client_name: str = "", max_score: int = DEFAULT_MAX_SCORE) -> RenderedCopy:
    top_flags = scored.flags[:EXEC_FLAG_LIMIT]
    body_text = (
        f"Hi {client_name or 'there'},\n"
        "\n"
        "Your Brand-to-GTM OS Executive Summary is ready.\n"
        "\n"
        f"Overall alignment: {scored.band} (Score: {scored.total}/{max_score})\n"
        f"Primary constraint: {pillar_label(scored.primary_constraint)}\n"
        "\n"
        "Key observations:\n"
        f"{_bullets(top_flags, EXEC_NO_FLAGS)}\n"
        "\n"
        "Next step:\n"
        "Reply to this email or book your 30-minute intro call to walk through the findings "
        "and decide whether a full Strategic Audit ($499) is warranted.\n"
        "\n"
        f"— {SENDER_NAME}\n"
    )
    return RenderedCopy(subject=EXEC_SUBJECT, body_text=body_text)


def render_audit(scored: ScoredResult, client_name: str = "", max_score: int = DEFAULT_MAX_SCORE) -> RenderedCopy:
    pillar_lines = "\n".join(
        f"- {AUDIT_PILLAR_NAMES.get(p, p)}: {scored.pillars.get(p, 0)}" for p in PILLAR_ORDER
    )
    hypotheses = "\n".join(f"- {h}" for h in AUDIT_HYPOTHESES)
    next_steps = "\n".join(f"{i}) {step}" for i, step in enumerate(AUDIT_NEXT_STEPS, start=1))

    body_text = (
        f"Hi {client_name or 'there'},\n"
        "\n"
        "Your Brand-to-GTM OS Strategic Audit is ready.\n"
        "\n"
        f"Alignment: {scored.band} (Score: {scored.total}/{max_score})\n"
        "\n"
        "Pillar scores (0–5):\n"
        f"{pillar_lines}\n"
        "\n"
        "Primary constraint:\n"
        f"- {pillar_label(scored.primary_constraint)}\n"
        "\n"
        "Risk flags:\n"
        f"{_bullets(scored.flags, AUDIT_NO_FLAGS)}\n"
        "\n"
        "Working hypotheses (v1):\n"
        f"{hypotheses}\n"
        "\n"
        "Recommended next steps:\n"
        f"{next_steps}\n"
        "\n"
        "Reply to confirm your 60-minute review session time.\n"
        "\n"
        f"— {SENDER_NAME}\n"
    )
    return RenderedCopy(subject=AUDIT_SUBJECT, body_text=body_text)


def render(tier: object, scored: ScoredResult, client_name: str = "", max_score: int = DEFAULT_MAX_SCORE) -> RenderedCopy:
    """Render subject and body text for a tier. Unknown tiers render the executive summary."""
    if normalize_tier(tier) == Tier.AUDIT:
        return render_audit(scored, client_name, max_score)
    return render_exec_summary(scored, client_name, max_score)
