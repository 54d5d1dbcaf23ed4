"""One diagnostic run: score, render copy, build report, shape the response.

The response carries the nested report plus the flat legacy fields that
existing automations read directly.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from .config import get_rule_config
from .models import RuleConfig, normalize_tier
from .rendering import render
from .report import build_report
from .scoring import score

logger = logging.getLogger(__name__)

RESPONSE_FIELDS = (
    "report",
    "report_json",
    "tier",
    "overall_score",
    "band",
    "primary_constraint",
    "pillar_scores",
    "flags",
    "email_subject",
    "email_body_text",
    "client_email",
)


def run_diagnostic(
    answers: object,
    tier: object = "exec",
    client_name: str = "",
    client_email: str = "",
    config: Optional[RuleConfig] = None,
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Run the full diagnostic and return the response document."""
    config = config or get_rule_config()
    tier = normalize_tier(tier)

    scored = score(answers, config)
    copy = render(tier, scored, client_name, max_score=config.max_total)
    report = build_report(tier, client_name, client_email, answers, scored, config, copy, generated_at=generated_at)
    document = report.to_document()

    logger.info(
        "Diagnostic complete: tier=%s score=%d band=%s primary=%s flags=%d",
        tier.value, scored.total, scored.band, scored.primary_constraint, len(scored.flags),
    )

    return {
        "report": document,
        "report_json": json.dumps(document, ensure_ascii=False),
        "tier": tier.value,
        "overall_score": scored.total,
        "band": scored.band,
        "primary_constraint": scored.primary_constraint,
        "pillar_scores": dict(scored.pillars),
        "flags": list(scored.flags),
        "email_subject": copy.subject,
        "email_body_text": copy.body_text,
        "client_email": client_email,
    }
