"""Scoring rule table.

The table is plain data: for each pillar, an ordered list of
question/answer conditions with a score delta and an optional client-facing
flag. It is validated once into an immutable RuleConfig and then passed
explicitly into the scoring engine.

Set DIAGNOSTIC_RULES_PATH to a JSON file with the same shape to replace the
built-in table.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .models import RuleConfig

logger = logging.getLogger(__name__)

RULES_PATH_ENV = "DIAGNOSTIC_RULES_PATH"


class RuleConfigError(ValueError):
    """The rule table could not be loaded or failed validation."""


DEFAULT_RULES: dict[str, Any] = {
    "version": "v1",
    "pillar_base_score": 3,
    "pillar_min": 0,
    "pillar_max": 5,
    "score_rules": {
        "positioning": [
            {"question": "Why do you most often win deals?", "answer": "Lowest price", "delta": -2, "flag": "Price-led wins suggest commoditization risk."},
            {"question": "Why do you most often lose deals?", "answer": "Price", "delta": -2, "flag": "Pricing pressure indicates weak value anchoring."},
            {"question": "Why do you most often lose deals?", "answer": "Lack of differentiation", "delta": -2, "flag": "Differentiation gap in competitive deals."},
            {"question": "Do customers describe your company consistently?", "answer": "Often unclear", "delta": -2, "flag": "Positioning clarity issue."},
            {"question": "Why do you most often win deals?", "answer": "Clear differentiation", "delta": 2},
            {"question": "Why do you most often win deals?", "answer": "Brand trust", "delta": 1},
        ],
        "value_architecture": [
            {"question": "Can you quantify ROI for most customers?", "answer": "Yes — documented & repeatable", "delta": 3},
            {"question": "Can you quantify ROI for most customers?", "answer": "No", "delta": -3, "flag": "ROI not clearly quantified."},
            {"question": "Sales conversations primarily lead with:", "answer": "Features", "delta": -2, "flag": "Feature-led selling limits pricing power."},
            {"question": "Sales conversations primarily lead with:", "answer": "Financial ROI", "delta": 2},
            {"question": "What financial metrics do customers see improve due to your product?", "answer": "Not clearly defined", "delta": -2, "flag": "Economic value not clearly anchored to metrics."},
        ],
        "pricing_packaging": [
            {"question": "How often are discounts required to close deals?", "answer": "Frequently (40%+)", "delta": -3, "flag": "Frequent discounting compresses margin."},
            {"question": "How often are discounts required to close deals?", "answer": "Sometimes (10–40%)", "delta": -1},
            {"question": "Do customers clearly understand your pricing tiers?", "answer": "Often confused", "delta": -2, "flag": "Pricing structure may be unclear."},
            {"question": "What is your gross margin (%)?", "answer": "Under 50%", "delta": -2},
            {"question": "What is your gross margin (%)?", "answer": "75%+", "delta": 2},
        ],
        "gtm_focus": [
            {"question": "Do you know CAC by channel?", "answer": "No", "delta": -2, "flag": "Channel economics unclear."},
            {"question": "How would you rate your growth status?", "answer": "Stalled", "delta": -2, "flag": "Growth stall indicator."},
            {"question": "How would you rate your growth status?", "answer": "Plateauing", "delta": -1},
        ],
        "measurement": [
            {"question": "Marketing is measured primarily by:", "answer": "Leads", "delta": -2, "flag": "Lead-focused measurement may signal vanity metrics."},
            {"question": "Marketing is measured primarily by:", "answer": "Revenue", "delta": 2},
            {"question": "Is attribution trusted internally?", "answer": "No", "delta": -2, "flag": "Attribution credibility gap."},
            # Key has no trailing "?"; the normalized lookup still matches the questionnaire wording.
            {"question": "Are revenue forecasts accurate within 10%", "answer": "No", "delta": -2, "flag": "Forecast reliability risk."},
        ],
    },
    # The top band runs past the achievable maximum of 25. Kept as published.
    "alignment_bands": [
        {"min": 24, "max": 30, "label": "Structurally Aligned"},
        {"min": 18, "max": 23, "label": "Operational Friction"},
        {"min": 12, "max": 17, "label": "Strategic Leakage"},
        {"min": 0, "max": 11, "label": "Structural Misalignment"},
    ],
}


def build_rule_config(data: dict[str, Any]) -> RuleConfig:
    """Validate a raw rule table into a RuleConfig."""
    try:
        return RuleConfig.model_validate(data)
    except ValidationError as exc:
        raise RuleConfigError(f"Invalid rule configuration: {exc}") from exc


def load_rule_config(path: str | Path) -> RuleConfig:
    """Load and validate a rule table from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RuleConfigError(f"Could not read rule configuration from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuleConfigError(f"Rule configuration in {path} must be a JSON object")
    config = build_rule_config(data)
    logger.info("Loaded rule configuration %s from %s", config.version, path)
    return config


@lru_cache(maxsize=1)
def get_rule_config() -> RuleConfig:
    """Return the process-wide rule configuration, loading it on first use."""
    path: Optional[str] = os.environ.get(RULES_PATH_ENV)
    if path:
        return load_rule_config(path)
    return build_rule_config(DEFAULT_RULES)
