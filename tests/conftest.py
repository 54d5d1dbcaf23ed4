"""
Pytest fixtures for diagnostic tests. The rule configuration cache is reset
around each test so environment overrides do not leak between tests.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from gtm_diagnostic.core.config import get_rule_config

WIN = "Why do you most often win deals?"
LOSE = "Why do you most often lose deals?"
DESCRIBE = "Do customers describe your company consistently?"
ROI = "Can you quantify ROI for most customers?"
LEAD_WITH = "Sales conversations primarily lead with:"
METRICS = "What financial metrics do customers see improve due to your product?"
DISCOUNTS = "How often are discounts required to close deals?"
TIERS = "Do customers clearly understand your pricing tiers?"
MARGIN = "What is your gross margin (%)?"
CAC = "Do you know CAC by channel?"
GROWTH = "How would you rate your growth status?"
MEASURED_BY = "Marketing is measured primarily by:"
ATTRIBUTION = "Is attribution trusted internally?"
FORECAST = "Are revenue forecasts accurate within 10%?"

GENERATED_AT = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_rule_config(monkeypatch):
    monkeypatch.delenv("DIAGNOSTIC_RULES_PATH", raising=False)
    get_rule_config.cache_clear()
    yield
    get_rule_config.cache_clear()


@pytest.fixture
def config():
    return get_rule_config()


@pytest.fixture
def strong_answers():
    """Three positive rules; 5/5/5/3/3 with no flags."""
    return {
        WIN: "Clear differentiation",
        ROI: "Yes — documented & repeatable",
        MARGIN: "75%+",
    }


@pytest.fixture
def mixed_answers():
    """The realistic questionnaire used by the smoke test; fires six flags."""
    return {
        WIN: "Clear differentiation",
        LOSE: "Price",
        DESCRIBE: "Often unclear",
        ROI: "Yes — documented & repeatable",
        LEAD_WITH: "Financial ROI",
        DISCOUNTS: "Sometimes (10–40%)",
        TIERS: "Often confused",
        MARGIN: "75%+",
        CAC: "No",
        GROWTH: "Plateauing",
        MEASURED_BY: "Revenue",
        ATTRIBUTION: "No",
        FORECAST: "No",
    }


MIXED_FLAGS = [
    "Pricing pressure indicates weak value anchoring.",
    "Positioning clarity issue.",
    "Pricing structure may be unclear.",
    "Channel economics unclear.",
    "Attribution credibility gap.",
    "Forecast reliability risk.",
]
