import copy

import pytest

from conftest import CAC, FORECAST, GROWTH, MIXED_FLAGS, ROI, WIN
from gtm_diagnostic.core.config import DEFAULT_RULES, build_rule_config
from gtm_diagnostic.core.models import PILLAR_ORDER, UNKNOWN_BAND
from gtm_diagnostic.core.scoring import primary_constraint, resolve_band, score


def test_no_rules_fire_gives_base_scores(config):
    result = score({}, config)
    assert result.pillars == {p: 3 for p in PILLAR_ORDER}
    assert result.total == 15
    assert result.band == "Strategic Leakage"
    assert result.flags == []
    assert result.primary_constraint == "positioning"


def test_example_scenario(config, strong_answers):
    result = score(strong_answers, config)
    assert result.pillars == {
        "positioning": 5,
        "value_architecture": 5,
        "pricing_packaging": 5,
        "gtm_focus": 3,
        "measurement": 3,
    }
    assert result.total == 21
    assert result.band == "Operational Friction"
    assert result.primary_constraint == "gtm_focus"
    assert result.flags == []


def test_realistic_answers_fire_flags_in_evaluation_order(config, mixed_answers):
    result = score(mixed_answers, config)
    assert result.pillars == {
        "positioning": 1,
        "value_architecture": 5,
        "pricing_packaging": 2,
        "gtm_focus": 0,
        "measurement": 1,
    }
    assert result.total == 9
    assert result.band == "Structural Misalignment"
    assert result.primary_constraint == "gtm_focus"
    assert result.flags == MIXED_FLAGS


def test_forecast_rule_fires_through_normalized_key(config):
    result = score({FORECAST: "No"}, config)
    assert result.pillars["measurement"] == 1
    assert result.flags == ["Forecast reliability risk."]


def test_scores_clamp_to_pillar_bounds(config):
    result = score({CAC: "No", GROWTH: "Stalled"}, config)
    assert result.pillars["gtm_focus"] == 0
    assert result.flags == ["Channel economics unclear.", "Growth stall indicator."]


def test_answer_matching_tolerates_case_whitespace_and_punctuation(config):
    result = score({"  why do you most often win deals  ": "  clear DIFFERENTIATION. "}, config)
    assert result.pillars["positioning"] == 5


def test_malformed_answers_never_raise(config):
    for answers in (None, [], "text", {WIN: None}, {WIN: 2}, {1: "Clear differentiation"}):
        result = score(answers, config)
        assert result.total == 15


def test_pillar_scores_always_within_bounds(config, mixed_answers):
    everything_negative = {
        WIN: "Lowest price",
        ROI: "No",
        CAC: "No",
        GROWTH: "Stalled",
        FORECAST: "No",
    }
    for answers in (everything_negative, mixed_answers, {}):
        result = score(answers, config)
        assert all(0 <= v <= 5 for v in result.pillars.values())
        assert 0 <= result.total <= 25


def test_duplicate_flags_are_kept():
    rules = copy.deepcopy(DEFAULT_RULES)
    rules["score_rules"]["measurement"].append(
        {"question": "Do you know CAC by channel?", "answer": "No", "delta": 0, "flag": "Channel economics unclear."}
    )
    result = score({CAC: "No"}, build_rule_config(rules))
    assert result.flags == ["Channel economics unclear.", "Channel economics unclear."]


def test_scoring_is_deterministic_and_does_not_mutate_input(config, mixed_answers):
    before = dict(mixed_answers)
    first = score(mixed_answers, config)
    second = score(mixed_answers, config)
    assert first.model_dump_json() == second.model_dump_json()
    assert mixed_answers == before


def test_band_lookup_miss_returns_unknown():
    rules = copy.deepcopy(DEFAULT_RULES)
    rules["alignment_bands"] = [{"min": 0, "max": 5, "label": "Low"}]
    result = score({}, build_rule_config(rules))
    assert result.band == UNKNOWN_BAND


@pytest.mark.parametrize(
    "total,label",
    [(0, "Structural Misalignment"), (11, "Structural Misalignment"), (12, "Strategic Leakage"),
     (17, "Strategic Leakage"), (18, "Operational Friction"), (23, "Operational Friction"),
     (24, "Structurally Aligned"), (25, "Structurally Aligned")],
)
def test_band_boundaries(config, total, label):
    assert resolve_band(total, config) == label


def test_primary_constraint_ties_follow_pillar_order():
    pillars = {"positioning": 4, "value_architecture": 2, "pricing_packaging": 3, "gtm_focus": 2, "measurement": 2}
    assert primary_constraint(pillars) == "value_architecture"
    pillars = {"positioning": 1, "value_architecture": 1, "pricing_packaging": 1, "gtm_focus": 1, "measurement": 1}
    assert primary_constraint(pillars) == "positioning"
    pillars = {"positioning": 5, "value_architecture": 5, "pricing_packaging": 5, "gtm_focus": 4, "measurement": 4}
    assert primary_constraint(pillars) == "gtm_focus"
