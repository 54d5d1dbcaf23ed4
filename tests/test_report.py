import copy

from conftest import FORECAST, GENERATED_AT, MIXED_FLAGS, WIN
from gtm_diagnostic.core.models import PILLAR_ORDER
from gtm_diagnostic.core.rendering import render
from gtm_diagnostic.core.report import NORMALIZED_FIELDS, build_report
from gtm_diagnostic.core.scoring import score


def _document(tier, answers, config, name="Dana", email="dana@example.com"):
    scored = score(answers, config)
    rendered = render(tier, scored, name)
    report = build_report(tier, name, email, answers, scored, config, rendered, generated_at=GENERATED_AT)
    return report.to_document()


def test_schema_version_for_every_tier(config, mixed_answers):
    for tier in ("exec", "audit", "full", "unknown"):
        assert _document(tier, mixed_answers, config)["schema_version"] == "1.0"


def test_exec_report_carries_only_exec_tier(config, mixed_answers):
    doc = _document("exec", mixed_answers, config)
    assert doc["tier"] == "exec"
    assert "exec_tier" in doc
    assert "full_tier" not in doc
    assert len(doc["exec_tier"]["next_30_days"]) == 5
    assert doc["exec_tier"]["upgrade_offer"]["product"] == "Strategic Audit"
    assert doc["exec_tier"]["upgrade_offer"]["price_usd"] == 499
    assert doc["deliverables"]["pdf"]["page_estimate"] == 3


def test_full_alias_produces_audit_report(config, mixed_answers):
    doc = _document("full", mixed_answers, config)
    assert doc["tier"] == "audit"
    assert "full_tier" in doc
    assert "exec_tier" not in doc
    assert doc["deliverables"]["pdf"]["page_estimate"] == 10

    full = doc["full_tier"]
    assert full["swot"] == {"strengths": [], "weaknesses": [], "opportunities": [], "threats": []}
    assert full["roadmap"] == {"days_30": [], "days_60": [], "days_90": []}
    appendix = full["appendix"]["answers"]
    assert len(appendix) == len(mixed_answers)
    assert appendix[0] == {"question": WIN, "answer": "Clear differentiation", "notes": None}


def test_client_and_inputs(config, mixed_answers):
    doc = _document("exec", mixed_answers, config)
    assert doc["generated_at"].startswith("2026-01-15T12:00:00")
    assert doc["client"] == {"name": "Dana", "email": "dana@example.com", "company": None, "website": None}
    assert doc["inputs"]["answers_raw"] == mixed_answers

    normalized = doc["inputs"]["answers_normalized"]
    assert list(normalized) == [field for field, _ in NORMALIZED_FIELDS]
    assert len(normalized) == 20
    assert normalized["win_reason"] == "Clear differentiation"
    assert normalized["forecast_accuracy_within_10pct"] == "No"
    assert normalized["company_stage"] is None


def test_empty_client_identity_becomes_null(config):
    doc = _document("exec", {FORECAST: "No"}, config, name="", email="")
    assert doc["client"]["name"] is None
    assert doc["client"]["email"] is None


def test_scoring_detail(config, mixed_answers):
    scoring = _document("exec", mixed_answers, config)["scoring"]
    assert scoring["rules_version"] == "v1"
    assert scoring["overall_score"] == 9
    assert scoring["max_score"] == 25
    assert scoring["band"] == "Structural Misalignment"
    assert list(scoring["pillars"]) == list(PILLAR_ORDER)

    pillars = scoring["pillars"]
    assert pillars["value_architecture"]["band"] == "Strong"
    assert pillars["value_architecture"]["risk_note"] is None
    assert pillars["pricing_packaging"]["band"] == "At Risk"
    assert pillars["pricing_packaging"]["risk_note"]
    assert pillars["gtm_focus"]["label"] == "GTM Focus"
    assert pillars["gtm_focus"]["max"] == 5

    assert scoring["primary_constraint"]["key"] == "gtm_focus"
    assert scoring["primary_constraint"]["score"] == 0
    assert scoring["primary_constraint"]["explanation"]

    assert [f["key"] for f in scoring["flags"]] == [f"flag_{i}" for i in range(1, 7)]
    assert [f["message"] for f in scoring["flags"]] == MIXED_FLAGS
    assert {f["severity"] for f in scoring["flags"]} == {"medium"}


def test_mixed_pillar_band_at_base_score(config):
    pillars = _document("exec", {}, config)["scoring"]["pillars"]
    assert all(p["band"] == "Mixed" and p["risk_note"] is None for p in pillars.values())


def test_narrative_uses_first_four_flags(config, mixed_answers):
    narrative = _document("exec", mixed_answers, config)["narrative"]
    assert narrative["key_observations"] == MIXED_FLAGS[:4]
    assert "GTM Focus" in narrative["primary_constraint_focus"]
    assert narrative["headline"]
    assert narrative["what_to_do_next"]


def test_narrative_without_flags(config, strong_answers):
    narrative = _document("exec", strong_answers, config)["narrative"]
    assert narrative["key_observations"] == ["No major red flags detected from the structured inputs."]


def test_deliverables_carry_rendered_copy(config, mixed_answers):
    scored = score(mixed_answers, config)
    rendered = render("audit", scored, "Dana")
    doc = build_report("audit", "Dana", "", mixed_answers, scored, config, rendered, generated_at=GENERATED_AT).to_document()
    assert doc["deliverables"]["email"] == {"subject": rendered.subject, "body_text": rendered.body_text}
    assert doc["deliverables"]["pdf"]["status"] == "pending"
    assert doc["deliverables"]["pdf"]["url"] is None


def test_builder_does_not_mutate_inputs(config, mixed_answers):
    scored = score(mixed_answers, config)
    answers_before = copy.deepcopy(mixed_answers)
    scored_before = scored.model_dump()
    rendered = render("audit", scored, "Dana")

    first = build_report("audit", "Dana", "", mixed_answers, scored, config, rendered, generated_at=GENERATED_AT)
    second = build_report("audit", "Dana", "", mixed_answers, scored, config, rendered, generated_at=GENERATED_AT)

    assert mixed_answers == answers_before
    assert scored.model_dump() == scored_before
    assert first is not second
    assert first.to_document() == second.to_document()
