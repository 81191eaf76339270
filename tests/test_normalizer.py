import json

import pytest

from errors import MalformedResponse
from normalizer import (
    close_truncated, coerce_score, isolate_object, join_parts,
    normalize_response, strip_fence,
)

CANONICAL = {
    "complianceScore": 72,
    "riskLevel": "Medium",
    "violations": [{
        "clause": "Data Retention",
        "issue": "No retention period stated",
        "regulation": "GDPR Art. 13(2)(a)",
        "severity": "high",
        "suggestion": "State how long data is kept",
    }],
    "relatedSkills": ["GDPR"],
}
BODY = json.dumps(CANONICAL)


def _assert_canonical(result):
    assert result.compliance_score == 72
    assert result.risk_level == "medium"
    assert result.source == "ai"
    assert len(result.violations) == 1
    assert result.violations[0].severity == "high"
    assert result.violations[0].clause == "Data Retention"


# ── Recovery paths ──────────────────────────────────────────────────────────

def test_fenced_json_block():
    _assert_canonical(normalize_response([f"```json\n{BODY}\n```"]))

def test_fence_tag_is_case_insensitive():
    _assert_canonical(normalize_response([f"```JSON\n{BODY}\n```"]))

def test_raw_json():
    _assert_canonical(normalize_response([BODY]))

def test_json_embedded_in_prose():
    _assert_canonical(normalize_response([f"Here is my audit:\n{BODY}\nLet me know if you need more."]))

def test_multiple_parts_are_concatenated_in_order():
    split = BODY.index(" \"violations\"")
    _assert_canonical(normalize_response([BODY[:split], {"text": BODY[split:]}]))

def test_single_violation_object_is_wrapped():
    data = dict(CANONICAL, violations=CANONICAL["violations"][0])
    _assert_canonical(normalize_response([json.dumps(data)]))

def test_recommendations_with_aliased_fields():
    data = {
        "complianceScore": 55,
        "riskLevel": "high",
        "recommendations": [
            {"section": "Cookies", "problem": "No consent banner", "reference": "GDPR Art. 7", "fix": "Add consent"},
            {"description": "No DPO listed", "action": "Name a DPO", "severity": "LOW"},
        ],
    }
    result = normalize_response([json.dumps(data)], regulations=["GDPR"])
    first, second = result.violations
    assert (first.clause, first.issue, first.regulation, first.severity, first.suggestion) == \
        ("Cookies", "No consent banner", "GDPR Art. 7", "medium", "Add consent")
    assert (second.clause, second.issue, second.regulation, second.severity, second.suggestion) == \
        ("Unknown section", "No DPO listed", "", "low", "Name a DPO")
    assert result.related_skills == ["GDPR"]

def test_truncated_json_is_closed():
    cut = '{"complianceScore": 72, "riskLevel": "medium", "violations": [' + \
          json.dumps(CANONICAL["violations"][0]) + '], "relatedSkills": ["GDPR"'
    result = normalize_response([cut], truncated=True)
    _assert_canonical(result)
    assert result.related_skills == ["GDPR"]

def test_truncated_fenced_json_without_closing_fence():
    cut = '```json\n{"complianceScore": 72, "riskLevel": "medium", "violations": [' + \
          json.dumps(CANONICAL["violations"][0]) + '], "relatedSkills": ["GDPR"'
    _assert_canonical(normalize_response([cut], truncated=True))


# ── Coercion ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("value,expected", [
    (88, 88), (88.6, 89), ("75", 75), ("n/a", 0), (None, 0),
    (-20, 0), (250, 100), (float("nan"), 0), ([], 0),
])
def test_score_coercion(value, expected):
    assert coerce_score(value) == expected

def test_invalid_risk_level_becomes_medium():
    result = normalize_response([json.dumps({"complianceScore": 10, "riskLevel": "severe"})])
    assert result.risk_level == "medium"

def test_unknown_violation_shape_gives_empty_list():
    result = normalize_response([json.dumps({"complianceScore": 90, "riskLevel": "low", "violations": "none"})])
    assert result.violations == []

def test_invalid_severity_becomes_medium():
    data = {"complianceScore": 50, "riskLevel": "high", "violations": [{"issue": "x", "severity": "urgent"}]}
    assert normalize_response([json.dumps(data)]).violations[0].severity == "medium"

def test_non_object_entries_are_skipped():
    data = {"complianceScore": 50, "riskLevel": "high", "violations": ["loose text", None, {"issue": "real"}]}
    violations = normalize_response([json.dumps(data)]).violations
    assert [v.issue for v in violations] == ["real"]

def test_missing_related_skills_uses_requested_regulations():
    result = normalize_response([json.dumps({"complianceScore": 90, "riskLevel": "low"})], regulations=["HIPAA"])
    assert result.related_skills == ["HIPAA"]


# ── Unrecoverable input ──────────────────────────────────────────────────────

@pytest.mark.parametrize("parts", [
    [],
    ["   "],
    ["I could not analyze this document."],
    ['["not", "an", "object"]'],
    ['{"complianceScore": 50, "violations": [{"issue": "cut'],
])
def test_unusable_responses_raise_malformed(parts):
    with pytest.raises(MalformedResponse):
        normalize_response(parts)


# ── Helpers ──────────────────────────────────────────────────────────────────

def test_join_parts_skips_none():
    assert join_parts(["a", None, {"text": "b"}]) == "a\nb"

def test_strip_fence_leaves_plain_text():
    assert strip_fence('{"a": 1}') == '{"a": 1}'

def test_isolate_object_without_closing_brace():
    assert isolate_object('Sure: {"a": [1') == '{"a": [1'

def test_close_truncated_appends_brackets_then_braces():
    assert close_truncated('{"a": [1') == '{"a": [1\n]\n}'
    assert close_truncated('{"a": 1}') == '{"a": 1}'
