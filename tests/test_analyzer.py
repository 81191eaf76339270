import pytest

import analyzer
from analyzer import analyze_baseline, compute_score, risk_band
from conftest import CCPA_NO_OPT_OUT, GDPR_COMPLETE
from models import Violation


def _v(severity):
    return Violation(clause="Missing Section", issue="x", severity=severity)


@pytest.mark.parametrize("score,band", [
    (100, "low"), (80, "low"), (79, "medium"), (60, "medium"),
    (59, "high"), (40, "high"), (39, "critical"), (0, "critical"),
])
def test_risk_band_boundaries(score, band):
    assert risk_band(score) == band


def test_score_penalties():
    assert compute_score([]) == 100
    assert compute_score([_v("low")]) == 95
    assert compute_score([_v("medium")]) == 95
    assert compute_score([_v("high")]) == 87
    assert compute_score([_v("critical")]) == 83


def test_score_never_increases_with_more_or_worse_violations():
    violations, last = [], 100
    for severity in ["low", "medium", "high", "critical"] * 3:
        violations.append(_v(severity))
        score = compute_score(violations)
        assert score <= last
        last = score
    assert compute_score([_v("critical")]) <= compute_score([_v("high")]) <= compute_score([_v("low")])


def test_score_is_clamped_at_zero():
    assert compute_score([_v("critical")] * 20) == 0


def test_complete_gdpr_policy_scores_full_marks():
    result = analyze_baseline(GDPR_COMPLETE, ["GDPR"])
    assert result.compliance_score == 100
    assert result.risk_level == "low"
    assert result.violations == []
    assert result.source == "baseline"


def test_empty_gdpr_policy():
    result = analyze_baseline("", ["GDPR"])
    assert len(result.violations) == 10
    # 6 high, 3 medium, 1 low
    assert result.compliance_score == 2
    assert result.risk_level == "critical"


def test_empty_ccpa_policy_clamps_to_zero():
    result = analyze_baseline("", ["CCPA"])
    assert result.compliance_score == 0
    assert result.risk_level == "critical"


def test_ccpa_missing_opt_out_is_critical():
    result = analyze_baseline(CCPA_NO_OPT_OUT, ["CCPA"])
    assert len(result.violations) == 1
    v = result.violations[0]
    assert v.regulation == "CCPA §1798.120"
    assert v.severity == "critical"
    assert v.clause == "Missing Section"
    assert v.issue == "Missing disclosure: right to opt-out of sale"
    assert v.suggestion == "Add a clear section covering right to opt-out of sale."
    assert result.compliance_score == 83


def test_unknown_regulation_falls_back_to_gdpr_checks():
    unknown = analyze_baseline("", ["SOX"])
    gdpr = analyze_baseline("", ["GDPR"])
    assert [v.issue for v in unknown.violations] == [v.issue for v in gdpr.violations]
    assert unknown.related_skills == ["SOX"]


def test_only_the_primary_regulation_is_scored():
    result = analyze_baseline(GDPR_COMPLETE, ["GDPR", "CCPA"])
    assert result.compliance_score == 100
    assert result.related_skills == ["GDPR", "CCPA"]


def test_matching_is_case_insensitive():
    assert analyze_baseline(GDPR_COMPLETE.upper(), ["GDPR"]).violations == []


def test_internal_error_returns_conservative_result(monkeypatch):
    def boom(*_):
        raise RuntimeError("catalog unavailable")
    monkeypatch.setattr(analyzer, "get_checks", boom)

    result = analyze_baseline("anything", ["HIPAA"])
    assert result.compliance_score == 0
    assert result.risk_level == "high"
    assert result.violations == []
    assert result.related_skills == ["HIPAA"]
