"""
Rule-based baseline compliance analyzer.
No AI / network: keyword matching against the regulation catalog.
Always available; used directly when no AI backend is configured and as the
fallback for every AI failure.
"""

import logging
from typing import Iterable, List, Sequence

from catalog import DisclosureCheck, get_checks, primary_regulation
from models import ComplianceAnalysis, Violation

logger = logging.getLogger(__name__)


# Penalty per violation, on top of the flat per-violation cost
BASE_PENALTY = 5
SEVERITY_PENALTY = {
    "high":     8,
    "critical": 12,
}

# (inclusive lower bound, band), checked top-down
RISK_BANDS = [
    (80, "low"),
    (60, "medium"),
    (40, "high"),
    (0,  "critical"),
]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _as_list(regulations) -> List[str]:
    if regulations is None:
        return []
    if isinstance(regulations, str):
        return [regulations]
    return list(regulations)

def _missing_violation(check: DisclosureCheck) -> Violation:
    return Violation(
        clause="Missing Section",
        issue=f"Missing disclosure: {check.key}",
        regulation=check.citation,
        severity=check.severity,
        suggestion=f"Add a clear section covering {check.key}.",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Scoring
# ─────────────────────────────────────────────────────────────────────────────

def find_missing_disclosures(text: str, checks: Iterable[DisclosureCheck]) -> List[Violation]:
    folded = str(text or "").lower()
    return [_missing_violation(c) for c in checks if not c.satisfied_by(folded)]

def compute_score(violations: Sequence[Violation]) -> int:
    penalty = sum(BASE_PENALTY + SEVERITY_PENALTY.get(v.severity, 0) for v in violations)
    return max(0, min(100, 100 - penalty))

def risk_band(score: int) -> str:
    for floor, band in RISK_BANDS:
        if score >= floor:
            return band
    return "critical"


# ─────────────────────────────────────────────────────────────────────────────
# Main entry point
# ─────────────────────────────────────────────────────────────────────────────

def conservative_result(regulations) -> ComplianceAnalysis:
    """What we report when even the baseline cannot run."""
    return ComplianceAnalysis(
        compliance_score=0,
        risk_level="high",
        violations=[],
        related_skills=_as_list(regulations),
    )

def analyze_baseline(content: str, regulations) -> ComplianceAnalysis:
    """
    Score `content` against the check set of the primary regulation.
    Never raises.
    """
    try:
        regs = _as_list(regulations)
        checks = get_checks(primary_regulation(regs))
        violations = find_missing_disclosures(content, checks)
        score = compute_score(violations)
        return ComplianceAnalysis(
            compliance_score=score,
            risk_level=risk_band(score),
            violations=violations,
            related_skills=regs,
        )
    except Exception:
        logger.exception("Baseline analysis failed; returning conservative result")
        try:
            return conservative_result(regulations)
        except Exception:
            return conservative_result(None)
