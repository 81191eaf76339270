"""
Keyword rule catalog: required-disclosure checks per regulation.

A check passes when the lower-cased document contains ANY of its phrases.
Adding a regulation means adding an entry here, not code elsewhere.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Tuple


DEFAULT_REGULATION = "GDPR"


@dataclass(frozen=True)
class DisclosureCheck:
    key:      str                # human label, e.g. "data retention periods"
    phrases:  Tuple[str, ...]    # lowercase, matched disjunctively
    severity: str                # low | medium | high | critical
    citation: str                # e.g. "GDPR Art. 13(2)(a)"

    def satisfied_by(self, folded_text: str) -> bool:
        return any(p in folded_text for p in self.phrases)


# ─────────────────────────────────────────────────────────────────────────────
# Check sets
# ─────────────────────────────────────────────────────────────────────────────

_GDPR = (
    DisclosureCheck("controller identity and contact",
        ("controller", "contact", "company name", "address"), "high", "GDPR Art. 13(1)(a)"),
    DisclosureCheck("data protection officer contact",
        ("data protection officer", "dpo"), "medium", "GDPR Art. 37-39"),
    DisclosureCheck("processing purposes and legal basis",
        ("purpose", "processing", "lawful basis", "legal basis"), "high", "GDPR Art. 13(1)(c)"),
    DisclosureCheck("categories of personal data",
        ("categories of data", "types of data", "personal information"), "high", "GDPR Art. 13(1)(d)"),
    DisclosureCheck("recipients or categories of recipients",
        ("recipient", "third part", "share", "disclose"), "high", "GDPR Art. 13(1)(e)"),
    DisclosureCheck("international data transfers",
        ("transfer", "international", "third country", "scc", "standard contractual"), "medium", "GDPR Art. 13(1)(f)"),
    DisclosureCheck("data retention periods",
        ("retention", "storage period", "how long", "keep your data"), "high", "GDPR Art. 13(2)(a)"),
    DisclosureCheck("data subject rights",
        ("right to access", "right to erasure", "right to rectification", "data portability", "right to object"),
        "high", "GDPR Arts. 15-21"),
    DisclosureCheck("right to lodge complaint",
        ("supervisory authority", "lodge a complaint", "data protection authority"), "medium", "GDPR Art. 13(2)(d)"),
    DisclosureCheck("automated decision-making",
        ("automated decision", "profiling", "automated processing"), "low", "GDPR Art. 22"),
)

_CCPA = (
    DisclosureCheck("categories of personal information collected",
        ("categories", "personal information", "collect"), "high", "CCPA §1798.100(a)"),
    DisclosureCheck("sources of personal information",
        ("source", "obtain", "collect from"), "medium", "CCPA §1798.100(b)"),
    DisclosureCheck("business or commercial purpose",
        ("purpose", "use", "business purpose"), "high", "CCPA §1798.100(b)"),
    DisclosureCheck("categories of third parties",
        ("third part", "share", "disclose", "sell"), "high", "CCPA §1798.100(d)"),
    DisclosureCheck("right to know",
        ("right to know", "request disclosure", "access"), "high", "CCPA §1798.100"),
    DisclosureCheck("right to delete",
        ("right to delete", "deletion", "remove"), "high", "CCPA §1798.105"),
    DisclosureCheck("right to opt-out of sale",
        ("do not sell", "opt-out", "opt out", "sale of personal"), "critical", "CCPA §1798.120"),
    DisclosureCheck("right to non-discrimination",
        ("non-discrimination", "discriminate", "exercise your rights"), "high", "CCPA §1798.125"),
    DisclosureCheck("authorized agent",
        ("authorized agent", "agent", "designate"), "medium", "CCPA §1798.135"),
    DisclosureCheck("contact information for requests",
        ("contact", "submit", "request", "email", "phone"), "high", "CCPA §1798.130"),
)

_DPDPA = (
    DisclosureCheck("data fiduciary identification",
        ("data fiduciary", "organization", "company name"), "high", "DPDPA Section 5"),
    DisclosureCheck("purpose of data processing",
        ("purpose", "process", "use"), "high", "DPDPA Section 6"),
    DisclosureCheck("lawful basis for processing",
        ("consent", "lawful", "legal basis"), "high", "DPDPA Section 6"),
    DisclosureCheck("data retention and erasure",
        ("retention", "delete", "erase", "how long"), "high", "DPDPA Section 8"),
    DisclosureCheck("data principal rights",
        ("right", "access", "correction", "erasure", "data portability"), "high", "DPDPA Section 11-14"),
    DisclosureCheck("grievance redressal mechanism",
        ("grievance", "complaint", "redressal"), "high", "DPDPA Section 15"),
    DisclosureCheck("data security measures",
        ("security", "protect", "safeguard"), "medium", "DPDPA Section 8"),
    DisclosureCheck("cross-border data transfer",
        ("transfer", "cross-border", "outside india"), "medium", "DPDPA Section 16"),
    DisclosureCheck("consent withdrawal",
        ("withdraw consent", "opt-out", "stop processing"), "high", "DPDPA Section 6"),
)

_HIPAA = (
    DisclosureCheck("covered entity identification",
        ("covered entity", "healthcare provider", "organization"), "high", "HIPAA Privacy Rule §164.520"),
    DisclosureCheck("uses and disclosures of PHI",
        ("use", "disclosure", "protected health information", "phi"), "critical", "HIPAA Privacy Rule §164.506"),
    DisclosureCheck("patient rights",
        ("right to access", "right to amend", "right to accounting"), "high", "HIPAA Privacy Rule §164.524-528"),
    DisclosureCheck("minimum necessary standard",
        ("minimum necessary", "least privilege"), "medium", "HIPAA Privacy Rule §164.502(b)"),
    DisclosureCheck("business associate agreements",
        ("business associate", "baa", "agreement"), "high", "HIPAA Privacy Rule §164.502(e)"),
    DisclosureCheck("security safeguards",
        ("security", "safeguard", "protect", "encrypt"), "critical", "HIPAA Security Rule §164.306"),
    DisclosureCheck("breach notification",
        ("breach", "notification", "incident"), "high", "HIPAA Breach Notification Rule §164.404"),
    DisclosureCheck("complaint process",
        ("complaint", "file a complaint", "grievance"), "medium", "HIPAA Privacy Rule §164.530"),
)

REGULATION_CHECKS = MappingProxyType({
    "GDPR":  _GDPR,
    "CCPA":  _CCPA,
    "DPDPA": _DPDPA,
    "HIPAA": _HIPAA,
})


# ─────────────────────────────────────────────────────────────────────────────
# Audit guidance handed to the AI auditor
# ─────────────────────────────────────────────────────────────────────────────

REGULATION_GUIDANCE = MappingProxyType({
    "GDPR":  "Focus on GDPR Articles 12-22. Check: controller identity, DPO, purposes, legal basis, "
             "data categories, recipients, international transfers, retention, rights (access, erasure, "
             "portability, objection), automated decisions, complaint rights.",
    "CCPA":  "Focus on CCPA §1798.100-135. Check: categories of personal information, sources, business "
             "purposes, third parties, right to know, right to delete, DO NOT SELL link, opt-out, "
             "non-discrimination, authorized agent, contact information.",
    "DPDPA": "Focus on India's DPDPA 2023 Sections 5-16. Check: data fiduciary identification, processing "
             "purposes, consent, retention/erasure, data principal rights, grievance mechanism, security "
             "measures, cross-border transfers, consent withdrawal.",
    "HIPAA": "Focus on HIPAA Privacy & Security Rules. Check: covered entity identity, PHI uses/disclosures, "
             "patient rights, minimum necessary, business associate agreements, security safeguards, breach "
             "notification, complaint process.",
    "SOX":   "Focus on Sarbanes-Oxley compliance. Check: financial reporting controls, audit requirements, "
             "data retention, disclosure controls.",
    "CONTRACT LAW":    "Focus on contractual obligations and legal requirements specific to the agreement.",
    "PRIVACY LAW":     "Focus on general privacy principles and best practices.",
    "DATA PROTECTION": "Focus on data protection principles, security measures, and lawful processing.",
})

# Example citation shown to the model so it mimics the right style
CITATION_EXAMPLES = MappingProxyType({
    "GDPR":  "GDPR Art. 13(1)(a)",
    "CCPA":  "CCPA §1798.100",
    "DPDPA": "DPDPA Section 6",
})
DEFAULT_CITATION_EXAMPLE = "HIPAA §164.520"


# ─────────────────────────────────────────────────────────────────────────────
# Lookups
# ─────────────────────────────────────────────────────────────────────────────

def _code(regulation) -> str:
    return str(regulation or DEFAULT_REGULATION).strip().upper()

def primary_regulation(regulations: Iterable[str]) -> str:
    """First regulation in the list, or the default when the list is empty."""
    regs = list(regulations or [])
    first = str(regs[0]).strip() if regs and regs[0] else ""
    return first or DEFAULT_REGULATION

def get_checks(regulation: str) -> Tuple[DisclosureCheck, ...]:
    return REGULATION_CHECKS.get(_code(regulation), REGULATION_CHECKS[DEFAULT_REGULATION])

def get_guidance(regulation: str) -> str:
    return REGULATION_GUIDANCE.get(_code(regulation), REGULATION_GUIDANCE[DEFAULT_REGULATION])

def citation_example(regulation: str) -> str:
    return CITATION_EXAMPLES.get(_code(regulation), DEFAULT_CITATION_EXAMPLE)

def supported_regulations() -> list:
    return list(REGULATION_CHECKS)
