"""
Data classes shared across the pipeline.

Attribute names are snake_case; to_dict() speaks the camelCase
wire format used by the API and by the canonical analysis schema.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


# ─────────────────────────────────────────────────────────────────────────────
# Vocabularies
# ─────────────────────────────────────────────────────────────────────────────

PENDING_REVIEW  = "PENDING_REVIEW"
IN_REVIEW       = "IN_REVIEW"
REVISION_NEEDED = "REVISION_NEEDED"
APPROVED        = "APPROVED"
REJECTED        = "REJECTED"

STATUSES          = (PENDING_REVIEW, IN_REVIEW, REVISION_NEEDED, APPROVED, REJECTED)
TERMINAL_STATUSES = (APPROVED, REJECTED)

RISK_LEVELS    = ("low", "medium", "high", "critical")
SEVERITIES     = RISK_LEVELS
DOCUMENT_TYPES = ("privacy_policy", "terms", "contract", "policy", "other")

CLIENT, LAWYER, ADMIN = "client", "lawyer", "admin"
ROLES = (CLIENT, LAWYER, ADMIN)


def new_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


# ─────────────────────────────────────────────────────────────────────────────
# Analysis
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Violation:
    clause:     str
    issue:      str
    regulation: str = ""
    severity:   str = "medium"
    suggestion: str = ""

    def to_dict(self) -> dict:
        return {
            "clause":     self.clause,
            "issue":      self.issue,
            "regulation": self.regulation,
            "severity":   self.severity,
            "suggestion": self.suggestion,
        }


@dataclass
class ComplianceAnalysis:
    """The canonical schema every analyzer path produces."""
    compliance_score: int
    risk_level:       str
    violations:       List[Violation] = field(default_factory=list)
    related_skills:   List[str]       = field(default_factory=list)
    source:           str = "baseline"     # "baseline" | "ai"


# ─────────────────────────────────────────────────────────────────────────────
# Documents & users
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ComplianceDocument:
    document_name:    str
    content:          str
    created_by:       str
    document_type:    str = "privacy_policy"
    regulations:      List[str] = field(default_factory=lambda: ["GDPR"])
    status:           str = PENDING_REVIEW
    risk_level:       str = "medium"
    compliance_score: int = 0
    violations:       List[Violation] = field(default_factory=list)
    assigned_lawyer:  Optional[str] = None
    lawyer_notes:     str = ""
    reviewed_at:      Optional[datetime] = None
    created_at:       datetime = field(default_factory=utcnow)
    id:               str = field(default_factory=new_id)

    @property
    def primary_regulation(self) -> str:
        return self.regulations[0] if self.regulations else "GDPR"

    def to_dict(self, include_content: bool = True) -> dict:
        d = {
            "id":              self.id,
            "documentName":    self.document_name,
            "documentType":    self.document_type,
            "regulations":     list(self.regulations),
            "status":          self.status,
            "riskLevel":       self.risk_level,
            "complianceScore": self.compliance_score,
            "violations":      [v.to_dict() for v in self.violations],
            "createdBy":       self.created_by,
            "assignedLawyer":  self.assigned_lawyer,
            "lawyerNotes":     self.lawyer_notes,
            "reviewedAt":      _iso(self.reviewed_at),
            "createdAt":       _iso(self.created_at),
        }
        if include_content:
            d["content"] = self.content
        return d


@dataclass
class User:
    name:            str
    email:           str
    role:            str = CLIENT
    specializations: List[str] = field(default_factory=list)
    is_active:       bool = True
    id:              str = field(default_factory=new_id)

    @property
    def is_lawyer(self) -> bool:
        return self.role == LAWYER

    def to_dict(self) -> dict:
        return {
            "id":              self.id,
            "name":            self.name,
            "email":           self.email,
            "role":            self.role,
            "specializations": list(self.specializations),
            "isActive":        self.is_active,
        }
