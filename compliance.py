"""
Compliance service: the submission pipeline and the review API.

    submit -> analyze (AI, falling back to baseline) -> assign lawyer -> publish event

Each step after document creation is best effort: a failed assignment or
event leaves the analyzed document in place and the submission succeeds.
"""

import logging
from typing import Any, Dict, List, Optional

from assignment import resolve_assignment
from errors import DocumentNotFound, ValidationFailed
from events import DOCUMENT_REVIEWED, DOCUMENT_UPLOADED, EventPublisher
from llm import analyze_with_ai
from models import ADMIN, DOCUMENT_TYPES, LAWYER, ROLES, ComplianceDocument, User
from store import DocumentStore, UserStore
from workflow import assign, transition

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Payload validation
# ─────────────────────────────────────────────────────────────────────────────

def _clean_list(value) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationFailed("Expected a list of strings")
    return [str(v).strip() for v in value if v is not None and str(v).strip()]

def _require_object(payload) -> None:
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")

def parse_submission(payload: Dict[str, Any]) -> Dict[str, Any]:
    _require_object(payload)
    name = str(payload.get("documentName") or "").strip()
    content = str(payload.get("content") or "")
    if not name or not content.strip():
        raise ValidationFailed("documentName and content are required")

    doc_type = payload.get("documentType") or "privacy_policy"
    if doc_type not in DOCUMENT_TYPES:
        raise ValidationFailed(f"Invalid documentType '{doc_type}'. Expected one of: {', '.join(DOCUMENT_TYPES)}")

    if payload.get("regulations") is None:
        regulations = ["GDPR"]
    else:
        regulations = _clean_list(payload["regulations"])
        if not regulations:
            raise ValidationFailed("Select at least one regulation")

    return {
        "document_name": name,
        "document_type": doc_type,
        "regulations":   regulations,
        "content":       content,
    }

def parse_registration(payload: Dict[str, Any]) -> Dict[str, Any]:
    _require_object(payload)
    name = str(payload.get("name") or "").strip()
    email = str(payload.get("email") or "").strip().lower()
    role = str(payload.get("role") or "client").strip().lower()
    if not name or not email:
        raise ValidationFailed("name and email are required")
    if role not in ROLES:
        raise ValidationFailed(f"Invalid role '{role}'. Expected one of: {', '.join(ROLES)}")

    specializations = _clean_list(payload.get("specializations") or [])
    if role == LAWYER and not specializations:
        raise ValidationFailed("Lawyers must select at least one specialization")

    return {"name": name, "email": email, "role": role, "specializations": specializations}


# ─────────────────────────────────────────────────────────────────────────────
# Service
# ─────────────────────────────────────────────────────────────────────────────

class ComplianceService:
    """
    Wires the pure pipeline pieces to the stores and the event publisher.

    `client` overrides the text-generation backend (anything with
    generate(prompt)); None means "use whatever is configured".
    """

    def __init__(self, documents: DocumentStore, users: UserStore,
                 events: Optional[EventPublisher] = None, client=None):
        self.documents = documents
        self.users = users
        self.events = events or EventPublisher()
        self.client = client

    # ── Analysis ──────────────────────────────────────────────────────────────

    def analyze_document(self, document: ComplianceDocument, client=None) -> Dict[str, Any]:
        """Scored fields for a document; score, risk and violations always travel together."""
        result = analyze_with_ai(
            document.document_name,
            document.document_type,
            document.regulations,
            document.content,
            client=client or self.client,
        )
        return {
            "compliance_score": result.compliance_score,
            "risk_level":       result.risk_level,
            "violations":       result.violations,
        }

    def _apply_analysis(self, document: ComplianceDocument) -> ComplianceDocument:
        fields = self.analyze_document(document)
        return self.documents.update(document.id, **fields)

    # ── Submission ────────────────────────────────────────────────────────────

    def submit_document(self, actor: User, payload: Dict[str, Any]) -> ComplianceDocument:
        fields = parse_submission(payload)
        doc = self.documents.create(ComplianceDocument(created_by=actor.id, **fields))
        logger.info("Document %s submitted by %s (%s)", doc.id, actor.id, ", ".join(doc.regulations))

        doc = self._apply_analysis(doc)

        try:
            lawyer = resolve_assignment(doc.regulations, self.list_lawyers())
            if lawyer:
                assigned = assign(doc, lawyer)
                doc = self.documents.update(doc.id, assigned_lawyer=assigned.assigned_lawyer,
                                            status=assigned.status)
        except Exception as e:
            logger.warning("Lawyer assignment failed for %s (non-critical): %s", doc.id, e)

        try:
            self.events.publish(DOCUMENT_UPLOADED, {"documentId": doc.id})
        except Exception as e:
            logger.warning("Event publish failed for %s (non-critical): %s", doc.id, e)

        return doc

    def reanalyze_document(self, actor: User, doc_id: str) -> ComplianceDocument:
        doc = self.get_document(actor, doc_id)   # owner, assigned lawyer or admin
        logger.info("Re-analyzing document %s for %s", doc.id, actor.id)
        return self._apply_analysis(doc)

    # ── Reads ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _visible(actor: User, doc: ComplianceDocument) -> bool:
        return actor.role == ADMIN or actor.id in (doc.created_by, doc.assigned_lawyer)

    def list_documents(self, actor: User) -> List[ComplianceDocument]:
        return self.documents.find(lambda d: self._visible(actor, d))

    def get_document(self, actor: User, doc_id: str) -> ComplianceDocument:
        doc = self.documents.get(doc_id)
        if doc is None or not self._visible(actor, doc):
            raise DocumentNotFound("Document not found")
        return doc

    # ── Review ────────────────────────────────────────────────────────────────

    def update_status(self, actor: User, doc_id: str, status: str,
                      lawyer_notes: Optional[str] = None) -> ComplianceDocument:
        doc = self.documents.get(doc_id)
        if doc is None:
            raise DocumentNotFound("Document not found")

        updated = transition(doc, actor, status, lawyer_notes)
        # write back only what this transition changed; a concurrent stamp wins
        changes = {"status": updated.status}
        if lawyer_notes:
            changes["lawyer_notes"] = updated.lawyer_notes
        if updated.reviewed_at is not None and doc.reviewed_at is None:
            changes["reviewed_at"] = updated.reviewed_at
        doc = self.documents.update(doc_id, set_once=("reviewed_at",), **changes)
        self.events.publish(DOCUMENT_REVIEWED, {"documentId": doc.id, "status": doc.status})
        return doc

    # ── Users ─────────────────────────────────────────────────────────────────

    def register_user(self, payload: Dict[str, Any]) -> User:
        fields = parse_registration(payload)
        if self.users.find_by_email(fields["email"]):
            raise ValidationFailed("A user with this email already exists")
        user = self.users.add(User(**fields))
        logger.info("Registered %s %s", user.role, user.id)
        return user

    def list_lawyers(self) -> List[User]:
        return [u for u in self.users.lawyers() if u.is_active]
