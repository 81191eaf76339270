"""
Review workflow: document status transitions and who may perform them.

transition() is pure: it returns an updated copy and leaves the input
untouched, so a rejected attempt cannot leave partial changes behind.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from errors import AuthorizationDenied, ValidationFailed
from models import IN_REVIEW, STATUSES, TERMINAL_STATUSES, ComplianceDocument, User, utcnow

logger = logging.getLogger(__name__)


def can_review(document: ComplianceDocument, actor: Optional[User]) -> bool:
    return bool(actor and document.assigned_lawyer and actor.id == document.assigned_lawyer)

def assign(document: ComplianceDocument, lawyer: User) -> ComplianceDocument:
    """Record the resolver's pick and move the document into review."""
    return replace(document, assigned_lawyer=lawyer.id, status=IN_REVIEW)

def transition(
    document: ComplianceDocument,
    actor: Optional[User],
    new_status: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ComplianceDocument:
    if not can_review(document, actor):
        raise AuthorizationDenied("Only the assigned lawyer can update this document's status")

    status = str(new_status or "").strip().upper()
    if status not in STATUSES:
        raise ValidationFailed(f"Invalid status '{new_status}'. Expected one of: {', '.join(STATUSES)}")

    changes = {"status": status}
    if notes:
        changes["lawyer_notes"] = notes
    # reviewed_at is stamped once, on the first terminal decision
    if status in TERMINAL_STATUSES and document.reviewed_at is None:
        changes["reviewed_at"] = now or utcnow()

    logger.info("Document %s: %s -> %s by %s", document.id, document.status, status, actor.id)
    return replace(document, **changes)
