from datetime import datetime, timedelta, timezone

import pytest

from models import CLIENT, LAWYER, ComplianceDocument, User, Violation
from store import DocumentStore, UserStore


def _doc(name="p.txt", owner="u1", **kw):
    return ComplianceDocument(document_name=name, content="text", created_by=owner, **kw)


def test_records_are_copied_in_and_out():
    store = DocumentStore()
    doc = store.create(_doc())
    doc.status = "APPROVED"
    doc.violations.append(Violation(clause="c", issue="i"))

    fresh = store.get(doc.id)
    assert fresh.status == "PENDING_REVIEW"
    assert fresh.violations == []


def test_duplicate_id_is_rejected():
    store = DocumentStore()
    doc = store.create(_doc())
    with pytest.raises(ValueError):
        store.create(_doc(id=doc.id))


def test_update_sets_fields_and_returns_copy():
    store = DocumentStore()
    doc = store.create(_doc())
    updated = store.update(doc.id, compliance_score=42, risk_level="high")
    assert (updated.compliance_score, updated.risk_level) == (42, "high")
    assert store.get(doc.id).compliance_score == 42


def test_set_once_fields_keep_their_first_value():
    store = DocumentStore()
    doc = store.create(_doc())
    first = datetime(2026, 1, 1, tzinfo=timezone.utc)
    later = datetime(2026, 2, 1, tzinfo=timezone.utc)

    stamped = store.update(doc.id, set_once=("reviewed_at",), status="APPROVED", reviewed_at=first)
    assert stamped.reviewed_at == first

    again = store.update(doc.id, set_once=("reviewed_at",), status="REJECTED", reviewed_at=later)
    assert again.status == "REJECTED"
    assert again.reviewed_at == first


def test_rejected_update_changes_nothing():
    store = DocumentStore()
    doc = store.create(_doc())
    with pytest.raises(AttributeError):
        store.update(doc.id, status="APPROVED", created_by="intruder")
    assert store.get(doc.id).status == "PENDING_REVIEW"


def test_update_missing_document_returns_none():
    assert DocumentStore().update("nope", status="APPROVED") is None


@pytest.mark.parametrize("field", ["id", "created_by", "no_such_field"])
def test_update_refuses_protected_or_unknown_fields(field):
    store = DocumentStore()
    doc = store.create(_doc())
    with pytest.raises(AttributeError):
        store.update(doc.id, **{field: "x"})


def test_find_returns_newest_first():
    store = DocumentStore()
    now = datetime.now(timezone.utc)
    old = store.create(_doc("old", created_at=now - timedelta(days=1)))
    new = store.create(_doc("new", created_at=now))
    other = store.create(_doc("other", owner="u2", created_at=now + timedelta(days=1)))

    assert [d.id for d in store.find()] == [other.id, new.id, old.id]
    assert [d.id for d in store.find(lambda d: d.created_by == "u1")] == [new.id, old.id]


def test_user_lookup_and_lawyer_order():
    users = UserStore()
    a = users.add(User(name="A", email="A@Firm.test", role=LAWYER, specializations=["GDPR"]))
    users.add(User(name="C", email="c@firm.test", role=CLIENT))
    b = users.add(User(name="B", email="b@firm.test", role=LAWYER, specializations=["CCPA"]))

    assert users.find_by_email(" a@firm.TEST ").id == a.id
    assert users.find_by_email("missing@firm.test") is None
    assert [u.id for u in users.lawyers()] == [a.id, b.id]
    assert users.get(a.id).name == "A"
    assert users.get("nope") is None
