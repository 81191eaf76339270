"""
In-memory persistence for documents and users.

Updates are applied field by field under a lock (last write wins per field);
readers get copies so nothing outside the store can mutate a stored record.
"""

import copy
import threading
from typing import Callable, Dict, List, Optional

from models import LAWYER, ComplianceDocument, User


class DocumentStore:
    def __init__(self):
        self._docs: Dict[str, ComplianceDocument] = {}
        self._lock = threading.Lock()

    def create(self, document: ComplianceDocument) -> ComplianceDocument:
        with self._lock:
            if document.id in self._docs:
                raise ValueError(f"Document id '{document.id}' already exists")
            self._docs[document.id] = copy.deepcopy(document)
            return copy.deepcopy(document)

    def get(self, doc_id: str) -> Optional[ComplianceDocument]:
        with self._lock:
            doc = self._docs.get(doc_id)
            return copy.deepcopy(doc) if doc else None

    def update(self, doc_id: str, set_once=(), **fields) -> Optional[ComplianceDocument]:
        """
        Set the given fields on one record and return the updated copy.
        Fields named in `set_once` are only written while still None.
        """
        with self._lock:
            doc = self._docs.get(doc_id)
            if doc is None:
                return None
            for name in fields:
                if not hasattr(doc, name) or name in ("id", "created_by"):
                    raise AttributeError(f"Cannot update field '{name}'")
            for name, value in fields.items():
                if name in set_once and getattr(doc, name) is not None:
                    continue
                setattr(doc, name, copy.deepcopy(value))
            return copy.deepcopy(doc)

    def find(self, predicate: Callable[[ComplianceDocument], bool] = lambda d: True) -> List[ComplianceDocument]:
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._docs.values() if predicate(d)]
        return sorted(docs, key=lambda d: d.created_at, reverse=True)


class UserStore:
    def __init__(self):
        self._users: Dict[str, User] = {}   # insertion order = registration order
        self._lock = threading.Lock()

    def add(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = copy.deepcopy(user)
            return copy.deepcopy(user)

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def find_by_email(self, email: str) -> Optional[User]:
        email = (email or "").strip().lower()
        with self._lock:
            for u in self._users.values():
                if u.email.lower() == email:
                    return copy.deepcopy(u)
        return None

    def lawyers(self) -> List[User]:
        with self._lock:
            return [copy.deepcopy(u) for u in self._users.values() if u.role == LAWYER]
