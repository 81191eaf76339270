import pytest

import app as app_module
import events
import llm
from compliance import ComplianceService
from events import EventPublisher
from llm import Generation
from models import ADMIN, CLIENT, LAWYER, User
from store import DocumentStore, UserStore


# A privacy policy that satisfies every GDPR disclosure check
GDPR_COMPLETE = (
    "The controller is Acme Ltd. Contact our data protection officer with questions. "
    "We explain the purpose and legal basis of each processing activity. "
    "We collect personal information such as your name. "
    "We share data with recipients listed below. "
    "Any international transfer relies on standard contractual clauses. "
    "Our retention period is two years. "
    "You have the right to access and the right to erasure. "
    "You may lodge a complaint with a supervisory authority. "
    "We do not use automated decision making."
)

# A CCPA notice that covers everything except the right to opt out of sale
CCPA_NO_OPT_OUT = (
    "We collect categories of personal information from the source you obtain it from. "
    "We use it for a business purpose. We share it with third parties. "
    "You have the right to know and may request access. You have the right to delete. "
    "We will not discriminate when you exercise your rights. "
    "An authorized agent may submit a request by email."
)


class FakeClient:
    """Stands in for GeminiClient: returns canned parts, records prompts."""

    def __init__(self, parts=None, finish_reason="STOP", error=None):
        self.parts = parts or []
        self.finish_reason = finish_reason
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return Generation(parts=list(self.parts), finish_reason=self.finish_reason)


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """No test ever talks to a real backend or webhook."""
    monkeypatch.setattr(llm, "GEMINI_API_KEY", "")
    monkeypatch.setattr(events, "EVENTS_WEBHOOK_URL", "")


@pytest.fixture
def documents():
    return DocumentStore()

@pytest.fixture
def users():
    return UserStore()

@pytest.fixture
def publisher():
    return EventPublisher(webhook_url="")

@pytest.fixture
def client_user(users):
    return users.add(User(name="Casey Client", email="casey@example.com", role=CLIENT))

@pytest.fixture
def other_client(users):
    return users.add(User(name="Olly Other", email="olly@example.com", role=CLIENT))

@pytest.fixture
def admin(users):
    return users.add(User(name="Ada Admin", email="ada@example.com", role=ADMIN))

@pytest.fixture
def gdpr_lawyer(users):
    return users.add(User(name="Gale Lawyer", email="gale@example.com", role=LAWYER,
                          specializations=["GDPR", "Privacy Law"]))

@pytest.fixture
def ccpa_lawyer(users):
    return users.add(User(name="Cal Lawyer", email="cal@example.com", role=LAWYER,
                          specializations=["CCPA"]))

@pytest.fixture
def service(documents, users, publisher):
    return ComplianceService(documents, users, publisher)


@pytest.fixture
def http(monkeypatch, service):
    monkeypatch.setattr(app_module, "service", service)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c

def auth(user):
    return {"X-User-Id": user.id}
