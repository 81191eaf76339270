import requests

from events import DOCUMENT_UPLOADED, EventPublisher


class _Resp:
    def __init__(self, status):
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}")


def test_subscribers_receive_payload():
    received = []
    pub = EventPublisher(webhook_url="")
    pub.subscribe(DOCUMENT_UPLOADED, received.append)
    assert pub.publish(DOCUMENT_UPLOADED, {"documentId": "d1"}) == 1
    assert received == [{"documentId": "d1"}]


def test_failing_subscriber_does_not_stop_others():
    received = []
    pub = EventPublisher(webhook_url="")

    def broken(_):
        raise RuntimeError("mailer down")

    pub.subscribe(DOCUMENT_UPLOADED, broken)
    pub.subscribe(DOCUMENT_UPLOADED, received.append)
    assert pub.publish(DOCUMENT_UPLOADED, {"documentId": "d1"}) == 1
    assert received == [{"documentId": "d1"}]


def test_webhook_receives_named_event(monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return _Resp(204)

    monkeypatch.setattr(requests, "post", fake_post)
    pub = EventPublisher(webhook_url="https://hooks.test/events", timeout=3)
    assert pub.publish(DOCUMENT_UPLOADED, {"documentId": "d1"}) == 1
    assert sent == {"url": "https://hooks.test/events",
                    "json": {"name": "document/uploaded", "data": {"documentId": "d1"}},
                    "timeout": 3}


def test_webhook_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: _Resp(500))
    pub = EventPublisher(webhook_url="https://hooks.test/events")
    assert pub.publish(DOCUMENT_UPLOADED, {"documentId": "d1"}) == 0


def test_no_subscribers_no_webhook():
    assert EventPublisher(webhook_url="").publish("anything", {}) == 0
