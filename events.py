"""
Best-effort event publishing (audit trail, notifications).

Delivery failures are logged and dropped; publishing never raises.
"""

import logging
import os
from collections import defaultdict
from typing import Callable, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

EVENTS_WEBHOOK_URL = os.environ.get("EVENTS_WEBHOOK_URL", "")
EVENTS_TIMEOUT     = int(os.environ.get("EVENTS_TIMEOUT", "5"))   # seconds

DOCUMENT_UPLOADED = "document/uploaded"
DOCUMENT_REVIEWED = "document/status.updated"


class EventPublisher:
    def __init__(self, webhook_url: Optional[str] = None, timeout: int = EVENTS_TIMEOUT):
        self.webhook_url = EVENTS_WEBHOOK_URL if webhook_url is None else webhook_url
        self.timeout = timeout
        self._handlers: Dict[str, List[Callable[[dict], None]]] = defaultdict(list)

    def subscribe(self, name: str, handler: Callable[[dict], None]) -> None:
        self._handlers[name].append(handler)

    def publish(self, name: str, payload: dict) -> int:
        """Deliver to every subscriber and the webhook. Returns successful deliveries."""
        delivered = 0
        for handler in list(self._handlers.get(name, [])):
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Event handler for %s failed (non-critical): %s", name, e)

        if self.webhook_url:
            try:
                resp = requests.post(self.webhook_url, json={"name": name, "data": payload},
                                     timeout=self.timeout)
                resp.raise_for_status()
                delivered += 1
            except requests.exceptions.RequestException as e:
                logger.warning("Event webhook for %s failed (non-critical): %s", name, e)

        return delivered
