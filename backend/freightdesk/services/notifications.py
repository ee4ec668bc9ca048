"""Push notification sink port and the in-process adapters behind it."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Sequence

from ..config import get_settings
from ..models import Order
from ..statuses import status_label

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Delivers a push message to a set of device tokens."""

    @abstractmethod
    def send(
        self,
        tokens: Sequence[str],
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
    ) -> None:
        ...


class LoggingNotificationSink(NotificationSink):
    def send(self, tokens, title, body, data=None) -> None:
        logger.info("push to %d device(s): %s | %s | %s", len(tokens), title, body, data or {})


class InMemoryNotificationSink(NotificationSink):
    """Keeps sent pushes in memory; can be told to fail for error-path tests."""

    def __init__(self):
        self.sent: List[dict] = []
        self.should_fail = False

    def send(self, tokens, title, body, data=None) -> None:
        if self.should_fail:
            raise RuntimeError("push delivery failed")
        self.sent.append({"tokens": list(tokens), "title": title, "body": body, "data": data})


@dataclass(frozen=True)
class StatusNotification:
    tokens: List[str]
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)


def build_status_notification(order: Order) -> Optional[StatusNotification]:
    """Snapshot everything the push needs so it can be sent after the session is gone."""
    customer = order.customer
    if customer is None or not customer.push_tokens:
        return None
    label = status_label(order.status, order.country)
    return StatusNotification(
        tokens=list(customer.push_tokens),
        title="تحديث حالة الطلب",
        body=f"طلبك {order.tracking_number}: {label}",
        data={"orderId": str(order.id), "status": order.status.value},
    )


def dispatch(sink: NotificationSink, notification: StatusNotification) -> None:
    """Fire and forget: a failed push is logged and never reaches the caller."""
    try:
        sink.send(notification.tokens, notification.title, notification.body, notification.data)
    except Exception:
        logger.exception("push notification failed for order %s", notification.data.get("orderId"))


@lru_cache
def get_notification_sink() -> NotificationSink:
    backend = get_settings().notification_backend
    if backend == "memory":
        return InMemoryNotificationSink()
    if backend == "log":
        return LoggingNotificationSink()
    raise ValueError(f"Unknown notification backend: {backend}")
