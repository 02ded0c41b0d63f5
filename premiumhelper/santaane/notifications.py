"""Transient, stacked user notifications."""

import itertools
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable


ALERT_SECONDS = 5.0
TOAST_SECONDS = 4.0


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class Notification:
    id: int
    type: NotificationType
    message: str
    created_at: float
    lifetime: float

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.lifetime


class NotificationCenter:
    """Stack of notifications that dismiss themselves after a delay.

    Each notification can also be dismissed on its own. There is no retry
    affordance; a notification only reports.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._ids = itertools.count(1)
        self._stack: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        """Call ``listener`` with every new notification."""
        self._listeners.append(listener)

    def notify(
        self,
        message: str,
        type: NotificationType = NotificationType.INFO,
        lifetime: float = ALERT_SECONDS,
    ) -> Notification:
        notification = Notification(
            id=next(self._ids),
            type=NotificationType(type),
            message=message,
            created_at=self._clock(),
            lifetime=lifetime,
        )
        self._stack.append(notification)
        for listener in self._listeners:
            listener(notification)
        return notification

    def success_toast(self, message: str) -> Notification:
        return self.notify(message, NotificationType.SUCCESS, lifetime=TOAST_SECONDS)

    def dismiss(self, notification_id: int) -> bool:
        before = len(self._stack)
        self._stack = [n for n in self._stack if n.id != notification_id]
        return len(self._stack) < before

    @property
    def active(self) -> list[Notification]:
        """Notifications still on screen, oldest first."""
        now = self._clock()
        self._stack = [n for n in self._stack if not n.expired(now)]
        return list(self._stack)
