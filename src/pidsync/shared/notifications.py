"""
User-facing notifications raised by the engines and the editor session.

The canvas UI decides how to show them; without one they go to the log.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

from .infrastructure.monitoring.logger import get_logger


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    level: NotificationLevel
    message: str


Notifier = Callable[[Notification], None]


_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


def log_notifier(notification: Notification) -> None:
    """Default notifier: write the notification to the log."""
    get_logger(__name__).log(_LOG_LEVELS[notification.level], notification.message)


@dataclass
class NotificationInbox:
    """Notifier that keeps what it receives, for headless sessions and tests."""

    received: List[Notification] = field(default_factory=list)

    def __call__(self, notification: Notification) -> None:
        self.received.append(notification)

    def messages(self, level: NotificationLevel = None) -> List[str]:
        return [n.message for n in self.received if level is None or n.level == level]

    def clear(self) -> None:
        self.received.clear()
