"""
Notification sink for user-facing failure messages.
"""

from dataclasses import dataclass
from typing import Protocol

from shared.logging import get_logger


@dataclass(frozen=True)
class Notification:
    """A transient message for the user."""
    message: str
    severity: str = "error"
    duration: float = 5.0


class NotificationSink(Protocol):
    """Anything able to show a notification to the user."""

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotificationSink:
    """Default sink: writes notifications to the structured log."""

    def __init__(self):
        self.logger = get_logger("console.notifications")

    def notify(self, notification: Notification) -> None:
        self.logger.info(
            "User notification",
            message=notification.message,
            severity=notification.severity,
            duration=notification.duration
        )
