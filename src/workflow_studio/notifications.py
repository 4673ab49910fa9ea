"""Notification collaborator: human-readable status messages."""
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from workflow_studio.observability import get_logger, with_run_context

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    """Severity of a notification."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """A message shown to the operator."""

    level: NotificationLevel
    message: str
    event: str | None = Field(default=None, description="Machine-readable event name")


class Notifier(Protocol):
    """Protocol for notifiers."""

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes every notification to the structured log."""

    _LEVELS = {
        NotificationLevel.SUCCESS: "info",
        NotificationLevel.INFO: "info",
        NotificationLevel.ERROR: "warning",
    }

    def notify(self, notification: Notification) -> None:
        log = getattr(logger, self._LEVELS[notification.level])
        log(notification.message, extra=with_run_context(workflow_event=notification.event))


class MemoryNotifier:
    """Notifier that keeps notifications in memory."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()
