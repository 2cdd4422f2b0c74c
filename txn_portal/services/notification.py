"""Notification requests shown in the console's notification rack."""

from enum import Enum

from textual.message import Message

from .config import NotificationSettings


class NotificationSeverity(Enum):
    """Notification severity levels."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationRequest(Message):
    """Message requesting a notification be displayed."""

    def __init__(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ):
        self.message = message
        self.severity = severity
        self.timeout = timeout
        super().__init__()


class NotificationService:
    """Builds notification requests with the configured timeouts."""

    def __init__(self, settings: NotificationSettings | None = None):
        self._settings = settings or NotificationSettings()

    def timeout_for(self, severity: NotificationSeverity) -> float:
        if severity == NotificationSeverity.ERROR:
            return self._settings.error_timeout
        if severity == NotificationSeverity.WARNING:
            return self._settings.warning_timeout
        return self._settings.success_timeout

    def request(self, message: str, severity: NotificationSeverity) -> NotificationRequest:
        return NotificationRequest(
            message=message,
            severity=severity,
            timeout=self.timeout_for(severity),
        )
