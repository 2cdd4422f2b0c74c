"""Base screen classes with notification support."""

from typing import Generic, TypeVar

from textual.app import ComposeResult
from textual.screen import ModalScreen, Screen

from ..models.exceptions import ConsoleError, operator_message
from ..services.notification import NotificationRequest, NotificationSeverity
from ..widgets.notification import ConsoleNotificationRack

ModalResultType = TypeVar("ModalResultType", covariant=True)


class _NotifyMixin:
    """Shared notification helpers for screens and modals."""

    def notify_operator(
        self,
        message: str,
        severity: NotificationSeverity | str = NotificationSeverity.SUCCESS,
    ) -> None:
        """Post a notification using the app's configured timeouts."""
        if isinstance(severity, str):
            severity = NotificationSeverity(severity)
        self.post_message(self.app.notification_service.request(message, severity))

    def notify_error(self, error: ConsoleError, fallback: str | None = None) -> None:
        self.notify_operator(operator_message(error, fallback), NotificationSeverity.ERROR)

    def on_notification_request(self, event: NotificationRequest) -> None:
        racks = self.query("#notifications").results(ConsoleNotificationRack)
        for rack in racks:
            rack.show(event.message, event.severity, event.timeout)
            break


class ConsoleScreen(_NotifyMixin, Screen):
    """Base screen with a notification rack in an overlay layer.

    Subclasses yield their own widgets first, then ``super().compose()``.
    """

    DEFAULT_CSS = """
    ConsoleScreen {
        layers: base notification;
    }

    ConsoleScreen > ConsoleNotificationRack {
        layer: notification;
        dock: bottom;
        height: auto;
        width: auto;
        margin: 0 0 1 1;
    }
    """

    def compose(self) -> ComposeResult:
        yield ConsoleNotificationRack(id="notifications")


class ConsoleModalScreen(_NotifyMixin, ModalScreen[ModalResultType], Generic[ModalResultType]):
    """Base modal: focus trapping, escape to dismiss, notification rack.

    Subclasses use the modal-base/modal-sm/modal-md/modal-lg classes and a
    ``Vertical#dialog`` container.
    """

    DEFAULT_CSS = """
    ConsoleModalScreen {
        layers: base notification;
    }

    ConsoleModalScreen > ConsoleNotificationRack {
        layer: notification;
        dock: bottom;
        height: auto;
        width: auto;
        margin: 0 0 1 1;
    }
    """

    BINDINGS = [
        ("escape", "dismiss_modal", "Cancel"),
    ]

    def compose(self) -> ComposeResult:
        yield ConsoleNotificationRack(id="notifications")

    def action_dismiss_modal(self) -> None:
        self.dismiss(None)
