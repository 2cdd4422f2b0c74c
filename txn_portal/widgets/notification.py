"""Notification rack for the console screens.

A failing auto-refresh can report the same error over and over; the rack
folds identical consecutive notifications into one line with a counter.
"""

from textual.containers import Container
from textual.timer import Timer
from textual.widgets import Static

from ..services.notification import NotificationSeverity


class ConsoleNotification(Static):
    """One notification line.

    A timeout of 0 or less keeps it on screen until clicked or replaced.
    """

    def __init__(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ):
        # Server messages may contain brackets; show them literally
        super().__init__(message, markup=False)
        self.message = message
        self.severity = severity
        self.count = 1
        self._timeout = timeout
        self._timer: Timer | None = None

    def on_mount(self) -> None:
        self.add_class(f"-{self.severity.value}")
        self._start_timer()

    def _start_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self._timeout > 0:
            self._timer = self.set_timer(self._timeout, self.dismiss)

    def matches(self, message: str, severity: NotificationSeverity) -> bool:
        return self.message == message and self.severity == severity

    def repeat(self) -> None:
        """Count another occurrence and restart the timeout."""
        self.count += 1
        self.update(f"{self.message} (x{self.count})")
        self._start_timer()

    def dismiss(self) -> None:
        self.add_class("-dismissing")
        self.set_timer(0.15, self.remove)

    def on_click(self) -> None:
        self.dismiss()


class ConsoleNotificationRack(Container):
    """Shows the latest notification; hidden while empty."""

    def on_mount(self) -> None:
        self.display = False

    @property
    def current(self) -> ConsoleNotification | None:
        for child in self.children:
            if isinstance(child, ConsoleNotification) and not child.has_class("-dismissing"):
                return child
        return None

    def show(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ) -> None:
        """Display a notification, folding it into the current one if identical."""
        current = self.current
        if current is not None and current.matches(message, severity):
            current.repeat()
            return
        for child in self.children:
            child.remove()
        self.mount(ConsoleNotification(message, severity, timeout))
        self.display = True

    def _hide_if_empty(self) -> None:
        if not self.children:
            self.display = False

    def on_descendant_removed(self, event) -> None:
        self.set_timer(0.01, self._hide_if_empty)
