"""ConfirmModal: yes/no dialog for control actions."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Button, Static

from ..services.dispatcher import ConfirmPrompt
from .base import ConsoleModalScreen


class ConfirmModal(ConsoleModalScreen[bool]):
    """Asks the operator to confirm one stage of a control action.

    Keyboard:
        y       - Confirm
        n/esc   - Cancel
        h/l     - Move between buttons
        enter   - Press highlighted button
    """

    BINDINGS = [
        ("y", "answer(True)", "Yes"),
        ("n", "answer(False)", "No"),
        ("escape", "answer(False)", "Cancel"),
        ("h", "move(-1)", "Left"),
        ("l", "move(1)", "Right"),
        ("left", "move(-1)", "Left"),
        ("right", "move(1)", "Right"),
        ("enter", "press", "Select"),
    ]

    # 0 = cancel, 1 = confirm; cancel is the default for risky prompts
    selected_index: reactive[int] = reactive(1)

    DEFAULT_CSS = """
    ConfirmModal #dialog.-risky {
        border: round $error-darken-2;
    }

    ConfirmModal #body {
        width: 100%;
        margin-bottom: 1;
    }

    ConfirmModal #dialog.-risky #body {
        color: $warning;
    }

    ConfirmModal #buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }

    ConfirmModal #buttons Button {
        margin: 0 1;
    }

    ConfirmModal #buttons Button.highlighted {
        border: solid $surface-lighten-1;
    }
    """

    def __init__(self, prompt: ConfirmPrompt) -> None:
        super().__init__()
        self._prompt = prompt
        if prompt.risky:
            self.set_reactive(ConfirmModal.selected_index, 0)

    @property
    def prompt(self) -> ConfirmPrompt:
        return self._prompt

    def compose(self) -> ComposeResult:
        self.add_class("modal-base", "modal-md")
        with Vertical(id="dialog", classes="-risky" if self._prompt.risky else ""):
            yield Static(self._prompt.title, classes="dialog-title")
            yield Static(self._prompt.body, id="body", markup=False)
            with Horizontal(id="buttons"):
                yield Button("Cancel", variant="default", id="cancel")
                yield Button(
                    "Confirm",
                    variant="error" if self._prompt.risky else "primary",
                    id="confirm",
                )
            yield Static("y confirm · n/esc cancel", classes="dialog-hint")
        yield from super().compose()

    def on_mount(self) -> None:
        self._update_highlight()

    def watch_selected_index(self, index: int) -> None:
        self._update_highlight()

    def _update_highlight(self) -> None:
        for i, button in enumerate(self.query("#buttons Button").results(Button)):
            button.set_class(i == self.selected_index, "highlighted")

    def action_move(self, delta: int) -> None:
        self.selected_index = max(0, min(1, self.selected_index + delta))

    def action_press(self) -> None:
        self.dismiss(self.selected_index == 1)

    def action_answer(self, confirmed: bool) -> None:
        self.dismiss(confirmed)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm")
