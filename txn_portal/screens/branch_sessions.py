"""BranchSessionScreen: branch sessions of one global transaction."""

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..models.events import BranchSessionSelected
from ..models.session import BranchSession
from ..services.advisory import ControlAction
from ..services.dispatcher import ActionDispatcher, branch_actions, retry_action_for_branch
from ..services.fetcher import DetailView
from ..services.notification import NotificationSeverity
from ..widgets.session_table import BranchSessionTable
from .base import ConsoleModalScreen


class BranchSessionScreen(ConsoleModalScreen[None]):
    """Modal listing the branches of the open detail view.

    The parent screen calls ``update_branches`` after each re-fetch so the
    list follows the server while the modal is open.
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("d", "delete", "Delete"),
        ("D", "force_delete", "Force delete"),
        ("s", "toggle_retry", "Retry"),
        ("g", "view_locks", "Locks"),
    ]

    DEFAULT_CSS = """
    BranchSessionScreen #branches {
        height: auto;
        max-height: 60vh;
    }
    """

    def __init__(
        self,
        detail: DetailView,
        dispatcher: ActionDispatcher,
        open_locks: Callable[[str | None, str | None], None] | None = None,
    ) -> None:
        super().__init__()
        self._detail = detail
        self._dispatcher = dispatcher
        self._open_locks = open_locks

    @property
    def detail(self) -> DetailView:
        return self._detail

    def compose(self) -> ComposeResult:
        self.add_class("modal-base", "modal-xl")
        with Vertical(id="dialog"):
            yield Static(f"branch sessions · {self._detail.xid}", classes="dialog-title", markup=False)
            yield BranchSessionTable(id="branches")
            yield Static("d delete · D force delete · s retry · g locks · esc close", id="branch-hint", classes="dialog-hint")
        yield from super().compose()

    def on_mount(self) -> None:
        table = self.query_one("#branches", BranchSessionTable)
        table.update_branches(self._detail.branches)
        table.focus()

    def update_branches(self, branches: list[BranchSession]) -> None:
        self._detail.branches = list(branches)
        if self.is_mounted:
            self.query_one("#branches", BranchSessionTable).update_branches(branches)

    def on_branch_session_selected(self, event: BranchSessionSelected) -> None:
        self.query_one("#branch-hint", Static).update(" · ".join(branch_actions(event.branch)))

    def _selected(self) -> BranchSession | None:
        selected = self.query_one("#branches", BranchSessionTable).get_selected()
        if selected is None:
            self.notify_operator("no branch selected", NotificationSeverity.WARNING)
        return selected

    def _run(self, action: ControlAction, branch: BranchSession) -> None:
        self.run_worker(self._dispatcher.run(action, branch), group="actions")

    def action_delete(self) -> None:
        branch = self._selected()
        if branch is not None:
            self._run(ControlAction.DELETE_BRANCH, branch)

    def action_force_delete(self) -> None:
        branch = self._selected()
        if branch is not None:
            self._run(ControlAction.FORCE_DELETE_BRANCH, branch)

    def action_toggle_retry(self) -> None:
        branch = self._selected()
        if branch is not None:
            self._run(retry_action_for_branch(branch), branch)

    def action_view_locks(self) -> None:
        branch = self._selected()
        if branch is None or self._open_locks is None:
            return
        self._open_locks(branch.xid, branch.branch_id)

    def action_close(self) -> None:
        self.dismiss(None)
