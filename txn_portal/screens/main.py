"""TransactionScreen: global session list with filters and control actions."""

import logging
from datetime import timezone, tzinfo

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Header, Input, Select, Static, Switch

from ..models.events import GlobalSessionSelected
from ..models.exceptions import ConsoleError, ValidationError
from ..models.session import GlobalSession
from ..services.advisory import ControlAction
from ..services.client import ConsoleClient
from ..services.config import Config, ConfigManager
from ..services.dispatcher import (
    ActionDispatcher,
    ConfirmPrompt,
    global_actions,
    retry_action_for_global,
)
from ..services.fetcher import SessionFetcher, SessionTableState
from ..services.notification import NotificationSeverity
from ..services.query_model import SessionQueryModel
from ..services.status_catalog import StatusScope, status_choices
from ..services.timestamps import parse_time_input
from ..widgets.pagination import PaginationBar
from ..widgets.session_table import GlobalSessionTable
from .base import ConsoleScreen
from .confirm_modal import ConfirmModal

logger = logging.getLogger(__name__)

HINT = "/ filter  enter search  [ ] page  v branches  g locks  d delete  s retry  ? help  q quit"


class TransactionScreen(ConsoleScreen):
    """Main screen: filter bar, global session table, pagination."""

    BINDINGS = [
        Binding("slash", "focus_filters", "Filter"),
        Binding("escape", "focus_table", "Table", show=False),
        Binding("enter", "search", "Search", show=False),
        ("r", "refresh", "Refresh"),
        Binding("R", "reset_filters", "Reset", show=False),
        Binding("left_square_bracket", "prev_page", "Prev", show=False),
        Binding("right_square_bracket", "next_page", "Next", show=False),
        Binding("minus", "smaller_page", "Smaller", show=False),
        Binding("plus", "larger_page", "Larger", show=False),
        ("b", "toggle_branches", "Branches"),
        ("v", "view_branches", "View branches"),
        ("g", "view_locks", "Locks"),
        ("d", "delete", "Delete"),
        Binding("D", "force_delete", "Force delete", show=False),
        ("s", "toggle_retry", "Retry"),
        Binding("c", "commit_or_rollback", "Commit/rollback", show=False),
        Binding("x", "change_status", "Change status", show=False),
        ("question_mark", "show_help", "Help"),
        ("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    TransactionScreen {
        layout: vertical;
        padding: 0;
    }

    TransactionScreen #filters {
        height: auto;
        padding: 0 1;
    }

    TransactionScreen #filters Input {
        width: 1fr;
    }

    TransactionScreen #filter-status {
        width: 28;
    }

    TransactionScreen #filters .switch-label {
        width: auto;
        padding: 1 0 0 1;
        color: $text-muted;
    }

    TransactionScreen #filters Button {
        min-width: 8;
        margin-left: 1;
    }

    TransactionScreen #sessions {
        height: 1fr;
    }

    TransactionScreen .hint {
        dock: bottom;
        height: 1;
        color: $text-disabled;
        text-align: center;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        client: ConsoleClient,
        config: Config,
        tz: tzinfo | None = timezone.utc,
        config_manager: ConfigManager | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._config = config
        self._config_manager = config_manager
        self._tz = tz
        self._query = SessionQueryModel(
            on_fetch=self._start_refresh,
            page_size=config.default_page_size,
        )
        self._state = SessionTableState(query=self._query)
        self._fetcher = SessionFetcher(
            client,
            tz=tz,
            discard_stale=config.discard_stale_responses,
        )
        self._dispatcher = ActionDispatcher(
            client,
            confirm=self._confirm,
            notify=self._notify,
            refresh=self._reload,
        )
        self._branch_screen = None
        self._table: GlobalSessionTable | None = None
        self._pagination: PaginationBar | None = None

    @property
    def state(self) -> SessionTableState:
        return self._state

    @property
    def query_model(self) -> SessionQueryModel:
        return self._query

    @property
    def dispatcher(self) -> ActionDispatcher:
        return self._dispatcher

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="filters"):
            yield Input(placeholder="xid", id="filter-xid")
            yield Input(placeholder="applicationId", id="filter-application")
            yield Select(
                status_choices(StatusScope.GLOBAL),
                prompt="status",
                id="filter-status",
            )
            yield Input(placeholder="begin from  YYYY-MM-DD HH:MM", id="filter-start")
            yield Input(placeholder="begin to  YYYY-MM-DD HH:MM", id="filter-end")
            yield Static("branches", classes="switch-label")
            yield Switch(value=False, id="filter-branch")
            yield Button("search", variant="primary", id="search")
            yield Button("reset", id="reset")
        yield GlobalSessionTable(id="sessions")
        yield Static(HINT, id="hint", classes="hint", markup=False)
        yield PaginationBar(id="pagination")
        yield from super().compose()

    def on_mount(self) -> None:
        self._table = self.query_one("#sessions", GlobalSessionTable)
        self._pagination = self.query_one("#pagination", PaginationBar)
        self._table.focus()
        self._start_refresh()

    @property
    def table(self) -> GlobalSessionTable:
        if self._table is None:
            self._table = self.query_one("#sessions", GlobalSessionTable)
        return self._table

    # --- fetching ---

    def _start_refresh(self) -> None:
        """Run the current query in a worker."""
        self._render_pagination()
        self.run_worker(self._refresh(), group="refresh")

    async def _reload(self) -> None:
        """Fetch and render; errors propagate to the caller."""
        try:
            applied = await self._fetcher.refresh(self._state)
        finally:
            self._render_pagination()
        if applied:
            self._render_rows()

    async def _refresh(self) -> None:
        try:
            await self._reload()
        except ConsoleError as e:
            logger.warning(f"Session query failed: {e}")
            self.notify_error(e, "query failed")

    def _render_rows(self) -> None:
        self.table.update_sessions(self._state.rows)
        if self._branch_screen is not None and self._state.detail is not None:
            self._branch_screen.update_branches(self._state.detail.branches)

    def _render_pagination(self) -> None:
        if self._pagination is None:
            return
        param = self._state.param
        self._pagination.update_from_state(
            param.page_num, param.page_size, self._state.total, self._state.loading
        )

    # --- filters ---

    def _read_filters(self) -> bool:
        """Copy the filter widgets into the query model."""
        try:
            self._query.set_filter("xid", self.query_one("#filter-xid", Input).value)
            self._query.set_filter(
                "application_id", self.query_one("#filter-application", Input).value
            )
            status = self.query_one("#filter-status", Select).value
            self._query.set_filter("status", None if status is Select.BLANK else status)
            self._query.set_time_range(
                parse_time_input(self.query_one("#filter-start", Input).value, self._tz),
                parse_time_input(self.query_one("#filter-end", Input).value, self._tz),
            )
        except ValidationError as e:
            self.notify_operator(str(e), NotificationSeverity.WARNING)
            return False
        return True

    def _clear_filter_widgets(self) -> None:
        for input_id in ("#filter-xid", "#filter-application", "#filter-start", "#filter-end"):
            self.query_one(input_id, Input).value = ""
        self.query_one("#filter-status", Select).clear()
        with self.prevent(Switch.Changed):
            self.query_one("#filter-branch", Switch).value = False

    def action_search(self) -> None:
        if self._read_filters():
            self._start_refresh()

    def action_reset_filters(self) -> None:
        self._query.reset_filters()
        self._clear_filter_widgets()

    def action_focus_filters(self) -> None:
        self.query_one("#filter-xid", Input).focus()

    def action_focus_table(self) -> None:
        self.table.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_search()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "search":
            self.action_search()
        elif event.button.id == "reset":
            self.action_reset_filters()

    def on_switch_changed(self, event: Switch.Changed) -> None:
        if event.switch.id == "filter-branch":
            self._query.set_with_branch(event.value)

    def on_global_session_selected(self, event: GlobalSessionSelected) -> None:
        keys = global_actions(event.session, self._state.param.with_branch)
        self.query_one("#hint", Static).update(" · ".join(keys))

    # --- pagination ---

    def action_refresh(self) -> None:
        self._start_refresh()

    def action_prev_page(self) -> None:
        if self._state.param.page_num > 1:
            self._query.set_page(self._state.param.page_num - 1)

    def action_next_page(self) -> None:
        param = self._state.param
        pages = max(1, -(-self._state.total // param.page_size))
        if param.page_num < pages:
            self._query.set_page(param.page_num + 1)

    def _step_page_size(self, step: int) -> None:
        choices = sorted(self._config.page_size_choices)
        current = self._state.param.page_size
        if current in choices:
            index = choices.index(current) + step
        else:
            index = 0 if step > 0 else len(choices) - 1
        if 0 <= index < len(choices):
            self._query.set_page_size(choices[index])
            self._remember_page_size(choices[index])

    def _remember_page_size(self, size: int) -> None:
        if self._config_manager is None:
            return
        try:
            self._config_manager.remember_page_size(size)
        except OSError as e:
            logger.warning(f"Could not save page size: {e}")
            self.notify_operator(f"page size not saved: {e}", NotificationSeverity.WARNING)

    def action_smaller_page(self) -> None:
        self._step_page_size(-1)

    def action_larger_page(self) -> None:
        self._step_page_size(1)

    def action_toggle_branches(self) -> None:
        switch = self.query_one("#filter-branch", Switch)
        switch.value = not switch.value

    # --- drill down ---

    def _selected(self) -> GlobalSession | None:
        selected = self.table.get_selected()
        if selected is None:
            self.notify_operator("no session selected", NotificationSeverity.WARNING)
        return selected

    def action_view_branches(self) -> None:
        from .branch_sessions import BranchSessionScreen

        if not self._state.param.with_branch:
            self.notify_operator("turn on branches (b) first", NotificationSeverity.WARNING)
            return
        selected = self._selected()
        if selected is None:
            return

        detail = self._state.open_detail(selected)
        self._branch_screen = BranchSessionScreen(
            detail,
            dispatcher=self._dispatcher,
            open_locks=self.open_locks,
        )

        def handle_close(_result: None) -> None:
            self._branch_screen = None
            self._state.close_detail()

        self.app.push_screen(self._branch_screen, handle_close)

    def open_locks(self, xid: str | None = None, branch_id: str | None = None) -> None:
        from .global_locks import GlobalLockScreen

        self.app.push_screen(
            GlobalLockScreen(self._client, self._config, self._tz, xid=xid, branch_id=branch_id)
        )

    def action_view_locks(self) -> None:
        selected = self._selected()
        if selected is not None:
            self.open_locks(selected.xid)

    # --- control actions ---

    async def _confirm(self, prompt: ConfirmPrompt) -> bool:
        return bool(await self.app.push_screen_wait(ConfirmModal(prompt)))

    def _notify(self, message: str, severity: NotificationSeverity) -> None:
        self.app.notify_operator(message, severity)

    def _run(self, action: ControlAction) -> None:
        selected = self._selected()
        if selected is not None:
            self.run_worker(self._dispatcher.run(action, selected), group="actions")

    def action_delete(self) -> None:
        self._run(ControlAction.DELETE_GLOBAL)

    def action_force_delete(self) -> None:
        self._run(ControlAction.FORCE_DELETE_GLOBAL)

    def action_toggle_retry(self) -> None:
        selected = self._selected()
        if selected is not None:
            self._run(retry_action_for_global(selected))

    def action_commit_or_rollback(self) -> None:
        self._run(ControlAction.SEND_COMMIT_OR_ROLLBACK)

    def action_change_status(self) -> None:
        self._run(ControlAction.CHANGE_GLOBAL_STATUS)

    # --- other ---

    def action_show_help(self) -> None:
        from .help import HelpScreen

        self.app.push_screen(HelpScreen())

    def action_quit(self) -> None:
        self.app.exit()
