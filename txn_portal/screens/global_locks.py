"""GlobalLockScreen: row locks held on behalf of global transactions."""

import logging
from datetime import timezone, tzinfo

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Header, Input, Static

from ..models.exceptions import ConsoleError, ValidationError
from ..models.lock import GlobalLock
from ..services.advisory import ControlAction
from ..services.client import ConsoleClient
from ..services.config import Config
from ..services.dispatcher import ActionDispatcher, ConfirmPrompt
from ..services.fetcher import LockFetcher, LockTableState
from ..services.notification import NotificationSeverity
from ..services.query_model import LockQueryModel
from ..services.timestamps import parse_time_input
from ..widgets.pagination import PaginationBar
from ..widgets.session_table import GlobalLockTable
from .base import ConsoleScreen
from .confirm_modal import ConfirmModal

logger = logging.getLogger(__name__)

# input id -> lock filter key
_FILTER_INPUTS = {
    "lock-xid": "xid",
    "lock-table": "table_name",
    "lock-transaction": "transaction_id",
    "lock-branch": "branch_id",
    "lock-pk": "pk",
    "lock-resource": "resource_id",
}


class GlobalLockScreen(ConsoleScreen):
    """Lock filters, lock table, delete and check."""

    BINDINGS = [
        Binding("slash", "focus_filters", "Filter"),
        Binding("escape", "back", "Back"),
        Binding("enter", "search", "Search", show=False),
        ("r", "refresh", "Refresh"),
        Binding("R", "reset_filters", "Reset", show=False),
        Binding("left_square_bracket", "prev_page", "Prev", show=False),
        Binding("right_square_bracket", "next_page", "Next", show=False),
        ("d", "delete", "Delete"),
        ("k", "check", "Check"),
        ("q", "back", "Back"),
    ]

    DEFAULT_CSS = """
    GlobalLockScreen {
        layout: vertical;
    }

    GlobalLockScreen #lock-filters, GlobalLockScreen #lock-times {
        height: auto;
        padding: 0 1;
    }

    GlobalLockScreen #lock-filters Input, GlobalLockScreen #lock-times Input {
        width: 1fr;
    }

    GlobalLockScreen #lock-times Button {
        min-width: 8;
        margin-left: 1;
    }

    GlobalLockScreen #locks {
        height: 1fr;
    }
    """

    def __init__(
        self,
        client: ConsoleClient,
        config: Config,
        tz: tzinfo | None = timezone.utc,
        xid: str | None = None,
        branch_id: str | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._config = config
        self._tz = tz
        self._initial = {"xid": xid or "", "branch_id": branch_id or ""}
        self._query = LockQueryModel(
            on_fetch=self._start_refresh,
            page_size=config.default_page_size,
            xid=xid,
        )
        if branch_id:
            self._query.set_filter("branch_id", branch_id)
        self._state = LockTableState(query=self._query)
        self._fetcher = LockFetcher(client, tz=tz, discard_stale=config.discard_stale_responses)
        self._dispatcher = ActionDispatcher(
            client,
            confirm=self._confirm,
            notify=lambda message, severity: self.app.notify_operator(message, severity),
            refresh=self._reload,
        )

    @property
    def state(self) -> LockTableState:
        return self._state

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="lock-filters"):
            for input_id, key in _FILTER_INPUTS.items():
                yield Input(
                    value=self._initial.get(key, ""),
                    placeholder=key.replace("_", " "),
                    id=input_id,
                )
        with Horizontal(id="lock-times"):
            yield Input(placeholder="created from  YYYY-MM-DD HH:MM", id="lock-start")
            yield Input(placeholder="created to  YYYY-MM-DD HH:MM", id="lock-end")
            yield Button("search", variant="primary", id="search")
            yield Button("reset", id="reset")
        yield GlobalLockTable(id="locks")
        yield Static("d delete  k check  enter search  [ ] page  esc back", classes="hint", markup=False)
        yield PaginationBar(id="pagination")
        yield from super().compose()

    def on_mount(self) -> None:
        self.query_one("#locks", GlobalLockTable).focus()
        self._start_refresh()

    # --- fetching ---

    def _start_refresh(self) -> None:
        self._render_pagination()
        self.run_worker(self._refresh(), group="refresh")

    async def _reload(self) -> None:
        try:
            applied = await self._fetcher.refresh(self._state)
        finally:
            self._render_pagination()
        if applied:
            self.query_one("#locks", GlobalLockTable).update_locks(self._state.rows)

    async def _refresh(self) -> None:
        try:
            await self._reload()
        except ConsoleError as e:
            logger.warning(f"Lock query failed: {e}")
            self.notify_error(e, "query failed")

    def _render_pagination(self) -> None:
        bars = self.query("#pagination").results(PaginationBar)
        param = self._state.param
        for bar in bars:
            bar.update_from_state(param.page_num, param.page_size, self._state.total, self._state.loading)

    # --- filters ---

    def action_search(self) -> None:
        try:
            for input_id, key in _FILTER_INPUTS.items():
                self._query.set_filter(key, self.query_one(f"#{input_id}", Input).value)
            self._query.set_time_range(
                parse_time_input(self.query_one("#lock-start", Input).value, self._tz),
                parse_time_input(self.query_one("#lock-end", Input).value, self._tz),
            )
        except ValidationError as e:
            self.notify_operator(str(e), NotificationSeverity.WARNING)
            return
        self._start_refresh()

    def action_reset_filters(self) -> None:
        self._query.reset_filters()
        for input_id in [*_FILTER_INPUTS, "lock-start", "lock-end"]:
            self.query_one(f"#{input_id}", Input).value = ""

    def action_focus_filters(self) -> None:
        self.query_one("#lock-xid", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_search()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "search":
            self.action_search()
        elif event.button.id == "reset":
            self.action_reset_filters()

    # --- pagination ---

    def action_refresh(self) -> None:
        self._start_refresh()

    def action_prev_page(self) -> None:
        if self._state.param.page_num > 1:
            self._query.set_page(self._state.param.page_num - 1)

    def action_next_page(self) -> None:
        param = self._state.param
        if param.page_num * param.page_size < self._state.total:
            self._query.set_page(param.page_num + 1)

    # --- lock actions ---

    def _selected(self) -> GlobalLock | None:
        selected = self.query_one("#locks", GlobalLockTable).get_selected()
        if selected is None:
            self.notify_operator("no lock selected", NotificationSeverity.WARNING)
        return selected

    async def _confirm(self, prompt: ConfirmPrompt) -> bool:
        return bool(await self.app.push_screen_wait(ConfirmModal(prompt)))

    def action_delete(self) -> None:
        lock = self._selected()
        if lock is not None:
            self.run_worker(
                self._dispatcher.run(ControlAction.DELETE_GLOBAL_LOCK, lock), group="actions"
            )

    def action_check(self) -> None:
        lock = self._selected()
        if lock is not None:
            self.run_worker(self._check(lock), group="actions")

    async def _check(self, lock: GlobalLock) -> None:
        try:
            held = await self._client.check_global_lock(lock.xid, lock.branch_id)
        except ConsoleError as e:
            self.notify_error(e, "check failed")
            return
        if held:
            self.notify_operator(f"lock held by {lock.xid}")
        else:
            self.notify_operator(f"lock released by {lock.xid}", NotificationSeverity.WARNING)

    def action_back(self) -> None:
        self.app.pop_screen()
