"""Tables for global sessions, branch sessions and global locks.

Each table keeps the row objects it was last given so the screen can ask
for the one under the cursor. Status cells go through the status catalog:
known codes get a label coloured by severity, unknown codes show the raw
number unstyled.
"""

from rich.text import Text
from textual.widgets import DataTable

from ..models.events import BranchSessionSelected, GlobalSessionSelected
from ..models.lock import GlobalLock
from ..models.session import BranchSession, GlobalSession
from ..services.status_catalog import Severity, StatusScope, label_for

SEVERITY_STYLES = {
    Severity.PENDING: "yellow",
    Severity.SUCCESS: "green",
    Severity.ERROR: "red",
    Severity.WARNING: "dark_orange",
}


def status_text(code: int, scope: StatusScope) -> Text:
    """Render a status code as a styled cell."""
    label = label_for(code, scope)
    if label.severity is None:
        return Text(label.label)
    return Text(label.label, style=SEVERITY_STYLES[label.severity])


def _cell(value) -> str:
    return "" if value is None else str(value)


class GlobalSessionTable(DataTable):
    """Global sessions, one row per xid."""

    COLUMNS = (
        "xid", "transactionId", "applicationId", "serviceGroup",
        "transactionName", "status", "timeout", "beginTime", "branches",
    )

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._sessions: list[GlobalSession] = []

    def on_mount(self) -> None:
        self.add_columns(*self.COLUMNS)

    @property
    def sessions(self) -> list[GlobalSession]:
        return self._sessions

    def update_sessions(self, sessions: list[GlobalSession]) -> None:
        """Replace all rows, keeping the cursor near where it was."""
        previous = self.cursor_row
        self._sessions = list(sessions)
        self.clear()
        for session in self._sessions:
            self.add_row(
                session.xid,
                session.transaction_id,
                session.application_id,
                session.transaction_service_group,
                session.transaction_name,
                status_text(session.status, StatusScope.GLOBAL),
                _cell(session.timeout),
                _cell(session.begin_time),
                _cell(len(session.branch_sessions) or ""),
            )
        if self._sessions:
            self.move_cursor(row=min(previous, len(self._sessions) - 1))

    def get_selected(self) -> GlobalSession | None:
        if not self._sessions or not 0 <= self.cursor_row < len(self._sessions):
            return None
        return self._sessions[self.cursor_row]

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        selected = self.get_selected()
        if selected is not None:
            self.post_message(GlobalSessionSelected(selected))


class BranchSessionTable(DataTable):
    """Branch sessions of one global session."""

    COLUMNS = (
        "branchId", "resourceGroupId", "branchType", "status",
        "resourceId", "clientId", "applicationData",
    )

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._branches: list[BranchSession] = []

    def on_mount(self) -> None:
        self.add_columns(*self.COLUMNS)

    @property
    def branches(self) -> list[BranchSession]:
        return self._branches

    def update_branches(self, branches: list[BranchSession]) -> None:
        previous = self.cursor_row
        self._branches = list(branches)
        self.clear()
        for branch in self._branches:
            self.add_row(
                branch.branch_id,
                branch.resource_group_id,
                branch.branch_type,
                status_text(branch.status, StatusScope.BRANCH),
                branch.resource_id,
                branch.client_id,
                branch.application_data,
            )
        if self._branches:
            self.move_cursor(row=min(previous, len(self._branches) - 1))

    def get_selected(self) -> BranchSession | None:
        if not self._branches or not 0 <= self.cursor_row < len(self._branches):
            return None
        return self._branches[self.cursor_row]

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        selected = self.get_selected()
        if selected is not None:
            self.post_message(BranchSessionSelected(selected))


class GlobalLockTable(DataTable):
    """Row locks held by branches."""

    COLUMNS = (
        "xid", "transactionId", "branchId", "resourceId",
        "tableName", "pk", "rowKey", "gmtCreate", "gmtModified",
    )

    def __init__(self, **kwargs) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True, **kwargs)
        self._locks: list[GlobalLock] = []

    def on_mount(self) -> None:
        self.add_columns(*self.COLUMNS)

    @property
    def locks(self) -> list[GlobalLock]:
        return self._locks

    def update_locks(self, locks: list[GlobalLock]) -> None:
        previous = self.cursor_row
        self._locks = list(locks)
        self.clear()
        for lock in self._locks:
            self.add_row(
                lock.xid,
                lock.transaction_id,
                lock.branch_id,
                lock.resource_id,
                lock.table_name,
                lock.pk,
                lock.row_key,
                _cell(lock.gmt_create),
                _cell(lock.gmt_modified),
            )
        if self._locks:
            self.move_cursor(row=min(previous, len(self._locks) - 1))

    def get_selected(self) -> GlobalLock | None:
        if not self._locks or not 0 <= self.cursor_row < len(self._locks):
            return None
        return self._locks[self.cursor_row]
