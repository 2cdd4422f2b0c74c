"""Widgets for Txn Portal."""

from txn_portal.widgets.notification import ConsoleNotification, ConsoleNotificationRack
from txn_portal.widgets.pagination import PaginationBar
from txn_portal.widgets.session_table import (
    BranchSessionTable,
    GlobalLockTable,
    GlobalSessionTable,
    status_text,
)

__all__ = [
    "ConsoleNotification",
    "ConsoleNotificationRack",
    "PaginationBar",
    "BranchSessionTable",
    "GlobalLockTable",
    "GlobalSessionTable",
    "status_text",
]
