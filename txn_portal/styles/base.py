"""Shared CSS for Txn Portal screens and modals."""

# Modals: centered dialog, width by size class
MODAL_CSS = """
.modal-base {
    align: center middle;
}

.modal-base #dialog {
    height: auto;
    max-height: 90%;
    padding: 1 2;
    background: $surface;
    border: round $primary-darken-2;
    overflow-y: auto;
}

.modal-sm #dialog {
    width: 50vw;
    min-width: 40;
}

.modal-md #dialog {
    width: 65vw;
    min-width: 56;
    max-width: 90;
}

.modal-xl #dialog {
    width: 90vw;
    min-width: 80;
}
"""

# Titles and hints used by every dialog
DIALOG_CSS = """
.dialog-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    margin-bottom: 1;
}

.dialog-hint {
    width: 100%;
    text-align: center;
    color: $text-disabled;
    margin-top: 1;
}
"""

# Session, branch and lock tables
TABLE_CSS = """
DataTable {
    background: $background;
}

DataTable > .datatable--header {
    color: $text-muted;
    text-style: bold;
}

DataTable:focus > .datatable--cursor {
    background: $primary-darken-1;
}
"""

NOTIFICATION_CSS = """
ConsoleNotificationRack {
    height: auto;
    width: 100%;
    align-horizontal: right;
}

ConsoleNotification {
    width: auto;
    max-width: 80;
    height: auto;
    min-height: 3;
    padding: 0 2;
    margin-right: 1;
    background: $surface;
    border: round $success-darken-2;
    color: $text;
    opacity: 1;
}

ConsoleNotification.-warning {
    border: round $warning-darken-2;
    color: $warning;
}

ConsoleNotification.-error {
    border: round $error-darken-2;
    color: $error;
}

ConsoleNotification.-dismissing {
    opacity: 0;
}
"""

BASE_CSS = MODAL_CSS + DIALOG_CSS + TABLE_CSS + NOTIFICATION_CSS
