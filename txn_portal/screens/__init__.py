"""Screens for Txn Portal."""

from txn_portal.screens.branch_sessions import BranchSessionScreen
from txn_portal.screens.confirm_modal import ConfirmModal
from txn_portal.screens.global_locks import GlobalLockScreen
from txn_portal.screens.help import HelpScreen
from txn_portal.screens.main import TransactionScreen

__all__ = [
    "BranchSessionScreen",
    "ConfirmModal",
    "GlobalLockScreen",
    "HelpScreen",
    "TransactionScreen",
]
