"""Services for Txn Portal."""

from txn_portal.services.client import ConsoleClient
from txn_portal.services.config import Config, ConfigManager
from txn_portal.services.dispatcher import ActionDispatcher, ActionInvocation, ActionState, ConfirmPrompt
from txn_portal.services.fetcher import LockFetcher, SessionFetcher, SessionTableState
from txn_portal.services.query_model import LockQueryModel, SessionQueryModel

__all__ = [
    "ConsoleClient",
    "Config",
    "ConfigManager",
    "ActionDispatcher",
    "ActionInvocation",
    "ActionState",
    "ConfirmPrompt",
    "LockFetcher",
    "SessionFetcher",
    "SessionTableState",
    "LockQueryModel",
    "SessionQueryModel",
]
