"""Data models for Txn Portal."""

from .session import BranchSession, BranchType, GlobalSession
from .lock import GlobalLock
from .query import GlobalLockQueryParam, GlobalSessionQueryParam, Page
from .events import BranchSessionSelected, GlobalSessionSelected
from .exceptions import (
    ConsoleError,
    TransportError,
    BackendRejectedError,
    ConfigError,
    ValidationError,
    ActionStateError,
    operator_message,
)

__all__ = [
    # Session models
    "GlobalSession",
    "BranchSession",
    "BranchType",
    "GlobalLock",
    # Queries
    "GlobalSessionQueryParam",
    "GlobalLockQueryParam",
    "Page",
    # Events
    "GlobalSessionSelected",
    "BranchSessionSelected",
    # Exceptions
    "ConsoleError",
    "TransportError",
    "BackendRejectedError",
    "ConfigError",
    "ValidationError",
    "ActionStateError",
    "operator_message",
]
