"""Status catalog: labels and severities for session status codes.

Global and branch sessions report integer status codes. Known codes map to
a label and a severity class used for styling; unknown codes are not an
error and degrade to showing the raw number without styling.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class Severity(Enum):
    """How a status should be styled."""

    PENDING = "pending"  # in progress / ellipsis
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class StatusScope(Enum):
    GLOBAL = "global"
    BRANCH = "branch"


class GlobalStatus(IntEnum):
    """Global transaction status codes reported by the coordinator."""

    UNKNOWN = 0
    BEGIN = 1
    COMMITTING = 2
    COMMIT_RETRYING = 3
    ROLLBACKING = 4
    ROLLBACK_RETRYING = 5
    TIMEOUT_ROLLBACKING = 6
    TIMEOUT_ROLLBACK_RETRYING = 7
    ASYNC_COMMITTING = 8
    COMMITTED = 9
    COMMIT_FAILED = 10
    ROLLBACKED = 11
    ROLLBACK_FAILED = 12
    TIMEOUT_ROLLBACKED = 13
    TIMEOUT_ROLLBACK_FAILED = 14
    FINISHED = 15
    COMMIT_RETRY_TIMEOUT = 16
    ROLLBACK_RETRY_TIMEOUT = 17
    DELETING = 18
    STOP_COMMIT_RETRY = 19
    STOP_ROLLBACK_RETRY = 20


class BranchStatus(IntEnum):
    """Branch transaction status codes reported by the coordinator."""

    UNKNOWN = 0
    REGISTERED = 1
    PHASE_ONE_DONE = 2
    PHASE_ONE_FAILED = 3
    PHASE_ONE_TIMEOUT = 4
    PHASE_TWO_COMMITTED = 5
    PHASE_TWO_COMMIT_FAILED_RETRYABLE = 6
    PHASE_TWO_COMMIT_FAILED_UNRETRYABLE = 7
    PHASE_TWO_ROLLBACKED = 8
    PHASE_TWO_ROLLBACK_FAILED_RETRYABLE = 9
    PHASE_TWO_ROLLBACK_FAILED_UNRETRYABLE = 10
    PHASE_TWO_COMMIT_FAILED_XAER_NOTA_RETRYABLE = 11
    PHASE_TWO_ROLLBACK_FAILED_XAER_NOTA_RETRYABLE = 12
    PHASE_ONE_RDONLY = 13
    STOP_RETRY = 14


# Statuses that offer "start retry" instead of "stop retry"
GLOBAL_RETRY_STOPPED = frozenset({GlobalStatus.STOP_COMMIT_RETRY, GlobalStatus.STOP_ROLLBACK_RETRY})
BRANCH_RETRY_STOPPED = frozenset({BranchStatus.STOP_RETRY})


@dataclass(frozen=True)
class StatusLabel:
    """Display label for a status code.

    ``severity`` is None for unknown codes: show ``label`` (the raw
    number) unstyled.
    """

    label: str
    severity: Severity | None

    @property
    def known(self) -> bool:
        return self.severity is not None


_PENDING = Severity.PENDING
_SUCCESS = Severity.SUCCESS
_ERROR = Severity.ERROR
_WARNING = Severity.WARNING

# Display order follows the status filter (grouped by lifecycle)
_GLOBAL_LABELS: dict[GlobalStatus, StatusLabel] = {
    GlobalStatus.ASYNC_COMMITTING: StatusLabel("AsyncCommitting", _PENDING),
    GlobalStatus.BEGIN: StatusLabel("Begin", _PENDING),
    GlobalStatus.COMMITTING: StatusLabel("Committing", _PENDING),
    GlobalStatus.COMMIT_RETRYING: StatusLabel("CommitRetrying", _PENDING),
    GlobalStatus.COMMITTED: StatusLabel("Committed", _SUCCESS),
    GlobalStatus.COMMIT_FAILED: StatusLabel("CommitFailed", _ERROR),
    GlobalStatus.COMMIT_RETRY_TIMEOUT: StatusLabel("CommitRetryTimeout", _ERROR),
    GlobalStatus.FINISHED: StatusLabel("Finished", _SUCCESS),
    GlobalStatus.ROLLBACKING: StatusLabel("Rollbacking", _PENDING),
    GlobalStatus.ROLLBACK_RETRYING: StatusLabel("RollbackRetrying", _PENDING),
    GlobalStatus.ROLLBACKED: StatusLabel("Rollbacked", _ERROR),
    GlobalStatus.ROLLBACK_FAILED: StatusLabel("RollbackFailed", _ERROR),
    GlobalStatus.ROLLBACK_RETRY_TIMEOUT: StatusLabel("RollbackRetryTimeout", _ERROR),
    GlobalStatus.TIMEOUT_ROLLBACKING: StatusLabel("TimeoutRollbacking", _PENDING),
    GlobalStatus.TIMEOUT_ROLLBACK_RETRYING: StatusLabel("TimeoutRollbackRetrying", _PENDING),
    GlobalStatus.TIMEOUT_ROLLBACKED: StatusLabel("TimeoutRollbacked", _ERROR),
    GlobalStatus.TIMEOUT_ROLLBACK_FAILED: StatusLabel("TimeoutRollbackFailed", _ERROR),
    GlobalStatus.UNKNOWN: StatusLabel("UnKnown", _WARNING),
    GlobalStatus.DELETING: StatusLabel("Deleting", _WARNING),
    GlobalStatus.STOP_COMMIT_RETRY: StatusLabel("StopCommitRetry", _PENDING),
    GlobalStatus.STOP_ROLLBACK_RETRY: StatusLabel("StopRollbackRetry", _PENDING),
}

_BRANCH_LABELS: dict[BranchStatus, StatusLabel] = {
    BranchStatus.UNKNOWN: StatusLabel("UnKnown", _WARNING),
    BranchStatus.REGISTERED: StatusLabel("Registered", _PENDING),
    BranchStatus.PHASE_ONE_DONE: StatusLabel("PhaseOne_Done", _PENDING),
    BranchStatus.PHASE_ONE_FAILED: StatusLabel("PhaseOne_Failed", _ERROR),
    BranchStatus.PHASE_ONE_TIMEOUT: StatusLabel("PhaseOne_Timeout", _ERROR),
    BranchStatus.PHASE_TWO_COMMITTED: StatusLabel("PhaseTwo_Committed", _SUCCESS),
    BranchStatus.PHASE_TWO_COMMIT_FAILED_RETRYABLE: StatusLabel("PhaseTwo_CommitFailed_Retryable", _PENDING),
    BranchStatus.PHASE_TWO_COMMIT_FAILED_UNRETRYABLE: StatusLabel("PhaseTwo_CommitFailed_Unretryable", _ERROR),
    BranchStatus.PHASE_TWO_ROLLBACKED: StatusLabel("PhaseTwo_Rollbacked", _ERROR),
    BranchStatus.PHASE_TWO_ROLLBACK_FAILED_RETRYABLE: StatusLabel("PhaseTwo_RollbackFailed_Retryable", _PENDING),
    BranchStatus.PHASE_TWO_ROLLBACK_FAILED_UNRETRYABLE: StatusLabel("PhaseTwo_RollbackFailed_Unretryable", _ERROR),
    BranchStatus.PHASE_TWO_COMMIT_FAILED_XAER_NOTA_RETRYABLE: StatusLabel(
        "PhaseTwo_CommitFailed_XAER_NOTA_Retryable", _ERROR
    ),
    BranchStatus.PHASE_TWO_ROLLBACK_FAILED_XAER_NOTA_RETRYABLE: StatusLabel(
        "PhaseTwo_RollbackFailed_XAER_NOTA_Retryable", _ERROR
    ),
    BranchStatus.PHASE_ONE_RDONLY: StatusLabel("PhaseOne_RDONLY", _ERROR),
    BranchStatus.STOP_RETRY: StatusLabel("Stop_Retry", _PENDING),
}


def label_for(code: int, scope: StatusScope) -> StatusLabel:
    """Look up the label for a status code.

    Total over all integers: unknown codes come back as the raw number with
    no severity.
    """
    enum_type = GlobalStatus if scope == StatusScope.GLOBAL else BranchStatus
    table = _GLOBAL_LABELS if scope == StatusScope.GLOBAL else _BRANCH_LABELS
    try:
        status = enum_type(code)
    except (ValueError, TypeError):
        return StatusLabel(str(code), None)
    return table[status]


def status_choices(scope: StatusScope) -> list[tuple[str, int]]:
    """(label, code) pairs in display order, for the status filter."""
    table = _GLOBAL_LABELS if scope == StatusScope.GLOBAL else _BRANCH_LABELS
    return [(entry.label, int(status)) for status, entry in table.items()]


def is_global_retry_stopped(code: int) -> bool:
    return code in GLOBAL_RETRY_STOPPED


def is_branch_retry_stopped(code: int) -> bool:
    return code in BRANCH_RETRY_STOPPED
