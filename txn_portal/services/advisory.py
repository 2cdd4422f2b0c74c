"""Control actions and the risk advisory table.

Risky actions (delete, force delete, stop retry) get a second confirmation
whose text is the common inconsistency warning plus a per-protocol
advisory. An empty advisory means there is nothing extra to call out.
"""

from __future__ import annotations

from enum import Enum

from ..models.session import BranchType


class ActionScope(Enum):
    GLOBAL = "global"
    BRANCH = "branch"
    LOCK = "lock"


class ControlAction(Enum):
    """A mutating request the console may send to the coordinator.

    Value tuple: (key, scope, confirm prompt, success message, risky).
    """

    DELETE_GLOBAL = (
        "deleteGlobalSession", ActionScope.GLOBAL,
        "Are you sure you want to delete global transactions", "Delete successfully", True,
    )
    FORCE_DELETE_GLOBAL = (
        "forceDeleteGlobalSession", ActionScope.GLOBAL,
        "Are you sure you want to force delete global transactions", "Delete successfully", True,
    )
    STOP_GLOBAL_RETRY = (
        "stopGlobalSession", ActionScope.GLOBAL,
        "Are you sure you want to stop global transactions retry", "Stop successfully", True,
    )
    START_GLOBAL_RETRY = (
        "startGlobalSession", ActionScope.GLOBAL,
        "Are you sure you want to start global transactions retry", "Start successfully", False,
    )
    SEND_COMMIT_OR_ROLLBACK = (
        "sendCommitOrRollback", ActionScope.GLOBAL,
        "Are you sure you want to send commit or rollback to global transactions", "Send successfully", False,
    )
    CHANGE_GLOBAL_STATUS = (
        "changeGlobalStatus", ActionScope.GLOBAL,
        "Are you sure you want to change the global transactions status", "Change successfully", False,
    )
    DELETE_BRANCH = (
        "deleteBranchSession", ActionScope.BRANCH,
        "Are you sure you want to delete branch transactions", "Delete successfully", True,
    )
    FORCE_DELETE_BRANCH = (
        "forceDeleteBranchSession", ActionScope.BRANCH,
        "Are you sure you want to force delete branch transactions", "Delete successfully", True,
    )
    STOP_BRANCH_RETRY = (
        "stopBranchSession", ActionScope.BRANCH,
        "Are you sure you want to stop branch transactions retry", "Stop successfully", True,
    )
    START_BRANCH_RETRY = (
        "startBranchSession", ActionScope.BRANCH,
        "Are you sure you want to start branch transactions retry", "Start successfully", False,
    )
    DELETE_GLOBAL_LOCK = (
        "deleteGlobalLock", ActionScope.LOCK,
        "Are you sure you want to delete the global lock", "Delete successfully", False,
    )

    def __init__(self, key: str, scope: ActionScope, prompt: str, success: str, risky: bool) -> None:
        self.key = key
        self.scope = scope
        self.prompt = prompt
        self.success_message = success
        self.risky = risky

    @property
    def title(self) -> str:
        """Short operator-facing name."""
        return _TITLES[self]


_TITLES = {
    ControlAction.DELETE_GLOBAL: "Delete global session",
    ControlAction.FORCE_DELETE_GLOBAL: "Force delete global session",
    ControlAction.STOP_GLOBAL_RETRY: "Stop global session retry",
    ControlAction.START_GLOBAL_RETRY: "Start global session retry",
    ControlAction.SEND_COMMIT_OR_ROLLBACK: "Commit or rollback global session",
    ControlAction.CHANGE_GLOBAL_STATUS: "Change global session status",
    ControlAction.DELETE_BRANCH: "Delete branch session",
    ControlAction.FORCE_DELETE_BRANCH: "Force delete branch session",
    ControlAction.STOP_BRANCH_RETRY: "Stop branch session retry",
    ControlAction.START_BRANCH_RETRY: "Start branch session retry",
    ControlAction.DELETE_GLOBAL_LOCK: "Delete global lock",
}


COMMON_WARNING = "Global transaction commit or rollback inconsistency problem exists."

_FORCE_DELETE = "The force delete will only delete session in server."

# (action, protocol) -> advisory sentence; missing entries read as ""
_ADVISORIES: dict[ControlAction, dict[BranchType, str]] = {
    ControlAction.STOP_BRANCH_RETRY: {
        BranchType.AT: "",
        BranchType.XA: "",
        BranchType.TCC: "Please check if this may affect the logic of other branches.",
        BranchType.SAGA: "",
    },
    ControlAction.DELETE_BRANCH: {
        BranchType.AT: "The global lock and undo log will be deleted too, dirty write problem exists.",
        BranchType.XA: "The xa branch will rollback",
        BranchType.TCC: "",
        BranchType.SAGA: "",
    },
    ControlAction.DELETE_GLOBAL: {
        BranchType.AT: "",
        BranchType.XA: "",
        BranchType.TCC: "",
        BranchType.SAGA: "",
    },
    ControlAction.FORCE_DELETE_BRANCH: {protocol: _FORCE_DELETE for protocol in BranchType},
    ControlAction.FORCE_DELETE_GLOBAL: {protocol: _FORCE_DELETE for protocol in BranchType},
}


def advisory_for(action: ControlAction, branch_type: BranchType | str | None = None) -> str:
    """Return the extra warning for an action, possibly empty.

    Branch actions look up the branch's protocol. Global actions ignore
    ``branch_type`` and list every non-empty protocol advisory as
    ``PROTOCOL:`` followed by the sentence on its own line.
    """
    table = _ADVISORIES.get(action)
    if not table:
        return ""

    if action.scope == ActionScope.BRANCH:
        protocol = BranchType.parse(branch_type) if branch_type is not None else None
        if protocol is None:
            return ""
        return table.get(protocol, "")

    lines = []
    for protocol, sentence in table.items():
        if sentence:
            lines.append(f"{protocol.value}:\n{sentence}")
    return "\n".join(lines)


def risk_message(action: ControlAction, branch_type: BranchType | str | None = None) -> str:
    """Text for the second confirmation of a risky action."""
    advisory = advisory_for(action, branch_type)
    if not advisory:
        return COMMON_WARNING
    return f"{COMMON_WARNING}\n{advisory}"
