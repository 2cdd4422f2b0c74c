"""Global and branch transaction session models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BranchType(Enum):
    """Resource-manager protocol of a branch."""

    AT = "AT"
    XA = "XA"
    TCC = "TCC"
    SAGA = "SAGA"

    @classmethod
    def parse(cls, value: Any) -> "BranchType | None":
        """Return the matching branch type, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


def _int(value: Any, default: int = 0) -> int:
    """Coerce a wire value to int, keeping the default for junk."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class BranchSession:
    """A branch transaction registered under a global session."""

    xid: str = ""
    transaction_id: str = ""
    branch_id: str = ""
    resource_group_id: str = ""
    # Raw string is kept so unknown protocols still display
    branch_type: str = ""
    status: int = 0
    resource_id: str = ""
    client_id: str = ""
    application_data: str = ""

    @property
    def protocol(self) -> BranchType | None:
        """Parsed branch type (None if the server sent something unknown)."""
        return BranchType.parse(self.branch_type)

    @classmethod
    def from_api_dict(cls, data: dict) -> "BranchSession":
        """Create from a console API row."""
        return cls(
            xid=_str(data.get("xid")),
            transaction_id=_str(data.get("transactionId")),
            branch_id=_str(data.get("branchId")),
            resource_group_id=_str(data.get("resourceGroupId")),
            branch_type=_str(data.get("branchType")),
            status=_int(data.get("status")),
            resource_id=_str(data.get("resourceId")),
            client_id=_str(data.get("clientId")),
            application_data=_str(data.get("applicationData")),
        )


@dataclass
class GlobalSession:
    """A global transaction as seen by the console.

    ``begin_time`` holds the display string once the row has been
    normalized; the raw epoch millis are only seen by the fetcher.
    """

    xid: str
    transaction_id: str = ""
    application_id: str = ""
    transaction_service_group: str = ""
    transaction_name: str = ""
    status: int = 0
    timeout: int = 0
    begin_time: str | None = None
    application_data: str = ""
    branch_sessions: list[BranchSession] = field(default_factory=list)

    @classmethod
    def from_api_dict(cls, data: dict) -> "GlobalSession":
        """Create from a console API row.

        ``beginTime`` is carried through untouched; normalization happens in
        the fetcher.
        """
        branches = data.get("branchSessionVOs") or data.get("branchSessions") or []
        begin_time = data.get("beginTime")
        xid = _str(data.get("xid"))
        branch_sessions = [BranchSession.from_api_dict(b) for b in branches]
        for branch in branch_sessions:
            # Branch rows are addressed by (xid, branchId)
            if not branch.xid:
                branch.xid = xid
        return cls(
            xid=xid,
            transaction_id=_str(data.get("transactionId")),
            application_id=_str(data.get("applicationId")),
            transaction_service_group=_str(data.get("transactionServiceGroup")),
            transaction_name=_str(data.get("transactionName")),
            status=_int(data.get("status")),
            timeout=_int(data.get("timeout")),
            begin_time=None if begin_time is None else str(begin_time),
            application_data=_str(data.get("applicationData")),
            branch_sessions=branch_sessions,
        )
