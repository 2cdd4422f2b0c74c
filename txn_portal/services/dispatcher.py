"""Control-action dispatcher.

Every mutating action walks the same path:

    IDLE -> CONFIRM_REQUESTED -> [RISK_CONFIRM_REQUESTED] -> IN_FLIGHT
         -> SUCCEEDED | FAILED

Cancelling at either confirmation returns to IDLE and sends nothing. The
risk stage only exists for risky actions (delete, force delete, stop
retry). Outcomes are reported through ``notify``; a success also re-runs
the current page query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from ..models.exceptions import ActionStateError, BackendRejectedError, ConsoleError
from ..models.lock import GlobalLock
from ..models.session import BranchSession, BranchType, GlobalSession
from .advisory import ControlAction, risk_message
from .notification import NotificationSeverity
from .status_catalog import is_branch_retry_stopped, is_global_retry_stopped

if TYPE_CHECKING:
    from .client import ConsoleClient

logger = logging.getLogger(__name__)

Target = GlobalSession | BranchSession | GlobalLock


class ActionState(Enum):
    IDLE = "idle"
    CONFIRM_REQUESTED = "confirm_requested"
    RISK_CONFIRM_REQUESTED = "risk_confirm_requested"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ConfirmPrompt:
    """What a confirmation dialog shows."""

    title: str
    body: str
    risky: bool = False


@dataclass
class ActionInvocation:
    """One run of a control action against one row."""

    action: ControlAction
    target: Target
    branch_type: BranchType | None = None
    state: ActionState = ActionState.IDLE
    message: str | None = None

    def _move(self, allowed: tuple[ActionState, ...], to: ActionState) -> None:
        if self.state not in allowed:
            raise ActionStateError(
                f"{self.action.key}: cannot go from {self.state.value} to {to.value}"
            )
        self.state = to

    def request(self) -> None:
        self._move((ActionState.IDLE,), ActionState.CONFIRM_REQUESTED)

    def confirm(self) -> None:
        """Advance past the current confirmation stage."""
        if self.state == ActionState.CONFIRM_REQUESTED and self.action.risky:
            self._move((ActionState.CONFIRM_REQUESTED,), ActionState.RISK_CONFIRM_REQUESTED)
        else:
            self._move(
                (ActionState.CONFIRM_REQUESTED, ActionState.RISK_CONFIRM_REQUESTED),
                ActionState.IN_FLIGHT,
            )

    def cancel(self) -> None:
        self._move(
            (ActionState.CONFIRM_REQUESTED, ActionState.RISK_CONFIRM_REQUESTED),
            ActionState.IDLE,
        )

    def succeed(self, message: str | None = None) -> None:
        self._move((ActionState.IN_FLIGHT,), ActionState.SUCCEEDED)
        self.message = message

    def fail(self, message: str) -> None:
        self._move((ActionState.IN_FLIGHT,), ActionState.FAILED)
        self.message = message


def _branch_type_of(target: Target) -> BranchType | None:
    if isinstance(target, BranchSession):
        return target.protocol
    return None


def retry_action_for_global(session: GlobalSession) -> ControlAction:
    """Start retry for stopped sessions, stop retry otherwise."""
    if is_global_retry_stopped(session.status):
        return ControlAction.START_GLOBAL_RETRY
    return ControlAction.STOP_GLOBAL_RETRY


def retry_action_for_branch(branch: BranchSession) -> ControlAction:
    if is_branch_retry_stopped(branch.status):
        return ControlAction.START_BRANCH_RETRY
    return ControlAction.STOP_BRANCH_RETRY


def global_actions(session: GlobalSession, with_branch: bool) -> list[str]:
    """Action keys offered on a global session row, in display order.

    ``showBranchSessions`` is only offered when branches were queried.
    """
    keys = []
    if with_branch:
        keys.append("showBranchSessions")
    keys.extend([
        ControlAction.DELETE_GLOBAL.key,
        ControlAction.FORCE_DELETE_GLOBAL.key,
        retry_action_for_global(session).key,
        ControlAction.SEND_COMMIT_OR_ROLLBACK.key,
        ControlAction.CHANGE_GLOBAL_STATUS.key,
        "showGlobalLock",
    ])
    return keys


def branch_actions(branch: BranchSession) -> list[str]:
    """Action keys offered on a branch session row, in display order."""
    return [
        ControlAction.DELETE_BRANCH.key,
        ControlAction.FORCE_DELETE_BRANCH.key,
        retry_action_for_branch(branch).key,
        "showGlobalLock",
    ]


class ActionDispatcher:
    """Runs control actions through confirmation, the backend, and refresh.

    Args:
        client: console client used for the backend call
        confirm: awaits the operator's answer to a prompt
        notify: shows a message with a severity
        refresh: re-runs the current page query after a success
    """

    def __init__(
        self,
        client: "ConsoleClient",
        confirm: Callable[[ConfirmPrompt], Awaitable[bool]],
        notify: Callable[[str, NotificationSeverity], None],
        refresh: Callable[[], Awaitable[object]] | None = None,
    ) -> None:
        self._client = client
        self._confirm = confirm
        self._notify = notify
        self._refresh = refresh

    async def run(self, action: ControlAction, target: Target) -> ActionInvocation:
        invocation = ActionInvocation(action, target, _branch_type_of(target))

        invocation.request()
        if not await self._confirm(ConfirmPrompt(action.title, f"{action.prompt}?")):
            invocation.cancel()
            return invocation
        invocation.confirm()

        if invocation.state == ActionState.RISK_CONFIRM_REQUESTED:
            prompt = ConfirmPrompt(
                action.title,
                risk_message(action, invocation.branch_type),
                risky=True,
            )
            if not await self._confirm(prompt):
                invocation.cancel()
                return invocation
            invocation.confirm()

        logger.info(f"Sending {action.key} for {self._describe(target)}")
        try:
            await self._client.perform(action, target)
        except BackendRejectedError as e:
            message = e.backend_message or f"{action.title} failed"
            self._report_failure(invocation, message)
            return invocation
        except ConsoleError as e:
            self._report_failure(invocation, f"{action.title} failed: {e}")
            return invocation

        invocation.succeed(action.success_message)
        self._notify(action.success_message, NotificationSeverity.SUCCESS)

        if self._refresh is not None:
            try:
                await self._refresh()
            except ConsoleError as e:
                logger.warning(f"Refresh after {action.key} failed: {e}")
                self._notify(f"Refresh failed: {e}", NotificationSeverity.ERROR)
        return invocation

    def _report_failure(self, invocation: ActionInvocation, message: str) -> None:
        logger.warning(f"{invocation.action.key} failed: {message}")
        invocation.fail(message)
        self._notify(message, NotificationSeverity.ERROR)

    @staticmethod
    def _describe(target: Target) -> str:
        if isinstance(target, BranchSession):
            return f"branch {target.branch_id} of {target.xid}"
        if isinstance(target, GlobalLock):
            return f"lock {target.table_name}:{target.pk} of {target.xid}"
        return f"global session {target.xid}"
