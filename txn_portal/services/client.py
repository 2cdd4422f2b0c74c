"""HTTP client for the coordinator's console API.

Blocking urllib calls run through asyncio.to_thread() so a slow
coordinator never stalls the UI event loop.

Every console response is wrapped in an envelope:
    {"code": "200", "message": "...", "data": ..., "total": N, "success": true}

HTTP errors and envelopes reporting failure raise BackendRejectedError with
the server's message; connection problems raise TransportError.
"""

from __future__ import annotations

import asyncio
import json
import logging
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ..models.exceptions import BackendRejectedError, TransportError
from ..models.lock import GlobalLock
from ..models.query import GlobalLockQueryParam, GlobalSessionQueryParam
from ..models.session import BranchSession, GlobalSession
from .advisory import ControlAction

logger = logging.getLogger(__name__)

GLOBAL_SESSION_PATH = "/console/globalSession"
BRANCH_SESSION_PATH = "/console/branchSession"
GLOBAL_LOCK_PATH = "/console/globalLock"

# action -> (HTTP method, endpoint)
_ACTION_ENDPOINTS: dict[ControlAction, tuple[str, str]] = {
    ControlAction.DELETE_GLOBAL: ("DELETE", f"{GLOBAL_SESSION_PATH}/deleteGlobalSession"),
    ControlAction.FORCE_DELETE_GLOBAL: ("DELETE", f"{GLOBAL_SESSION_PATH}/forceDeleteGlobalSession"),
    ControlAction.STOP_GLOBAL_RETRY: ("PUT", f"{GLOBAL_SESSION_PATH}/stopGlobalSession"),
    ControlAction.START_GLOBAL_RETRY: ("PUT", f"{GLOBAL_SESSION_PATH}/startGlobalSession"),
    ControlAction.SEND_COMMIT_OR_ROLLBACK: ("PUT", f"{GLOBAL_SESSION_PATH}/sendCommitOrRollback"),
    ControlAction.CHANGE_GLOBAL_STATUS: ("PUT", f"{GLOBAL_SESSION_PATH}/changeGlobalStatus"),
    ControlAction.DELETE_BRANCH: ("DELETE", f"{BRANCH_SESSION_PATH}/deleteBranchSession"),
    ControlAction.FORCE_DELETE_BRANCH: ("DELETE", f"{BRANCH_SESSION_PATH}/forceDeleteBranchSession"),
    ControlAction.STOP_BRANCH_RETRY: ("PUT", f"{BRANCH_SESSION_PATH}/stopBranchSession"),
    ControlAction.START_BRANCH_RETRY: ("PUT", f"{BRANCH_SESSION_PATH}/startBranchSession"),
    ControlAction.DELETE_GLOBAL_LOCK: ("DELETE", f"{GLOBAL_LOCK_PATH}/delete"),
}


def _is_success(envelope: Any) -> bool:
    """Check the envelope's success markers (absent markers mean success)."""
    if not isinstance(envelope, dict):
        return True
    if envelope.get("success") is False:
        return False
    code = envelope.get("code")
    if code is not None and str(code) != "200":
        return False
    return True


def _total(envelope: dict) -> int:
    try:
        return int(envelope.get("total") or 0)
    except (TypeError, ValueError) as e:
        raise TransportError(f"response total was not a number: {envelope.get('total')!r}") from e


class ConsoleClient:
    """Async access to the console endpoints.

    Example:
        client = ConsoleClient("http://127.0.0.1:7091")
        rows, total = await client.query_global_sessions(param)
    """

    USER_AGENT = "txn-portal/1.0"

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api/v1",
        timeout: float = 10.0,
        token: str = "",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._timeout = timeout
        self._token = token

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self._base_url}{self._api_prefix}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    # --- transport ---

    def _request(self, method: str, path: str, params: dict[str, Any] | None = None) -> dict:
        """Perform one blocking request and return the decoded envelope."""
        url = self.url_for(path, params)
        request = Request(url, method=method)
        request.add_header("User-Agent", self.USER_AGENT)
        request.add_header("Accept", "application/json")
        if self._token:
            request.add_header("Authorization", self._token)

        logger.debug(f"{method} {path} {params or {}}")
        try:
            with urlopen(request, timeout=self._timeout) as resp:
                body = resp.read().decode()
        except HTTPError as e:
            backend_message = self._error_message(e)
            logger.warning(f"{method} {path} rejected: {e.code} {backend_message or ''}")
            raise BackendRejectedError(
                f"request failed: {e.code}",
                backend_message=backend_message,
                status_code=e.code,
            ) from e
        except URLError as e:
            logger.warning(f"{method} {path} unreachable: {e.reason}")
            raise TransportError(
                f"network error: {str(e.reason)[:80]}",
                f"is the coordinator running at {self._base_url}?",
            ) from e
        except TimeoutError as e:
            logger.warning(f"{method} {path} timed out")
            raise TransportError("request timed out") from e
        except (OSError, HTTPException, UnicodeDecodeError) as e:
            # Dropped connections, truncated or undecodable bodies
            logger.warning(f"{method} {path} broken response: {e!r}")
            raise TransportError(f"connection error: {str(e)[:80] or type(e).__name__}") from e

        if not body.strip():
            return {}
        try:
            envelope = json.loads(body)
        except json.JSONDecodeError as e:
            raise TransportError("response was not valid json") from e

        if not _is_success(envelope):
            message = envelope.get("message") if isinstance(envelope, dict) else None
            logger.warning(f"{method} {path} failed: {message}")
            raise BackendRejectedError(
                "request failed",
                backend_message=message or None,
            )
        return envelope if isinstance(envelope, dict) else {"data": envelope}

    def _error_message(self, error: HTTPError) -> str | None:
        """Extract the ``message`` field from an HTTP error body, if any."""
        try:
            data = json.loads(error.read().decode())
        except Exception as parse_error:
            logger.debug(f"Failed to parse error response: {parse_error}")
            return None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return None

    async def _call(self, method: str, path: str, params: dict[str, Any] | None = None) -> dict:
        return await asyncio.to_thread(self._request, method, path, params)

    # --- queries ---

    async def query_global_sessions(
        self, param: GlobalSessionQueryParam
    ) -> tuple[list[GlobalSession], int]:
        """Fetch one page of global sessions (raw begin times)."""
        envelope = await self._call("GET", f"{GLOBAL_SESSION_PATH}/query", param.to_params())
        rows = [GlobalSession.from_api_dict(item) for item in envelope.get("data") or []]
        return rows, _total(envelope)

    async def query_global_locks(
        self, param: GlobalLockQueryParam
    ) -> tuple[list[GlobalLock], int]:
        """Fetch one page of global locks (raw timestamps)."""
        envelope = await self._call("GET", f"{GLOBAL_LOCK_PATH}/query", param.to_params())
        rows = [GlobalLock.from_api_dict(item) for item in envelope.get("data") or []]
        return rows, _total(envelope)

    async def check_global_lock(self, xid: str, branch_id: str = "") -> bool:
        """Ask whether the lock for (xid, branch) is still held."""
        params = {"xid": xid}
        if branch_id:
            params["branchId"] = branch_id
        envelope = await self._call("GET", f"{GLOBAL_LOCK_PATH}/check", params)
        return bool(envelope.get("data"))

    # --- control actions ---

    async def perform(
        self,
        action: ControlAction,
        target: GlobalSession | BranchSession | GlobalLock,
    ) -> None:
        """Send a control action for the given row."""
        method, path = _ACTION_ENDPOINTS[action]
        await self._call(method, path, self.action_params(target))

    @staticmethod
    def action_params(target: GlobalSession | BranchSession | GlobalLock) -> dict[str, str]:
        """Identify a row for a control endpoint."""
        if isinstance(target, GlobalLock):
            return target.delete_params()
        if isinstance(target, BranchSession):
            return {"xid": target.xid, "branchId": target.branch_id}
        return {"xid": target.xid}
