"""Fetch a page of sessions or locks and fold it into table state.

The fetcher is the only writer of the table state's rows. Every refresh is
numbered; when ``discard_stale`` is on, a response that comes back after a
newer one has been applied is dropped so a slow query can't overwrite a
fresher page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import TYPE_CHECKING

from ..models.lock import GlobalLock
from ..models.query import GlobalLockQueryParam, GlobalSessionQueryParam, Page
from ..models.session import BranchSession, GlobalSession
from .query_model import LockQueryModel, SessionQueryModel
from .timestamps import format_timestamp

if TYPE_CHECKING:
    from .client import ConsoleClient

logger = logging.getLogger(__name__)

__all__ = [
    "DetailView",
    "LockFetcher",
    "LockTableState",
    "SessionFetcher",
    "SessionTableState",
    "format_timestamp",
]


@dataclass
class DetailView:
    """The branch list currently open for one global session."""

    xid: str
    branches: list[BranchSession] = field(default_factory=list)


@dataclass
class SessionTableState:
    """Everything the global session table renders."""

    query: SessionQueryModel
    rows: list[GlobalSession] = field(default_factory=list)
    total: int = 0
    loading: bool = False
    detail: DetailView | None = None

    @property
    def param(self) -> GlobalSessionQueryParam:
        return self.query.param

    def open_detail(self, session: GlobalSession) -> DetailView:
        self.detail = DetailView(xid=session.xid, branches=list(session.branch_sessions))
        return self.detail

    def close_detail(self) -> None:
        self.detail = None


@dataclass
class LockTableState:
    """Everything the global lock table renders."""

    query: LockQueryModel
    rows: list[GlobalLock] = field(default_factory=list)
    total: int = 0
    loading: bool = False

    @property
    def param(self) -> GlobalLockQueryParam:
        return self.query.param


class _SequencedFetcher:
    """Numbering of refreshes shared by the session and lock fetchers."""

    def __init__(self, tz: tzinfo | None, discard_stale: bool) -> None:
        self._tz = tz
        self._discard_stale = discard_stale
        self._issued = 0
        self._applied = 0

    def _begin(self) -> int:
        self._issued += 1
        return self._issued

    def _is_stale(self, seq: int) -> bool:
        return self._discard_stale and seq < self._applied

    def _finish_loading(self, seq: int) -> bool:
        """Whether this response should clear the loading flag."""
        return not self._discard_stale or seq >= self._issued


class SessionFetcher(_SequencedFetcher):
    """Loads global sessions and normalizes them for display.

    Example:
        fetcher = SessionFetcher(client)
        await fetcher.refresh(state)
    """

    def __init__(
        self,
        client: "ConsoleClient",
        tz: tzinfo | None = timezone.utc,
        discard_stale: bool = True,
    ) -> None:
        super().__init__(tz, discard_stale)
        self._client = client

    def normalize(self, session: GlobalSession) -> GlobalSession:
        session.begin_time = format_timestamp(session.begin_time, self._tz)
        return session

    async def fetch_page(self, param: GlobalSessionQueryParam) -> Page[GlobalSession]:
        """Query one page and format begin times.

        Raises:
            TransportError, BackendRejectedError: from the client
        """
        rows, total = await self._client.query_global_sessions(param)
        return Page(rows=[self.normalize(row) for row in rows], total=total)

    async def refresh(self, state: SessionTableState) -> bool:
        """Re-run the current query and apply it to ``state``.

        Returns False when the response was discarded as stale. Errors are
        re-raised after the loading flag is cleared; rows stay as they were.
        """
        seq = self._begin()
        state.loading = True
        try:
            page = await self.fetch_page(state.param)
        finally:
            if self._finish_loading(seq):
                state.loading = False

        if self._is_stale(seq):
            logger.debug(f"Discarding stale session response #{seq} (applied #{self._applied})")
            return False
        self._applied = seq

        if page.total == 0:
            state.rows = []
            state.total = 0
            state.query.reset_page()
        else:
            state.rows = page.rows
            state.total = page.total

        if state.detail is not None:
            self._refresh_detail(state)
        return True

    def _refresh_detail(self, state: SessionTableState) -> None:
        detail = state.detail
        for row in state.rows:
            if row.xid == detail.xid:
                detail.branches = list(row.branch_sessions)
                return
        logger.debug(f"Detail xid {detail.xid} not on current page; leaving it as is")


class LockFetcher(_SequencedFetcher):
    """Loads global locks and normalizes their timestamps."""

    def __init__(
        self,
        client: "ConsoleClient",
        tz: tzinfo | None = timezone.utc,
        discard_stale: bool = True,
    ) -> None:
        super().__init__(tz, discard_stale)
        self._client = client

    def normalize(self, lock: GlobalLock) -> GlobalLock:
        lock.gmt_create = format_timestamp(lock.gmt_create, self._tz)
        lock.gmt_modified = format_timestamp(lock.gmt_modified, self._tz)
        return lock

    async def fetch_page(self, param: GlobalLockQueryParam) -> Page[GlobalLock]:
        rows, total = await self._client.query_global_locks(param)
        return Page(rows=[self.normalize(row) for row in rows], total=total)

    async def refresh(self, state: LockTableState) -> bool:
        seq = self._begin()
        state.loading = True
        try:
            page = await self.fetch_page(state.param)
        finally:
            if self._finish_loading(seq):
                state.loading = False

        if self._is_stale(seq):
            logger.debug(f"Discarding stale lock response #{seq} (applied #{self._applied})")
            return False
        self._applied = seq

        if page.total == 0:
            state.rows = []
            state.total = 0
            state.query.reset_page()
        else:
            state.rows = page.rows
            state.total = page.total
        return True
