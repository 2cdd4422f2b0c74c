"""Tests for fetching and normalizing session and lock pages."""

import asyncio
from datetime import timezone
from http.client import RemoteDisconnected
from unittest.mock import MagicMock, patch

import pytest

from txn_portal.models.exceptions import BackendRejectedError, TransportError
from txn_portal.models.lock import GlobalLock
from txn_portal.models.session import GlobalSession
from txn_portal.services.client import ConsoleClient
from txn_portal.services.fetcher import (
    LockFetcher,
    LockTableState,
    SessionFetcher,
    SessionTableState,
)
from txn_portal.services.query_model import LockQueryModel, SessionQueryModel
from txn_portal.services.status_catalog import StatusScope, label_for
from txn_portal.services.timestamps import format_timestamp, resolve_timezone


@pytest.fixture
def state() -> SessionTableState:
    return SessionTableState(query=SessionQueryModel())


class TestFormatTimestamp:
    def test_epoch_millis_string(self):
        assert format_timestamp("1700000000000", timezone.utc) == "2023-11-14 22:13:20"

    def test_epoch_millis_int(self):
        assert format_timestamp(1700000000000) == "2023-11-14 22:13:20"

    def test_missing(self):
        assert format_timestamp(None) is None
        assert format_timestamp("") is None

    def test_named_zone(self):
        tz = resolve_timezone("Asia/Shanghai")
        assert format_timestamp("1700000000000", tz) == "2023-11-15 06:13:20"

    def test_non_numeric_passes_through(self):
        assert format_timestamp("2023-11-14 22:13:20") == "2023-11-14 22:13:20"

    def test_infinite_passes_through(self):
        assert format_timestamp("inf") == "inf"

    def test_out_of_range_passes_through(self):
        assert format_timestamp("99999999999999999999") == "99999999999999999999"
        assert format_timestamp(-10**20) == str(-10**20)


class TestFetchPage:
    def test_scenario_begin_row(self, mock_client, session_factory):
        """A Begin row with epoch millis is shown with a formatted time."""
        mock_client.query_global_sessions.return_value = ([session_factory("x1")], 1)
        fetcher = SessionFetcher(mock_client)

        page = asyncio.run(fetcher.fetch_page(SessionQueryModel().param))

        assert page.total == 1
        row = page.rows[0]
        assert row.begin_time == "2023-11-14 22:13:20"
        assert label_for(row.status, StatusScope.GLOBAL).label == "Begin"

    def test_null_begin_time(self, mock_client, session_factory):
        mock_client.query_global_sessions.return_value = ([session_factory("x1", beginTime=None)], 1)
        page = asyncio.run(SessionFetcher(mock_client).fetch_page(SessionQueryModel().param))
        assert page.rows[0].begin_time is None

    def test_passes_current_param(self, mock_client):
        model = SessionQueryModel()
        model.set_filter("xid", "abc")
        asyncio.run(SessionFetcher(mock_client).fetch_page(model.param))
        mock_client.query_global_sessions.assert_awaited_once_with(model.param)

    def test_errors_propagate(self, mock_client):
        mock_client.query_global_sessions.side_effect = TransportError("network error")
        with pytest.raises(TransportError):
            asyncio.run(SessionFetcher(mock_client).fetch_page(SessionQueryModel().param))


class TestRefresh:
    def test_applies_rows(self, mock_client, session_factory, state):
        mock_client.query_global_sessions.return_value = ([session_factory("x1"), session_factory("x2")], 12)

        applied = asyncio.run(SessionFetcher(mock_client).refresh(state))

        assert applied
        assert [row.xid for row in state.rows] == ["x1", "x2"]
        assert state.total == 12
        assert state.loading is False

    def test_empty_result_resets_page(self, mock_client, session_factory, state):
        state.rows = [session_factory("old")]
        state.total = 30
        state.query.set_page(3)
        mock_client.query_global_sessions.return_value = ([], 0)

        asyncio.run(SessionFetcher(mock_client).refresh(state))

        assert state.rows == []
        assert state.total == 0
        assert state.param.page_num == 1

    def test_failure_keeps_rows(self, mock_client, session_factory, state):
        """A rejected query clears loading and leaves the list alone."""
        existing = [session_factory("x1")]
        state.rows = existing
        state.total = 1
        mock_client.query_global_sessions.side_effect = BackendRejectedError(
            "request failed", backend_message="xid not found"
        )

        with pytest.raises(BackendRejectedError) as exc_info:
            asyncio.run(SessionFetcher(mock_client).refresh(state))

        assert exc_info.value.backend_message == "xid not found"
        assert state.loading is False
        assert state.rows is existing
        assert state.total == 1

    def test_detail_follows_refresh(self, mock_client, global_row, branch_row, state):
        state.open_detail(GlobalSession.from_api_dict(global_row("x1", branchSessionVOs=[branch_row("x1", "1")])))
        refreshed = global_row(
            "x1",
            branchSessionVOs=[branch_row("x1", "1", status=5), branch_row("x1", "2")],
        )
        mock_client.query_global_sessions.return_value = ([GlobalSession.from_api_dict(refreshed)], 1)

        asyncio.run(SessionFetcher(mock_client).refresh(state))

        assert [b.branch_id for b in state.detail.branches] == ["1", "2"]
        assert state.detail.branches[0].status == 5

    def test_detail_untouched_when_xid_missing(self, mock_client, global_row, branch_row, state):
        state.open_detail(GlobalSession.from_api_dict(global_row("x1", branchSessionVOs=[branch_row("x1", "1")])))
        mock_client.query_global_sessions.return_value = ([GlobalSession.from_api_dict(global_row("x2"))], 1)

        asyncio.run(SessionFetcher(mock_client).refresh(state))

        assert state.detail.xid == "x1"
        assert [b.branch_id for b in state.detail.branches] == ["1"]


class TestStaleResponses:
    def _race(self, mock_client, session_factory, state, discard_stale):
        """Start a slow refresh, complete a fast one, then let the slow one finish."""

        async def scenario():
            gate = asyncio.Event()
            calls = []

            async def query(param):
                calls.append(param)
                if len(calls) == 1:
                    await gate.wait()
                    return [session_factory("slow")], 1
                return [session_factory("fast")], 1

            mock_client.query_global_sessions.side_effect = query
            fetcher = SessionFetcher(mock_client, discard_stale=discard_stale)
            slow = asyncio.create_task(fetcher.refresh(state))
            await asyncio.sleep(0)
            fast_applied = await fetcher.refresh(state)
            gate.set()
            slow_applied = await slow
            return fast_applied, slow_applied

        return asyncio.run(scenario())

    def test_older_response_discarded(self, mock_client, session_factory, state):
        fast_applied, slow_applied = self._race(mock_client, session_factory, state, True)
        assert fast_applied is True
        assert slow_applied is False
        assert [row.xid for row in state.rows] == ["fast"]
        assert state.loading is False

    def test_last_arrival_wins_when_disabled(self, mock_client, session_factory, state):
        _, slow_applied = self._race(mock_client, session_factory, state, False)
        assert slow_applied is True
        assert [row.xid for row in state.rows] == ["slow"]


class TestLockFetcher:
    def test_formats_lock_times(self, mock_client):
        lock = GlobalLock.from_api_dict({
            "xid": "x1",
            "branchId": "2001",
            "tableName": "orders",
            "pk": "42",
            "gmtCreate": 1700000000000,
            "gmtModified": None,
        })
        mock_client.query_global_locks.return_value = ([lock], 1)
        state = LockTableState(query=LockQueryModel(xid="x1"))

        asyncio.run(LockFetcher(mock_client).refresh(state))

        assert state.rows[0].gmt_create == "2023-11-14 22:13:20"
        assert state.rows[0].gmt_modified is None
        assert state.total == 1
        mock_client.query_global_locks.assert_awaited_once_with(state.param)

    def test_empty_result_resets_page(self, mock_client):
        state = LockTableState(query=LockQueryModel())
        state.query.set_page(5)
        asyncio.run(LockFetcher(mock_client).refresh(state))
        assert state.param.page_num == 1
        assert state.rows == []


class TestBrokenTransport:
    """A real client whose connection drops or sends junk."""

    @pytest.fixture
    def client(self):
        with patch("txn_portal.services.client.urlopen") as urlopen:
            yield ConsoleClient("http://seata:7091"), urlopen

    def test_dropped_connection_clears_loading(self, client, state):
        console, urlopen = client
        urlopen.side_effect = RemoteDisconnected("Remote end closed connection without response")

        with pytest.raises(TransportError):
            asyncio.run(SessionFetcher(console).refresh(state))
        assert state.loading is False

    def test_undecodable_body_clears_loading(self, client, state):
        console, urlopen = client
        resp = MagicMock()
        resp.read.return_value = b"\xff\xfe{}"
        urlopen.return_value.__enter__.return_value = resp

        with pytest.raises(TransportError):
            asyncio.run(SessionFetcher(console).refresh(state))
        assert state.loading is False

    def test_lock_refresh_clears_loading(self, client):
        console, urlopen = client
        urlopen.side_effect = RemoteDisconnected("closed")
        state = LockTableState(query=LockQueryModel())

        with pytest.raises(TransportError):
            asyncio.run(LockFetcher(console).refresh(state))
        assert state.loading is False

    def test_unexpected_error_still_clears_loading(self, mock_client, state):
        mock_client.query_global_sessions.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            asyncio.run(SessionFetcher(mock_client).refresh(state))
        assert state.loading is False
