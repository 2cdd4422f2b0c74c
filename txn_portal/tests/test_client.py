"""Tests for the console HTTP client (urlopen patched)."""

import asyncio
import io
import json
from http.client import IncompleteRead, RemoteDisconnected
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlparse

import pytest

from txn_portal.models.exceptions import BackendRejectedError, TransportError
from txn_portal.models.lock import GlobalLock
from txn_portal.models.query import GlobalSessionQueryParam
from txn_portal.models.session import BranchSession, GlobalSession
from txn_portal.services.advisory import ControlAction
from txn_portal.services.client import ConsoleClient


def _response(payload) -> MagicMock:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    resp = MagicMock()
    resp.read.return_value = body
    ctx = MagicMock()
    ctx.__enter__.return_value = resp
    ctx.__exit__.return_value = False
    return ctx


def _envelope(data=None, total=None, **overrides) -> dict:
    envelope = {"code": "200", "message": "success", "data": data, "success": True}
    if total is not None:
        envelope["total"] = total
    envelope.update(overrides)
    return envelope


@pytest.fixture
def client() -> ConsoleClient:
    return ConsoleClient("http://seata:7091/", timeout=2.0)


@pytest.fixture
def urlopen():
    with patch("txn_portal.services.client.urlopen") as mocked:
        yield mocked


def _sent_request(urlopen):
    return urlopen.call_args.args[0]


class TestUrls:
    def test_prefix_and_trailing_slash(self, client):
        assert client.url_for("/console/globalSession/query") == (
            "http://seata:7091/api/v1/console/globalSession/query"
        )

    def test_custom_prefix(self):
        client = ConsoleClient("http://seata:7091", api_prefix="api/v2/")
        assert client.url_for("/x") == "http://seata:7091/api/v2/x"

    def test_empty_prefix(self):
        assert ConsoleClient("http://seata:7091", api_prefix="").url_for("/x") == "http://seata:7091/x"


class TestQueries:
    def test_query_global_sessions(self, client, urlopen, global_row, branch_row):
        urlopen.return_value = _response(_envelope(
            data=[global_row("x1", branchSessionVOs=[branch_row("x1", "7", branchType="TCC")])],
            total=1,
        ))
        param = GlobalSessionQueryParam(with_branch=True, xid="x1")

        rows, total = asyncio.run(client.query_global_sessions(param))

        assert total == 1
        assert rows[0].xid == "x1"
        assert rows[0].begin_time == "1700000000000"
        assert rows[0].branch_sessions[0].branch_type == "TCC"
        request = _sent_request(urlopen)
        assert request.get_method() == "GET"
        url = urlparse(request.full_url)
        assert url.path == "/api/v1/console/globalSession/query"
        assert parse_qs(url.query) == {
            "withBranch": ["true"],
            "pageSize": ["10"],
            "pageNum": ["1"],
            "xid": ["x1"],
        }

    def test_missing_total_is_zero(self, client, urlopen):
        urlopen.return_value = _response(_envelope(data=[]))
        rows, total = asyncio.run(client.query_global_sessions(GlobalSessionQueryParam()))
        assert rows == []
        assert total == 0

    def test_check_global_lock(self, client, urlopen):
        urlopen.return_value = _response(_envelope(data=True))
        assert asyncio.run(client.check_global_lock("x1", "7")) is True
        url = urlparse(_sent_request(urlopen).full_url)
        assert url.path == "/api/v1/console/globalLock/check"
        assert parse_qs(url.query) == {"xid": ["x1"], "branchId": ["7"]}


class TestActions:
    @pytest.mark.parametrize(
        "action, method, path",
        [
            (ControlAction.DELETE_GLOBAL, "DELETE", "/console/globalSession/deleteGlobalSession"),
            (ControlAction.FORCE_DELETE_GLOBAL, "DELETE", "/console/globalSession/forceDeleteGlobalSession"),
            (ControlAction.STOP_GLOBAL_RETRY, "PUT", "/console/globalSession/stopGlobalSession"),
            (ControlAction.START_GLOBAL_RETRY, "PUT", "/console/globalSession/startGlobalSession"),
            (ControlAction.SEND_COMMIT_OR_ROLLBACK, "PUT", "/console/globalSession/sendCommitOrRollback"),
            (ControlAction.CHANGE_GLOBAL_STATUS, "PUT", "/console/globalSession/changeGlobalStatus"),
        ],
    )
    def test_global_endpoints(self, client, urlopen, action, method, path):
        urlopen.return_value = _response(_envelope())
        asyncio.run(client.perform(action, GlobalSession(xid="x1")))
        request = _sent_request(urlopen)
        url = urlparse(request.full_url)
        assert request.get_method() == method
        assert url.path == "/api/v1" + path
        assert parse_qs(url.query) == {"xid": ["x1"]}

    def test_branch_endpoint(self, client, urlopen):
        urlopen.return_value = _response(_envelope())
        branch = BranchSession(xid="x1", branch_id="7")
        asyncio.run(client.perform(ControlAction.STOP_BRANCH_RETRY, branch))
        request = _sent_request(urlopen)
        url = urlparse(request.full_url)
        assert request.get_method() == "PUT"
        assert url.path == "/api/v1/console/branchSession/stopBranchSession"
        assert parse_qs(url.query) == {"xid": ["x1"], "branchId": ["7"]}

    def test_delete_lock_endpoint(self, client, urlopen):
        urlopen.return_value = _response(_envelope())
        lock = GlobalLock(xid="x1", branch_id="7", table_name="orders", pk="42")
        asyncio.run(client.perform(ControlAction.DELETE_GLOBAL_LOCK, lock))
        request = _sent_request(urlopen)
        url = urlparse(request.full_url)
        assert request.get_method() == "DELETE"
        assert url.path == "/api/v1/console/globalLock/delete"
        assert parse_qs(url.query) == {
            "xid": ["x1"], "branchId": ["7"], "tableName": ["orders"], "pk": ["42"],
        }

    def test_token_sent_verbatim(self, urlopen):
        urlopen.return_value = _response(_envelope())
        client = ConsoleClient("http://seata:7091", token="Bearer abc")
        asyncio.run(client.perform(ControlAction.DELETE_GLOBAL, GlobalSession(xid="x1")))
        assert _sent_request(urlopen).get_header("Authorization") == "Bearer abc"

    def test_no_token_no_header(self, client, urlopen):
        urlopen.return_value = _response(_envelope())
        asyncio.run(client.perform(ControlAction.DELETE_GLOBAL, GlobalSession(xid="x1")))
        assert _sent_request(urlopen).get_header("Authorization") is None


class TestErrors:
    def test_envelope_failure(self, client, urlopen):
        urlopen.return_value = _response(_envelope(code="500", success=False, message="xid not found"))
        with pytest.raises(BackendRejectedError) as exc_info:
            asyncio.run(client.perform(ControlAction.DELETE_GLOBAL, GlobalSession(xid="x1")))
        assert exc_info.value.backend_message == "xid not found"

    def test_non_200_code(self, client):
        with patch("txn_portal.services.client.urlopen") as urlopen:
            urlopen.return_value = _response({"code": "401", "message": "unauthorized"})
            with pytest.raises(BackendRejectedError) as exc_info:
                client._request("GET", "/console/globalSession/query")
        assert exc_info.value.backend_message == "unauthorized"

    def test_http_error_carries_body_message(self, client, urlopen):
        urlopen.side_effect = HTTPError(
            "http://seata:7091/api/v1/x", 500, "Server Error", {},
            io.BytesIO(b'{"message": "xid not found"}'),
        )
        with pytest.raises(BackendRejectedError) as exc_info:
            client._request("DELETE", "/x")
        assert exc_info.value.status_code == 500
        assert exc_info.value.backend_message == "xid not found"

    def test_http_error_without_json(self, client, urlopen):
        urlopen.side_effect = HTTPError(
            "http://seata:7091/api/v1/x", 502, "Bad Gateway", {}, io.BytesIO(b"<html>")
        )
        with pytest.raises(BackendRejectedError) as exc_info:
            client._request("GET", "/x")
        assert exc_info.value.backend_message is None

    def test_unreachable(self, client, urlopen):
        urlopen.side_effect = URLError("Connection refused")
        with pytest.raises(TransportError) as exc_info:
            client._request("GET", "/x")
        assert "network error" in str(exc_info.value)
        assert "seata:7091" in exc_info.value.suggestion

    def test_timeout(self, client, urlopen):
        urlopen.side_effect = TimeoutError()
        with pytest.raises(TransportError):
            client._request("GET", "/x")

    def test_invalid_json(self, client, urlopen):
        urlopen.return_value = _response(b"not json")
        with pytest.raises(TransportError):
            client._request("GET", "/x")

    def test_empty_body_is_success(self, client, urlopen):
        urlopen.return_value = _response(b"")
        assert client._request("PUT", "/x") == {}

    def test_dropped_connection(self, client, urlopen):
        urlopen.side_effect = RemoteDisconnected("Remote end closed connection without response")
        with pytest.raises(TransportError) as exc_info:
            client._request("GET", "/x")
        assert "connection error" in str(exc_info.value)

    def test_incomplete_read(self, client, urlopen):
        ctx = _response(b"")
        ctx.__enter__.return_value.read.side_effect = IncompleteRead(b'{"da')
        urlopen.return_value = ctx
        with pytest.raises(TransportError):
            client._request("GET", "/x")

    def test_body_not_utf8(self, client, urlopen):
        urlopen.return_value = _response(b"\xff\xfe{}")
        with pytest.raises(TransportError):
            asyncio.run(client.query_global_sessions(GlobalSessionQueryParam()))

    def test_total_not_a_number(self, client, urlopen):
        urlopen.return_value = _response(_envelope(data=[], total="lots"))
        with pytest.raises(TransportError):
            asyncio.run(client.query_global_sessions(GlobalSessionQueryParam()))
