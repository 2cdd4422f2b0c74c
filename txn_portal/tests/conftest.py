"""Shared test fixtures for Txn Portal."""

import pytest
from pathlib import Path
from unittest.mock import MagicMock

from txn_portal.models.session import GlobalSession
from txn_portal.services.client import ConsoleClient
from txn_portal.services.config import ConfigManager


def global_session_row(xid: str = "10.0.0.1:8091:1001", **overrides) -> dict:
    """A global session row as the console API returns it."""
    row = {
        "xid": xid,
        "transactionId": "1001",
        "applicationId": "order-service",
        "transactionServiceGroup": "default_tx_group",
        "transactionName": "placeOrder",
        "status": 1,
        "timeout": 60000,
        "beginTime": "1700000000000",
        "applicationData": "",
        "branchSessionVOs": [],
    }
    row.update(overrides)
    return row


def branch_session_row(xid: str = "10.0.0.1:8091:1001", branch_id: str = "2001", **overrides) -> dict:
    """A branch session row as the console API returns it."""
    row = {
        "xid": xid,
        "transactionId": "1001",
        "branchId": branch_id,
        "resourceGroupId": "default",
        "branchType": "AT",
        "status": 1,
        "resourceId": "jdbc:mysql://db/orders",
        "clientId": "order-service:10.0.0.5:52000",
        "applicationData": "",
    }
    row.update(overrides)
    return row


def make_session(xid: str = "10.0.0.1:8091:1001", **overrides) -> GlobalSession:
    return GlobalSession.from_api_dict(global_session_row(xid, **overrides))


@pytest.fixture
def mock_client() -> MagicMock:
    """A ConsoleClient whose async methods are AsyncMocks."""
    client = MagicMock(spec=ConsoleClient)
    client.query_global_sessions.return_value = ([], 0)
    client.query_global_locks.return_value = ([], 0)
    client.check_global_lock.return_value = True
    client.perform.return_value = None
    return client


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Create a ConfigManager with temp directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return ConfigManager(config_dir=config_dir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    monkeypatch.delenv("TXN_PORTAL_URL", raising=False)
    monkeypatch.delenv("TXN_PORTAL_TOKEN", raising=False)


@pytest.fixture
def global_row():
    """Factory for raw global session rows."""
    return global_session_row


@pytest.fixture
def branch_row():
    """Factory for raw branch session rows."""
    return branch_session_row


@pytest.fixture
def session_factory():
    """Factory for parsed GlobalSession objects."""
    return make_session
