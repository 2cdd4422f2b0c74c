"""Tests for configuration loading, saving and resolution."""

import json
import stat
from pathlib import Path

import pytest

from txn_portal.models.exceptions import ConfigError
from txn_portal.services.config import Config, ConfigManager, NotificationSettings


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.server_url == "http://127.0.0.1:7091"
        assert config.api_prefix == "/api/v1"
        assert config.default_page_size == 10
        assert config.page_size_choices == [10, 20, 30, 40, 50]
        assert config.display_timezone == "UTC"
        assert config.discard_stale_responses is True

    def test_round_trip(self):
        config = Config(
            server_url="http://seata:7091",
            token="secret-token",
            default_page_size=20,
            display_timezone="local",
            discard_stale_responses=False,
            notification=NotificationSettings(error_timeout=9.0),
        )
        assert Config.from_dict(config.to_dict()) == config

    def test_token_omitted_when_empty(self):
        assert "token" not in Config().to_dict()

    def test_redacted_token(self):
        data = Config(token="secret-token").to_dict(redact_secrets=True)
        assert data["token"] == "***oken"

    def test_from_partial_dict(self):
        config = Config.from_dict({"server_url": "http://seata:7091"})
        assert config.server_url == "http://seata:7091"
        assert config.request_timeout == 10.0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"server_url": "seata:7091"},
            {"request_timeout": 0},
            {"default_page_size": 0},
            {"page_size_choices": [10, -1]},
        ],
    )
    def test_validate_rejects(self, overrides):
        with pytest.raises(ConfigError):
            Config(**overrides).validate()


class TestConfigManager:
    def test_missing_file_gives_defaults(self, config_manager: ConfigManager):
        assert config_manager.config == Config()

    def test_save_and_reload(self, config_manager: ConfigManager):
        config_manager.save_config(Config(server_url="http://seata:7091", default_page_size=30))

        reloaded = ConfigManager(config_dir=config_manager.config_file.parent)
        assert reloaded.config.server_url == "http://seata:7091"
        assert reloaded.config.default_page_size == 30

    def test_saved_file_is_owner_only(self, config_manager: ConfigManager):
        config_manager.save_config(Config(token="secret"))
        mode = stat.S_IMODE(config_manager.config_file.stat().st_mode)
        assert mode == 0o600
        assert json.loads(config_manager.config_file.read_text())["token"] == "secret"

    def test_invalid_json_falls_back(self, config_manager: ConfigManager):
        config_manager.config_file.write_text("{not json")
        assert config_manager.config == Config()

    def test_creates_config_dir(self, tmp_path: Path):
        manager = ConfigManager(config_dir=tmp_path / "nested" / "dir")
        manager.save_config(Config())
        assert manager.config_file.exists()


    def test_remember_page_size(self, config_manager: ConfigManager, monkeypatch):
        monkeypatch.setenv("TXN_PORTAL_TOKEN", "env-token")
        config_manager.resolve(token="cli-token")

        config_manager.remember_page_size(30)

        saved = json.loads(config_manager.config_file.read_text())
        assert saved["default_page_size"] == 30
        assert "token" not in saved
        assert config_manager.resolve().default_page_size == 30

    def test_remember_same_page_size_writes_nothing(self, config_manager: ConfigManager):
        config_manager.remember_page_size(10)
        assert not config_manager.config_file.exists()

class TestResolve:
    def test_file_values(self, config_manager: ConfigManager):
        config_manager.save_config(Config(server_url="http://file:7091/"))
        assert config_manager.resolve().server_url == "http://file:7091"

    def test_env_overrides_file(self, config_manager: ConfigManager, monkeypatch):
        config_manager.save_config(Config(server_url="http://file:7091"))
        monkeypatch.setenv("TXN_PORTAL_URL", "http://env:7091")
        monkeypatch.setenv("TXN_PORTAL_TOKEN", "env-token")
        resolved = config_manager.resolve()
        assert resolved.server_url == "http://env:7091"
        assert resolved.token == "env-token"

    def test_arguments_override_env(self, config_manager: ConfigManager, monkeypatch):
        monkeypatch.setenv("TXN_PORTAL_URL", "http://env:7091")
        resolved = config_manager.resolve(
            server_url="http://cli:7091", token="cli-token", timezone="local"
        )
        assert resolved.server_url == "http://cli:7091"
        assert resolved.token == "cli-token"
        assert resolved.display_timezone == "local"

    def test_resolve_does_not_touch_stored_config(self, config_manager: ConfigManager):
        config_manager.resolve(server_url="http://cli:7091")
        assert config_manager.config.server_url == "http://127.0.0.1:7091"

    def test_invalid_url_raises(self, config_manager: ConfigManager):
        with pytest.raises(ConfigError):
            config_manager.resolve(server_url="ftp://seata")
