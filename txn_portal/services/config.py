"""Configuration management for Txn Portal.

Single-file configuration stored in ~/.config/txn-portal/config.json.

Resolution order: command line > environment > config file > defaults

Security notes:
- The config file may contain an API token; it is saved with mode 0600
- Prefer TXN_PORTAL_TOKEN for credentials on shared machines
"""

import json
import logging
import os
import stat
from dataclasses import dataclass, field, replace
from pathlib import Path

from ..models.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_SERVER_URL = "TXN_PORTAL_URL"
ENV_TOKEN = "TXN_PORTAL_TOKEN"

DEFAULT_PAGE_SIZES = [10, 20, 30, 40, 50]


def _secure_write_json(path: Path, data: dict) -> None:
    """Write JSON to file with restricted permissions (0600).

    This ensures config files containing potential secrets
    are only readable by the owner.
    """
    content = json.dumps(data, indent=2)
    # Write to temp file first, then rename for atomicity
    temp_path = path.with_suffix(".tmp")
    try:
        fd = os.open(str(temp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, content.encode())
        finally:
            os.close(fd)
        temp_path.rename(path)
    except OSError as e:
        logger.warning(f"Atomic config write failed, writing in place: {e}")
        path.write_text(content)
        try:
            path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 0600
        except OSError:
            pass  # Best effort on systems that don't support chmod


@dataclass
class NotificationSettings:
    """How long notifications stay on screen (seconds; 0 keeps them until dismissed)."""

    success_timeout: float = 3.0
    warning_timeout: float = 4.0
    error_timeout: float = 6.0

    def to_dict(self) -> dict:
        return {
            "success_timeout": self.success_timeout,
            "warning_timeout": self.warning_timeout,
            "error_timeout": self.error_timeout,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationSettings":
        return cls(
            success_timeout=float(data.get("success_timeout", 3.0)),
            warning_timeout=float(data.get("warning_timeout", 4.0)),
            error_timeout=float(data.get("error_timeout", 6.0)),
        )


@dataclass
class Config:
    """Unified Txn Portal configuration."""

    server_url: str = "http://127.0.0.1:7091"
    api_prefix: str = "/api/v1"
    request_timeout: float = 10.0
    # Sent verbatim as the Authorization header when set
    token: str = ""
    default_page_size: int = 10
    page_size_choices: list[int] = field(default_factory=lambda: list(DEFAULT_PAGE_SIZES))
    # "UTC", "local", or an IANA zone name
    display_timezone: str = "UTC"
    # Drop query responses that arrive after a newer request was issued
    discard_stale_responses: bool = True
    notification: NotificationSettings = field(default_factory=NotificationSettings)

    def to_dict(self, redact_secrets: bool = False) -> dict:
        """Serialize to dict.

        Args:
            redact_secrets: If True, redact the token
        """
        result: dict = {
            "server_url": self.server_url,
            "api_prefix": self.api_prefix,
            "request_timeout": self.request_timeout,
            "default_page_size": self.default_page_size,
            "page_size_choices": self.page_size_choices,
            "display_timezone": self.display_timezone,
            "discard_stale_responses": self.discard_stale_responses,
            "notification": self.notification.to_dict(),
        }
        if self.token:
            if redact_secrets:
                result["token"] = f"***{self.token[-4:]}" if len(self.token) >= 4 else "***"
            else:
                result["token"] = self.token
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        choices = data.get("page_size_choices") or list(DEFAULT_PAGE_SIZES)
        return cls(
            server_url=data.get("server_url", "http://127.0.0.1:7091"),
            api_prefix=data.get("api_prefix", "/api/v1"),
            request_timeout=float(data.get("request_timeout", 10.0)),
            token=data.get("token", ""),
            default_page_size=int(data.get("default_page_size", 10)),
            page_size_choices=[int(c) for c in choices],
            display_timezone=data.get("display_timezone", "UTC"),
            discard_stale_responses=bool(data.get("discard_stale_responses", True)),
            notification=NotificationSettings.from_dict(data.get("notification", {}) or {}),
        )

    def validate(self) -> None:
        """Raise ConfigError for settings the console cannot work with."""
        if not self.server_url.startswith(("http://", "https://")):
            raise ConfigError(
                f"invalid server url: {self.server_url}",
                "use http://host:port",
            )
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.default_page_size <= 0:
            raise ConfigError("default_page_size must be positive")
        if any(size <= 0 for size in self.page_size_choices):
            raise ConfigError("page_size_choices must be positive")


class ConfigManager:
    """Loads, resolves and saves the console configuration."""

    def __init__(self, config_dir: Path | None = None):
        if config_dir is None:
            config_dir = Path.home() / ".config" / "txn-portal"
        self._config_dir = config_dir
        self._config_file = config_dir / "config.json"
        self._config: Config | None = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> Config:
        """Load config from disk."""
        if self._config_file.exists():
            try:
                data = json.loads(self._config_file.read_text())
                return Config.from_dict(data)
            except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")
        return Config()

    def save_config(self, config: Config) -> None:
        """Save config to disk with secure permissions."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        _secure_write_json(self._config_file, config.to_dict())
        self._config = config

    def remember_page_size(self, size: int) -> None:
        """Store the operator's page size as the default for the next start.

        Only the file config is written; CLI and environment overrides stay
        out of it.
        """
        if size == self.config.default_page_size:
            return
        self.save_config(replace(self.config, default_page_size=size))
        logger.info(f"Default page size set to {size}")

    def resolve(
        self,
        server_url: str | None = None,
        token: str | None = None,
        timezone: str | None = None,
    ) -> Config:
        """Resolve the effective configuration.

        Resolution order: arguments > environment > file > defaults.
        The stored config is not modified.

        Raises:
            ConfigError: if the resolved settings are unusable
        """
        resolved = replace(self.config)

        env_url = os.environ.get(ENV_SERVER_URL)
        if env_url:
            resolved.server_url = env_url
        env_token = os.environ.get(ENV_TOKEN)
        if env_token:
            resolved.token = env_token

        if server_url:
            resolved.server_url = server_url
        if token:
            resolved.token = token
        if timezone:
            resolved.display_timezone = timezone

        resolved.server_url = resolved.server_url.rstrip("/")
        resolved.validate()
        return resolved
