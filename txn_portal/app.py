"""Txn Portal: an operator console for a distributed-transaction coordinator.

Main Textual application.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path

from textual.app import App
from textual.binding import Binding

from txn_portal.models.exceptions import ConfigError
from txn_portal.screens.main import TransactionScreen
from txn_portal.services.client import ConsoleClient
from txn_portal.services.config import Config, ConfigManager
from txn_portal.services.notification import NotificationService, NotificationSeverity
from txn_portal.services.timestamps import resolve_timezone
from txn_portal.styles import BASE_CSS

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Application service container for dependency injection."""

    config_manager: ConfigManager
    config: Config
    client: ConsoleClient
    notification: NotificationService
    tz: tzinfo | None

    @classmethod
    def create(
        cls,
        config_manager: ConfigManager | None = None,
        server_url: str | None = None,
        token: str | None = None,
        timezone: str | None = None,
    ) -> "Services":
        """Resolve configuration and wire up the services.

        Raises:
            ConfigError: if the resolved configuration is unusable
        """
        config_manager = config_manager or ConfigManager()
        config = config_manager.resolve(server_url=server_url, token=token, timezone=timezone)
        logger.debug(f"Resolved config: {config.to_dict(redact_secrets=True)}")
        client = ConsoleClient(
            config.server_url,
            api_prefix=config.api_prefix,
            timeout=config.request_timeout,
            token=config.token,
        )
        return cls(
            config_manager=config_manager,
            config=config,
            client=client,
            notification=NotificationService(config.notification),
            tz=resolve_timezone(config.display_timezone),
        )


class TxnPortalApp(App):
    """The main Txn Portal application."""

    TITLE = "Txn Portal"
    CSS = BASE_CSS + """
    Screen {
        background: $background;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "screenshot", "Screenshot", show=False),
    ]

    def __init__(self, services: Services | None = None, **kwargs):
        super().__init__(**kwargs)
        self.services = services or Services.create()

    def on_mount(self) -> None:
        self.sub_title = self.services.config.server_url
        self.push_screen(TransactionScreen(
            self.services.client,
            self.services.config,
            self.services.tz,
            config_manager=self.services.config_manager,
        ))

    @property
    def notification_service(self) -> NotificationService:
        """Access notification service."""
        return self.services.notification

    def notify_operator(self, message: str, severity: NotificationSeverity) -> None:
        """Show a notification on whichever screen is on top."""
        self.screen.post_message(self.notification_service.request(message, severity))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="txn-portal",
        description="Operator console for a distributed-transaction coordinator",
    )
    parser.add_argument("--url", help="Coordinator console URL (default from config, then http://127.0.0.1:7091)")
    parser.add_argument("--token", help="Value sent as the Authorization header")
    parser.add_argument("--timezone", help="Display timezone: UTC, local, or an IANA name")
    parser.add_argument("--config-dir", type=Path, help="Directory holding config.json")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file")
    parser.add_argument("--debug", action="store_true", help="Log at debug level")
    return parser.parse_args(argv)


def configure_logging(log_file: Path | None, debug: bool = False) -> None:
    """Send logs to a file; without one, keep the terminal clean for the TUI."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if log_file is None:
        root.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    """Run the Txn Portal application."""
    args = _parse_args(argv)
    configure_logging(args.log_file, args.debug)

    try:
        services = Services.create(
            ConfigManager(config_dir=args.config_dir),
            server_url=args.url,
            token=args.token,
            timezone=args.timezone,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    logger.info(f"Connecting to {services.config.server_url}")
    TxnPortalApp(services=services).run()


if __name__ == "__main__":
    main()
