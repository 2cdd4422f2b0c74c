"""Epoch-millis <-> display timestamp conversion."""

from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..models.exceptions import ConfigError, ValidationError

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

_INPUT_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Map a config value to a tzinfo.

    "UTC" (or empty) -> UTC, "local" -> None (system local time),
    anything else is looked up as an IANA zone.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc
    if name.lower() == "local":
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {name}", "use UTC, local, or e.g. Asia/Shanghai") from e


def format_timestamp(raw: Any, tz: tzinfo | None = timezone.utc) -> str | None:
    """Format epoch millis for display.

    None and "" mean "no value" and map to None. Numeric strings are
    accepted because the server sends begin times as either.
    """
    if raw is None or raw == "":
        return None
    try:
        millis = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        # Already formatted by the server, or not a finite number
        return str(raw)
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=tz)
    except (OverflowError, OSError, ValueError):
        return str(raw)
    return moment.strftime(DISPLAY_FORMAT)


def parse_time_input(text: str | None, tz: tzinfo | None = timezone.utc) -> int | None:
    """Parse an operator-typed time into epoch millis (whole seconds).

    Empty input means an unbounded end of the range.

    Raises:
        ValidationError: if the text matches none of the accepted formats
    """
    if text is None or not text.strip():
        return None
    value = text.strip()
    for fmt in _INPUT_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if tz is not None:
            parsed = parsed.replace(tzinfo=tz)
        return int(parsed.timestamp()) * 1000
    raise ValidationError(f"invalid time: {value}", "use YYYY-MM-DD [HH:MM[:SS]]")
