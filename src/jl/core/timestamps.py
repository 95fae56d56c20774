"""Timestamp parsing and display formatting.

Accepts ISO-8601 / RFC-3339 strings and Unix epoch numbers (seconds or
milliseconds) and renders them in a requested timezone without an offset suffix.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, tzinfo
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidTimezoneError

# Epoch values at or above this magnitude are milliseconds.
EPOCH_MILLIS_THRESHOLD = 1e12

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class TimestampStyle(str, Enum):
    """Display style for formatted timestamps."""

    TIME = "time"
    FULL = "full"


def _parse_iso(s: str) -> datetime | None:
    s = s.strip()
    if not s:
        return None

    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _parse_epoch(value: float) -> datetime | None:
    if not math.isfinite(value):
        return None
    try:
        if abs(value) >= EPOCH_MILLIS_THRESHOLD:
            return _EPOCH + timedelta(milliseconds=int(value))
        return _EPOCH + timedelta(seconds=value)
    except OverflowError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a JSON timestamp value into an aware datetime, or None if unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return _parse_iso(value)
    if isinstance(value, (int, float)):
        return _parse_epoch(float(value))
    return None


def resolve_timezone(name: str) -> tzinfo | None:
    """Resolve `local`, `utc` or an IANA zone name.

    Returns None for `local`, which `datetime.astimezone` reads as the system zone.
    """
    key = name.strip()
    if key.lower() == "local":
        return None
    if key.lower() == "utc":
        return UTC
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(name) from exc


def format_timestamp(
    ts: datetime,
    tz: tzinfo | None,
    style: TimestampStyle = TimestampStyle.TIME,
) -> str:
    """Convert to `tz` and render with millisecond precision and no offset."""
    local = ts.astimezone(tz)
    millis = local.microsecond // 1000
    if style is TimestampStyle.FULL:
        return f"{local:%Y-%m-%dT%H:%M:%S}.{millis:03d}"
    return f"{local:%H:%M:%S}.{millis:03d}"
