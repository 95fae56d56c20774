"""Record extraction: apply a field mapping to a decoded JSON value."""

from __future__ import annotations

import json
import logging
from datetime import tzinfo
from typing import Any

from .models import FieldMapping, Level, LogRecord, Role
from .timestamps import TimestampStyle, format_timestamp, parse_timestamp

LOGGER = logging.getLogger(__name__)

# Extras key under which a non-object JSON payload is kept.
NON_OBJECT_KEY = "value"


def parse_level_value(value: Any) -> Level | None:
    """Coerce a level field (name string or Bunyan integer) into a Level."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            return Level.from_name(value)
        except ValueError:
            return None
    if isinstance(value, int):
        return Level.from_bunyan(value)
    if isinstance(value, float) and value.is_integer():
        return Level.from_bunyan(int(value))
    return None


def value_to_text(value: Any) -> str:
    """Strings pass through; anything else becomes compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def extract_record(
    value: Any,
    mapping: FieldMapping,
    tz: tzinfo | None,
    ts_style: TimestampStyle = TimestampStyle.TIME,
) -> LogRecord:
    """Build a LogRecord from one decoded JSON value.

    Non-object values keep the whole payload as the single extra `value` and
    show its compact JSON in the message slot; no other field is set.
    """
    if not isinstance(value, dict):
        LOGGER.debug("Non-object JSON value (%s); shown as message", type(value).__name__)
        return LogRecord(message=value_to_text(value), extras={NON_OBJECT_KEY: value}, raw=value)

    keys = {role: mapping.find_key(role, value) for role in Role}

    def field(role: Role) -> Any:
        key = keys[role]
        return value[key] if key is not None else None

    level = None
    if keys[Role.LEVEL] is not None:
        level = parse_level_value(field(Role.LEVEL))

    timestamp = None
    if keys[Role.TIMESTAMP] is not None:
        ts_val = field(Role.TIMESTAMP)
        parsed = parse_timestamp(ts_val)
        if parsed is not None:
            try:
                timestamp = format_timestamp(parsed, tz, ts_style)
            except (OverflowError, OSError):
                # Edge-of-range instants cannot be shifted into every zone.
                LOGGER.debug("Timestamp %r out of range for display zone", ts_val)
        if timestamp is None and ts_val is not None:
            timestamp = value_to_text(ts_val)

    def text(role: Role) -> str | None:
        if keys[role] is None:
            return None
        return value_to_text(field(role))

    consumed = tuple(k for k in keys.values() if k is not None)
    extras = {k: value[k] for k in sorted(value) if k not in consumed}

    return LogRecord(
        level=level,
        timestamp=timestamp,
        logger=text(Role.LOGGER),
        message=text(Role.MESSAGE),
        stack_trace=text(Role.STACK_TRACE),
        extras=extras,
        raw=value,
        consumed=consumed,
    )
