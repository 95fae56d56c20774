"""Schema detection: classify a JSON object by the producer convention it follows."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .models import FieldMapping, Schema

LOGGER = logging.getLogger(__name__)

_FIELD_MAPPINGS: dict[Schema, FieldMapping] = {
    Schema.LOGSTASH: FieldMapping(
        level=("level",),
        timestamp=("@timestamp",),
        logger=("logger_name",),
        message=("message",),
        stack_trace=("stack_trace",),
    ),
    Schema.LOGRUS: FieldMapping(
        level=("level",),
        timestamp=("time",),
        logger=("component",),
        message=("msg",),
        stack_trace=("stack_trace", "stacktrace"),
    ),
    Schema.BUNYAN: FieldMapping(
        level=("level",),
        timestamp=("time",),
        logger=("name",),
        message=("msg",),
        stack_trace=("stack",),
    ),
    Schema.GENERIC: FieldMapping(
        level=("level", "severity", "loglevel", "log_level", "lvl"),
        timestamp=("timestamp", "@timestamp", "time", "ts", "datetime", "date"),
        logger=("logger", "logger_name", "name", "component", "source", "caller"),
        message=("message", "msg", "text", "body", "log"),
        stack_trace=("stack_trace", "stacktrace", "stack", "exception", "traceback"),
    ),
}

SIGNATURE_FIELDS: dict[Schema, tuple[str, ...]] = {
    Schema.LOGSTASH: (
        "@timestamp",
        "level",
        "logger_name",
        "message",
        "stack_trace",
        "thread_name",
        "@version",
    ),
    Schema.LOGRUS: ("level", "msg", "time", "component"),
    Schema.BUNYAN: ("v", "level", "name", "hostname", "pid", "time", "msg"),
}

LOGSTASH_TIMESTAMP_BONUS = 2
BUNYAN_NUMERIC_LEVEL_BONUS = 3

# Ties between equal scores resolve to the earliest schema here.
SCHEMA_PRIORITY: tuple[Schema, ...] = (Schema.LOGSTASH, Schema.LOGRUS, Schema.BUNYAN)


def field_mapping(schema: Schema) -> FieldMapping:
    """Return the (shared, immutable) field mapping for a schema."""
    return _FIELD_MAPPINGS[schema]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def score_schemas(obj: Mapping[str, Any]) -> dict[Schema, int]:
    """Score each known schema by signature keys present plus its bonus condition."""
    scores = {
        schema: sum(1 for key in fields if key in obj)
        for schema, fields in SIGNATURE_FIELDS.items()
    }
    if "@timestamp" in obj:
        scores[Schema.LOGSTASH] += LOGSTASH_TIMESTAMP_BONUS
    if "v" in obj and _is_number(obj.get("level")):
        scores[Schema.BUNYAN] += BUNYAN_NUMERIC_LEVEL_BONUS
    return scores


def detect_schema(obj: Any) -> Schema:
    """Pick the best-scoring known schema, or GENERIC when nothing matches."""
    if not isinstance(obj, Mapping):
        return Schema.GENERIC

    scores = score_schemas(obj)
    best = max(scores.values())
    if best <= 0:
        return Schema.GENERIC

    for schema in SCHEMA_PRIORITY:
        if scores[schema] == best:
            return schema
    return Schema.GENERIC


def resolve_schema(choice: Schema | None, obj: Any) -> Schema:
    """Apply a forced schema, or detect one from `obj` when `choice` is None."""
    if choice is not None:
        LOGGER.debug("Using forced schema %s", choice.value)
        return choice
    schema = detect_schema(obj)
    LOGGER.debug("Detected schema %s", schema.value)
    return schema
