"""Core data models for JSON log rendering."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

_LEVEL_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
    "PANIC": "FATAL",
}


class Level(IntEnum):
    """Normalized severity levels, valued by their Bunyan numeric codes."""

    TRACE = 10
    DEBUG = 20
    INFO = 30
    WARN = 40
    ERROR = 50
    FATAL = 60

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_name(cls, name: str) -> Level:
        """Parse a case-insensitive level name (aliases included)."""
        key = name.strip().upper()
        key = _LEVEL_ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown log level: {name}") from None

    @classmethod
    def from_bunyan(cls, code: int) -> Level | None:
        """Map a Bunyan numeric level; any other integer yields None."""
        try:
            return cls(code)
        except ValueError:
            return None


class Schema(str, Enum):
    """Known JSON log producer conventions."""

    LOGSTASH = "logstash"
    LOGRUS = "logrus"
    BUNYAN = "bunyan"
    GENERIC = "generic"


class Role(str, Enum):
    """Canonical, schema-independent field identities."""

    LEVEL = "level"
    TIMESTAMP = "timestamp"
    LOGGER = "logger"
    MESSAGE = "message"
    STACK_TRACE = "stack_trace"


@dataclass(frozen=True, slots=True)
class FieldMapping:
    """Candidate JSON keys per canonical role, tried in priority order."""

    level: Sequence[str]
    timestamp: Sequence[str]
    logger: Sequence[str]
    message: Sequence[str]
    stack_trace: Sequence[str]

    def candidates(self, role: Role) -> Sequence[str]:
        return getattr(self, role.value)

    def find_key(self, role: Role, obj: Mapping[str, Any]) -> str | None:
        """Return the first candidate key for `role` present in `obj`."""
        for key in self.candidates(role):
            if key in obj:
                return key
        return None


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Normalized record produced from one JSON input line."""

    level: Level | None = None
    timestamp: str | None = None  # already formatted for display
    logger: str | None = None
    message: str | None = None
    stack_trace: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)  # sorted by key
    raw: Any = None  # original decoded JSON value
    consumed: tuple[str, ...] = ()  # JSON keys claimed by canonical roles
