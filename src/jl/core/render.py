"""Render LogRecords into styled text lines."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .color import ColorConfig
from .models import LogRecord, Role
from .record import value_to_text
from .template import CanonicalToken, CustomToken, FormatToken, LiteralToken, custom_field_names

STACK_TRACE_FIELD = "stack_trace"
STACK_INDENT = "    "
EXPANDED_INDENT = "  "

# C0 controls except TAB and LF, DEL, and C1 controls.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
# Lone surrogates (from JSON \uD800-style escapes) cannot be encoded as UTF-8.
_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")
# Characters json.dumps leaves unescaped that a terminal or encoder may reject.
_JSON_UNSAFE_RE = re.compile(r"[\x7f-\x9f\ud800-\udfff]")


class LoggerFormat(str, Enum):
    SHORT_DOTS = "short-dots"
    AS_IS = "as-is"


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Per-run rendering switches, derived once from the run configuration."""

    logger_format: LoggerFormat = LoggerFormat.SHORT_DOTS
    logger_length: int = 30  # 0 disables cropping
    expanded: bool = False
    raw_json: bool = False
    add_fields: frozenset[str] = frozenset()
    omit_fields: frozenset[str] = frozenset()
    template_fields: frozenset[str] = frozenset()

    @classmethod
    def for_template(cls, tokens: Iterable[FormatToken], **kwargs: Any) -> RenderOptions:
        return cls(template_fields=custom_field_names(tuple(tokens)), **kwargs)


def sanitize_control_chars(s: str) -> str:
    """Strip terminal control characters (keeping TAB and newline) and replace lone surrogates."""
    return _SURROGATE_RE.sub("\ufffd", _CONTROL_RE.sub("", s))


def shorten_logger_dots(name: str) -> str:
    """Abbreviate every dot segment but the last: ``com.example.App`` -> ``c.e.App``."""
    segments = name.split(".")
    if len(segments) <= 1:
        return name
    return ".".join([seg[:1] for seg in segments[:-1]] + [segments[-1]])


def truncate_logger_left(name: str, max_len: int) -> str:
    """Crop from the left, dropping whole ``segment.`` prefixes before cutting characters."""
    if max_len <= 0 or len(name) <= max_len:
        return name

    remaining = name
    while len(remaining) > max_len:
        dot = remaining.find(".")
        if dot == -1 or dot == len(remaining) - 1:
            break
        remaining = remaining[dot + 1 :]

    if len(remaining) > max_len:
        return remaining[-max_len:]
    return remaining


def format_logger(name: str, options: RenderOptions) -> str:
    if options.logger_format is LoggerFormat.SHORT_DOTS:
        name = shorten_logger_dots(name)
    return truncate_logger_left(name, options.logger_length)


def select_extras(extras: Mapping[str, Any], options: RenderOptions) -> list[tuple[str, Any]]:
    """Pick extras to append after the template.

    With add_fields only the listed extras are shown; with only omit_fields
    everything but the omitted ones; with neither, nothing. Omission always
    wins, and fields already placed by the template are never repeated.
    """
    if not options.add_fields and not options.omit_fields:
        return []

    out: list[tuple[str, Any]] = []
    for key, value in extras.items():
        if key in options.template_fields or key in options.omit_fields:
            continue
        if options.add_fields and key not in options.add_fields:
            continue
        out.append((key, value))
    return out


def project_raw(record: LogRecord, options: RenderOptions) -> Any:
    """Filter the raw JSON object by the add/omit selections."""
    raw = record.raw
    if not isinstance(raw, dict) or not (options.add_fields or options.omit_fields):
        return raw

    consumed = set(record.consumed)
    out = {}
    for key, value in raw.items():
        if key in options.omit_fields:
            continue
        if options.add_fields and key not in consumed and key not in options.add_fields:
            continue
        out[key] = value
    return out


def render_raw_json(record: LogRecord, options: RenderOptions) -> str:
    text = json.dumps(project_raw(record, options), separators=(",", ":"), ensure_ascii=False)
    return _JSON_UNSAFE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def _canonical(record: LogRecord, role: Role, color: ColorConfig, options: RenderOptions) -> str:
    if role is Role.LEVEL:
        return color.style_level(record.level) if record.level is not None else ""
    if role is Role.LOGGER:
        return sanitize_control_chars(format_logger(record.logger or "", options))
    if role is Role.TIMESTAMP:
        return sanitize_control_chars(record.timestamp or "")
    if role is Role.MESSAGE:
        return sanitize_control_chars(record.message or "")
    return sanitize_control_chars(record.stack_trace or "")


def _stack_lines(stack_trace: str, color: ColorConfig) -> list[str]:
    lines = sanitize_control_chars(stack_trace).split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [color.style_stack(f"{STACK_INDENT}{line}") for line in lines]


def render(
    record: LogRecord,
    tokens: Iterable[FormatToken],
    color: ColorConfig,
    options: RenderOptions,
) -> str:
    """Render one record; may span several lines (expanded extras, stack trace)."""
    if options.raw_json:
        return render_raw_json(record, options)

    parts: list[str] = []
    for token in tokens:
        if isinstance(token, LiteralToken):
            parts.append(token.text)
        elif isinstance(token, CanonicalToken):
            parts.append(_canonical(record, token.role, color, options))
        elif isinstance(token, CustomToken):
            if token.name in record.extras:
                parts.append(sanitize_control_chars(value_to_text(record.extras[token.name])))
    line = "".join(parts)

    extras = select_extras(record.extras, options)
    if extras:
        rendered = [
            (
                color.style_key(sanitize_control_chars(key)),
                color.style_value(sanitize_control_chars(value_to_text(value))),
            )
            for key, value in extras
        ]
        if options.expanded:
            sep = color.style_separator(":")
            line += "".join(f"\n{EXPANDED_INDENT}{k}{sep} {v}" for k, v in rendered)
        else:
            sep = color.style_separator("=")
            line += " " + " ".join(f"{k}{sep}{v}" for k, v in rendered)

    if record.stack_trace is not None and STACK_TRACE_FIELD not in options.omit_fields:
        stack = _stack_lines(record.stack_trace, color)
        if stack:
            line += "\n" + "\n".join(stack)

    return line
