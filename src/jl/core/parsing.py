"""Per-line JSON decoding under a non-JSON policy."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import NonJsonLineError
from .render import sanitize_control_chars


class NonJsonMode(str, Enum):
    PRINT_AS_IS = "print-as-is"
    SKIP = "skip"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Either a decoded JSON value or passthrough text; both None means skip."""

    value: Any = None
    text: str | None = None
    is_json: bool = False

    @property
    def skipped(self) -> bool:
        return not self.is_json and self.text is None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _finite_float(s: str) -> float:
    value = float(s)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {s}")
    return value


def parse_line(line: str, mode: NonJsonMode, *, line_no: int = 0) -> ParseResult:
    """Decode a line as strict JSON, applying `mode` when it is not valid JSON.

    `NaN`, `Infinity` and numbers that overflow a float are not JSON.
    """
    try:
        value = json.loads(line, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError):
        pass
    else:
        return ParseResult(value=value, is_json=True)

    if mode is NonJsonMode.SKIP:
        return ParseResult()
    if mode is NonJsonMode.FAIL:
        raise NonJsonLineError(sanitize_control_chars(line), line_no)
    return ParseResult(text=sanitize_control_chars(line))
