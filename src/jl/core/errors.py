"""Exception taxonomy for the rendering pipeline."""

from __future__ import annotations


class JlError(Exception):
    """Base class for errors that abort a run."""


class InvalidTimezoneError(JlError, ValueError):
    """The requested timezone name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown timezone: {name}")
        self.name = name


class NonJsonLineError(JlError):
    """A non-JSON line was read while the non-JSON policy is `fail`."""

    def __init__(self, line: str, line_no: int) -> None:
        super().__init__(f"line {line_no} is not valid JSON: {line}")
        self.line = line
        self.line_no = line_no


class SourceError(JlError):
    """An input file could not be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
