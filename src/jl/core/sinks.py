"""Line sinks. Every line is flushed as soon as it is written."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol, TextIO


class LineSink(Protocol):
    def write_line(self, line: str) -> None:
        """Write one line (a newline is appended) and flush."""
        ...

    def close(self) -> None: ...


class StreamSink:
    """Write to an already-open text stream such as stdout; never closes it.

    A TextIOWrapper such as stdout is switched to `errors="replace"`.
    """

    def __init__(self, stream: TextIO) -> None:
        if isinstance(stream, io.TextIOWrapper):
            stream.reconfigure(errors="replace")
        self._stream = stream

    def write_line(self, line: str) -> None:
        self._stream.write(line + "\n")
        self._stream.flush()

    def close(self) -> None:
        self._stream.flush()


class FileSink:
    """Write to a file that is created (or truncated) on construction."""

    def __init__(self, path: str | Path, *, encoding: str = "utf-8", errors: str = "replace") -> None:
        self._file = Path(path).open("w", encoding=encoding, errors=errors)

    def write_line(self, line: str) -> None:
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
