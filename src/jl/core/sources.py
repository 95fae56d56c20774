"""Line sources: stdin, static files, and a follow (tail -f) reader."""

from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Protocol, TextIO

from .errors import SourceError

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.2  # seconds
READ_CHUNK_SIZE = 64 * 1024  # bytes per read while following


class LineSource(Protocol):
    """Yield one line per call (without its terminator); None means end of stream."""

    def next_line(self) -> str | None: ...

    def close(self) -> None: ...


def _decode_line(raw: bytes, *, encoding: str, decode_errors: str) -> str:
    line = raw.decode(encoding, errors=decode_errors)
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _open_binary(path: Path) -> BinaryIO:
    try:
        return path.open("rb")
    except OSError as exc:
        raise SourceError(str(path), exc.strerror or str(exc)) from exc


class StdinSource:
    """Read lines from an already-open stream (stdin by default).

    When the stream exposes its binary buffer, bytes are decoded here with
    the same replacement policy as files rather than the locale decoder.
    """

    def __init__(
        self,
        stream: TextIO,
        *,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> None:
        self._stream = stream
        self._buffer: BinaryIO | None = getattr(stream, "buffer", None)
        self._encoding = encoding
        self._decode_errors = decode_errors

    def next_line(self) -> str | None:
        if self._buffer is not None:
            raw = self._buffer.readline()
            if not raw:
                return None
            return _decode_line(raw, encoding=self._encoding, decode_errors=self._decode_errors)

        line = self._stream.readline()
        if not line:
            return None
        return line.rstrip("\n").removesuffix("\r")

    def close(self) -> None:
        # The stream belongs to the caller.
        return None


class FileSource:
    """Read a static file to its end."""

    def __init__(
        self,
        path: str | Path,
        *,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> None:
        self.path = Path(path)
        self._file = _open_binary(self.path)
        self._encoding = encoding
        self._decode_errors = decode_errors

    def next_line(self) -> str | None:
        raw = self._file.readline()
        if not raw:
            return None
        return _decode_line(raw, encoding=self._encoding, decode_errors=self._decode_errors)

    def close(self) -> None:
        self._file.close()


class FollowState(str, Enum):
    READING = "reading"
    WAITING = "waiting"
    CLOSED = "closed"


class FollowReader:
    """Unbounded line source over a growing file.

    At end of file the reader sleeps `poll_interval` seconds and re-checks the
    file size past its read position. Only complete lines are returned; a
    trailing partial line stays buffered until its newline arrives. The reader
    never reports end of stream on its own: `cancel()` (safe from another
    thread or a signal handler) or `close()` makes the pending or next call
    return None. Truncation and rotation are not detected.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        from_end: bool = False,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self.path = Path(path)
        self._file = _open_binary(self.path)
        self._poll_interval = poll_interval
        self._encoding = encoding
        self._decode_errors = decode_errors
        self._buffer = bytearray()
        self._pos = os.fstat(self._file.fileno()).st_size if from_end else 0
        self._cancelled = threading.Event()
        self._state = FollowState.READING

    @property
    def state(self) -> FollowState:
        return self._state

    def cancel(self) -> None:
        """Request the reader to stop; wakes a pending wait."""
        self._cancelled.set()

    def close(self) -> None:
        self.cancel()
        self._shutdown()

    def _shutdown(self) -> None:
        self._state = FollowState.CLOSED
        if not self._file.closed:
            self._file.close()

    def _read_available(self) -> bool:
        """Append up to one chunk written past the read position; True if some arrived."""
        size = os.fstat(self._file.fileno()).st_size
        if size <= self._pos:
            return False
        self._file.seek(self._pos)
        chunk = self._file.read(min(size - self._pos, READ_CHUNK_SIZE))
        if not chunk:
            return False
        self._pos += len(chunk)
        self._buffer += chunk
        return True

    def next_line(self) -> str | None:
        while True:
            if self._cancelled.is_set() or self._state is FollowState.CLOSED:
                self._shutdown()
                return None

            nl = self._buffer.find(b"\n")
            if nl != -1:
                raw = bytes(self._buffer[: nl + 1])
                del self._buffer[: nl + 1]
                if self._state is FollowState.WAITING:
                    LOGGER.debug("New data in %s; resuming", self.path)
                self._state = FollowState.READING
                return _decode_line(raw, encoding=self._encoding, decode_errors=self._decode_errors)

            if self._read_available():
                continue

            if self._state is not FollowState.WAITING:
                LOGGER.debug("Reached end of %s; waiting for data", self.path)
            self._state = FollowState.WAITING
            self._cancelled.wait(self._poll_interval)
