"""Sink writer -- the only code that touches stderr or the log file.

Nothing in here may log. A failed write is counted and checked with
verify(); reporting it through logging would re-enter the handler that
is calling us.
"""

from __future__ import annotations

import enum
import sys
import threading
from pathlib import Path
from typing import BinaryIO

from diaglog.errors import verify


class WriteTarget(enum.IntFlag):
    NONE = 0
    CONSOLE = 1
    FILE = 2
    FLUSH = 4
    ALL = CONSOLE | FILE | FLUSH


class SinkWriter:
    """Console + log file writer guarded by a single file lock."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding
        self._lock = threading.Lock()
        self._file: BinaryIO | None = None
        self._path: Path | None = None
        self._errors = 0

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._file is not None

    @property
    def errors(self) -> int:
        """Number of console/file I/O failures seen so far."""
        return self._errors

    def open(self, path: str | Path) -> bool:
        """Open the log file for writing, truncating it.

        Returns False and stays closed if the file cannot be created
        (missing or unwritable directory). That is console-only mode,
        not an error.
        """
        path = Path(path)
        with self._lock:
            if not verify(self._file is None, "log file already open"):
                return False
            try:
                self._file = open(path, "wb")
            except OSError:
                return False
            self._path = path
            return True

    def write(self, data: bytes, targets: WriteTarget) -> None:
        verify(bool(data), "empty log message")
        verify(
            bool(targets & (WriteTarget.CONSOLE | WriteTarget.FILE)),
            "write without console or file target",
        )
        flush = bool(targets & WriteTarget.FLUSH)
        if targets & WriteTarget.CONSOLE:
            self._write_console(data, flush)
        if targets & WriteTarget.FILE:
            with self._lock:
                # Writing to a closed file must stay a silent no-op.
                if self._file is None:
                    return
                try:
                    written = self._file.write(data)
                except OSError:
                    self._errors += 1
                    written = -1
                if flush:
                    try:
                        self._file.flush()
                    except OSError:
                        self._errors += 1
            verify(written == len(data), f"short log file write: {written} of {len(data)}")

    def flush(self) -> None:
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.flush()
            except OSError:
                self._errors += 1

    def close(self) -> None:
        """Close the file once any in-flight write has finished."""
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.close()
            except OSError:
                self._errors += 1
            self._file = None

    def _write_console(self, data: bytes, flush: bool) -> None:
        # Resolved per call so redirected/captured stderr is honoured.
        stream = sys.stderr
        if stream is None:
            return
        try:
            buffer = getattr(stream, "buffer", None)
            if buffer is not None:
                # Drain pending text first so lines stay in order.
                stream.flush()
                buffer.write(data)
                if flush:
                    buffer.flush()
            else:
                stream.write(data.decode(self._encoding, errors="replace"))
            if flush:
                stream.flush()
        except (OSError, ValueError):
            self._errors += 1
