"""Output utilities for writing harness lines with a process-wide lock."""

import sys
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO


class OutputStream:
    """Line-oriented writer shared by the orchestrator and test threads.

    All writes go through one re-entrant lock so that a failure diagnostic
    printed by a worker thread never interleaves with other output. Holding
    the lock across several writes (``with stream.locked():``) keeps a
    multi-line block together.
    """

    def __init__(self, file: Optional[TextIO] = None) -> None:
        self._file = file
        self._lock = threading.RLock()

    @property
    def file(self) -> TextIO:
        """Underlying stream; stderr unless another file was given."""
        return self._file if self._file is not None else sys.stderr

    def isatty(self) -> bool:
        """Whether the stream is an interactive terminal."""
        isatty = getattr(self.file, "isatty", None)
        try:
            return bool(isatty and isatty())
        except ValueError:
            return False

    @contextmanager
    def locked(self) -> Iterator["OutputStream"]:
        """Hold the output lock for a block of writes."""
        with self._lock:
            yield self

    def write(self, message: str, flush: bool = True) -> None:
        """Write message without adding a newline."""
        with self._lock:
            self.file.write(message)
            if flush:
                self.file.flush()

    def line(self, message: str = "", flush: bool = True) -> None:
        """Write message followed by a newline."""
        self.write(f"{message}\n", flush=flush)

    def flush(self) -> None:
        """Flush the underlying stream."""
        with self._lock:
            self.file.flush()


_output = OutputStream()


def get_output() -> OutputStream:
    """Process-wide output stream (stderr)."""
    return _output


def write_stdout(message: str, flush: bool = True) -> None:
    """Write message to stdout with optional flushing."""
    sys.stdout.write(message)
    if flush:
        sys.stdout.flush()
