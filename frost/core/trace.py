"""Bounded per-thread error trace.

Functions that report failures push a frame with their location and an error
code, optionally append a message, and return ``FAILURE``. Callers either
handle the failure and ``clear()`` the trace or push another frame on top of
it. The trace is read by the assertion helpers when a test fails.

The stack holds at most ``MAX_FRAMES`` frames and each message at most
``MESSAGE_LENGTH`` characters; anything beyond is dropped silently, while
``get_code()`` always reflects the latest push.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional

from .context import caller_location

SUCCESS = 0
FAILURE = 1

MAX_FRAMES = 32
MESSAGE_LENGTH = 128


@dataclass
class ErrorFrame:
    """One reported error: where it happened, its code and message."""

    location: str
    code: int
    message: str = ""


class ErrorTrace:
    """Fixed-capacity error stack owned by one thread."""

    def __init__(self, max_frames: int = MAX_FRAMES, message_length: int = MESSAGE_LENGTH) -> None:
        self.max_frames = max_frames
        self.message_length = message_length
        self.code = 0
        self._frames: List[ErrorFrame] = []

    def push(self, location: str, code: int) -> None:
        if code == 0:
            raise ValueError("error code must be nonzero")
        self.code = code
        if len(self._frames) >= self.max_frames:
            return
        self._frames.append(ErrorFrame(location=location, code=code))

    def append_message(self, text: str) -> None:
        if not self._frames:
            return
        frame = self._frames[-1]
        room = self.message_length - len(frame.message)
        if room > 0:
            frame.message += text[:room]

    def __len__(self) -> int:
        return len(self._frames)

    def nth(self, index: int) -> Optional[ErrorFrame]:
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None

    def clear(self) -> None:
        self.code = 0
        self._frames.clear()


_local = threading.local()


def _trace() -> ErrorTrace:
    trace = getattr(_local, "trace", None)
    if trace is None:
        trace = ErrorTrace()
        _local.trace = trace
    return trace


def push(location: str, code: int) -> None:
    """Start a new frame and set the thread's current error code."""
    _trace().push(location, code)


def append_message(text: str) -> None:
    """Append text to the most recent frame's message."""
    _trace().append_message(text)


def get_code() -> int:
    """Current error code of the calling thread, 0 if none."""
    return _trace().code


def trace_length() -> int:
    """Number of frames recorded by the calling thread."""
    return len(_trace())


def trace_nth(index: int) -> Optional[ErrorFrame]:
    """Frame at ``index`` or None if out of bounds."""
    return _trace().nth(index)


def clear() -> None:
    """Reset the calling thread's error code and frames."""
    _trace().clear()


def failure(code: int, message: Optional[str] = None) -> int:
    """Report an error at the caller's location and return FAILURE.

    Typical use::

        if size < 0:
            return trace.failure(errno.EINVAL, f"negative size {size}")
    """
    push(caller_location(), code)
    if message:
        append_message(message)
    return FAILURE
