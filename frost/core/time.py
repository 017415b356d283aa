"""Monotonic time helpers: deadlines for unit timeouts and elapsed-time formatting."""

import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class Deadline:
    """Deadline anchored at a monotonic start time.

    A deadline without a timeout never expires.
    """

    start: float
    timeout: Optional[float] = None

    @classmethod
    def after(cls, timeout: Optional[float], start: Optional[float] = None) -> "Deadline":
        """Create a deadline ``timeout`` seconds after ``start`` (default: now)."""
        return cls(time.monotonic() if start is None else start, timeout)

    def elapsed(self) -> float:
        """Seconds since the start."""
        return max(0.0, time.monotonic() - self.start)

    def remaining(self) -> Optional[float]:
        """Seconds left, or None for an unbounded deadline."""
        if self.timeout is None:
            return None
        return max(0.0, self.timeout - self.elapsed())

    def is_expired(self) -> bool:
        """Whether the elapsed time exceeds the timeout."""
        return self.timeout is not None and self.elapsed() > self.timeout


def format_elapsed(seconds: float) -> str:
    """Format a duration with a unit chosen by magnitude: µs, ms or s."""
    msec = max(0.0, seconds * 1000.0)
    if msec < 1:
        return f"({msec * 1000:.2f}µs)"
    if msec < 1000:
        return f"({msec:.2f}ms)"
    return f"({msec / 1000:.2f}s)"


def format_timeout(seconds: float) -> str:
    """Format a timeout for diagnostics, rounded to whole seconds."""
    return f"{seconds:.0f}s"
