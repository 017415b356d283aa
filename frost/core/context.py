"""Per-thread execution context of a unit process.

Each worker thread of a unit records its thread index and the source
location of the last assertion it reached. The context lives in
``threading.local`` storage and is never shared between threads.
"""

import sys
import threading
from dataclasses import dataclass
from typing import Optional


@dataclass
class ExecutionContext:
    """Thread index and last-known source location of one thread."""

    thread_index: int = 0
    filename: str = "<unknown>"
    lineno: int = 0

    @property
    def location(self) -> str:
        """Location formatted as ``file:line``."""
        return f"{self.filename}:{self.lineno}"


_local = threading.local()


def current_context() -> ExecutionContext:
    """Return the calling thread's context, creating it on first use."""
    context: Optional[ExecutionContext] = getattr(_local, "context", None)
    if context is None:
        context = ExecutionContext()
        _local.context = context
    return context


def bind_thread(index: int) -> ExecutionContext:
    """Start a fresh context for the calling thread with the given index."""
    context = ExecutionContext(thread_index=index)
    _local.context = context
    return context


def thread_index() -> int:
    """Index of the calling worker thread within its unit (0 when single-threaded)."""
    return current_context().thread_index


def update_location(depth: int = 1) -> ExecutionContext:
    """Record the source location of the caller ``depth`` frames up."""
    frame = sys._getframe(depth + 1)
    context = current_context()
    context.filename = frame.f_code.co_filename
    context.lineno = frame.f_lineno
    return context


def caller_location(depth: int = 1) -> str:
    """Source location ``file:line`` of the caller ``depth`` frames up."""
    frame = sys._getframe(depth + 1)
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"
