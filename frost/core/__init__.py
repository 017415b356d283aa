"""Core framework components."""

from .barrier import Barrier, synchronize
from .context import thread_index

__all__ = ["Barrier", "synchronize", "thread_index"]
