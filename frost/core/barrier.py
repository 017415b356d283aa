"""Reusable thread barrier for the worker threads of one unit."""

import threading
from typing import Optional

from .errors import BarrierError


class Barrier:
    """Generation-counted rendezvous for a fixed number of threads.

    Every ``wait()`` blocks until ``parties`` callers have arrived for the
    current generation, then all of them are released together and the
    generation advances. Waiters block on the generation changing rather than
    on the arrival count, so a thread that immediately re-enters for the next
    round can neither be released by the previous round's wakeup nor release
    a straggler of the previous round early.
    """

    def __init__(self, parties: int) -> None:
        if parties < 1:
            raise ValueError("parties must be at least 1")
        self._parties = parties
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._waiting = 0
        self._generation = 0

    @property
    def parties(self) -> int:
        """Number of threads that must arrive per round."""
        return self._parties

    @property
    def generation(self) -> int:
        """Number of completed rounds."""
        with self._lock:
            return self._generation

    @property
    def waiting(self) -> int:
        """Threads currently blocked in the open round."""
        with self._lock:
            return self._waiting

    def wait(self) -> int:
        """Block until all parties arrived; return the generation that completed."""
        with self._cond:
            generation = self._generation
            self._waiting += 1
            if self._waiting == self._parties:
                self._waiting = 0
                self._generation += 1
                self._cond.notify_all()
            else:
                while self._generation == generation:
                    self._cond.wait()
            return generation


_active: Optional[Barrier] = None


def install_barrier(parties: int) -> Barrier:
    """Create the barrier for the unit running in this process."""
    global _active
    _active = Barrier(parties)
    return _active


def active_barrier() -> Optional[Barrier]:
    """Barrier of the unit running in this process, if any."""
    return _active


def synchronize() -> None:
    """Wait until every worker thread of the current unit reached this call."""
    barrier = _active
    if barrier is None:
        raise BarrierError("synchronize() called outside of a running test unit")
    barrier.wait()
