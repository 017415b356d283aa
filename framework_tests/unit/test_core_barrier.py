"""Tests for the reusable thread barrier."""

import random
import threading
import time

import pytest

from frost.core import barrier as barrier_module
from frost.core.barrier import Barrier, active_barrier, install_barrier, synchronize
from frost.core.errors import BarrierError


def _run_threads(count, target):
    threads = [threading.Thread(target=target, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
        assert not thread.is_alive(), "barrier deadlocked"


class TestBarrier:
    """Test Barrier rendezvous semantics."""

    def test_rejects_zero_parties(self) -> None:
        with pytest.raises(ValueError):
            Barrier(0)

    def test_single_party_never_blocks(self) -> None:
        barrier = Barrier(1)
        assert barrier.wait() == 0
        assert barrier.wait() == 1
        assert barrier.generation == 2

    def test_four_threads_two_rounds_never_release_early(self) -> None:
        """No thread passes a round before all four arrived at it."""
        parties = 4
        barrier = Barrier(parties)
        arrived = [0, 0]
        lock = threading.Lock()
        violations = []

        def worker(index):
            for round_index in range(2):
                with lock:
                    arrived[round_index] += 1
                barrier.wait()
                with lock:
                    if arrived[round_index] != parties:
                        violations.append((index, round_index, arrived[round_index]))

        _run_threads(parties, worker)

        assert violations == []
        assert barrier.generation == 2
        assert barrier.waiting == 0

    def test_repeated_rounds_with_random_delays(self) -> None:
        """Fast re-entry into the next round cannot overtake slow waiters."""
        parties = 5
        rounds = 20
        barrier = Barrier(parties)
        counters = [0] * rounds
        lock = threading.Lock()
        violations = []

        def worker(index):
            rng = random.Random(index)
            for round_index in range(rounds):
                time.sleep(rng.random() / 1000)
                with lock:
                    counters[round_index] += 1
                generation = barrier.wait()
                if generation != round_index:
                    violations.append((index, round_index, generation))
                with lock:
                    if counters[round_index] != parties:
                        violations.append((index, round_index, counters[round_index]))

        _run_threads(parties, worker)

        assert violations == []
        assert barrier.generation == rounds


class TestSynchronize:
    """Test the process-wide barrier entry point."""

    def test_synchronize_without_barrier_raises(self) -> None:
        barrier_module._active = None
        with pytest.raises(BarrierError):
            synchronize()

    def test_install_barrier_replaces_active(self) -> None:
        first = install_barrier(2)
        second = install_barrier(1)
        assert active_barrier() is second
        assert first is not second
        synchronize()
        assert second.generation == 1
