"""
Pytest configuration and fixtures for framework unit tests.
Resets process-wide harness state so tests do not leak into each other.
"""

import logging
from typing import Any, Generator

import pytest


@pytest.fixture(autouse=True)
def reset_color_flag() -> Generator[None, None, None]:
    """Color output is a process-wide flag; start every test without it."""
    from frost.reporting import reporter

    reporter.set_color_enabled(False)
    yield
    reporter.set_color_enabled(False)


@pytest.fixture(autouse=True)
def reset_barrier() -> Generator[None, None, None]:
    """Forget any barrier installed by a test."""
    yield
    import frost.core.barrier as barrier

    barrier._active = None


@pytest.fixture(autouse=True)
def reset_trace() -> Generator[None, None, None]:
    """Clear the calling thread's error trace."""
    from frost.core import trace

    trace.clear()
    yield
    trace.clear()


@pytest.fixture
def isolated_log_manager() -> Generator[Any, None, None]:
    """Provide an isolated LogManager for testing."""
    from frost.core.log import LogManager

    manager = LogManager(namespace="frost_test")
    yield manager

    manager.shutdown()


@pytest.fixture
def no_actual_kill() -> Generator[Any, None, None]:
    """Prevent signals from reaching real processes."""
    from unittest.mock import patch

    with patch("os.killpg") as mock_killpg, patch("os.kill") as mock_kill:
        yield {"killpg": mock_killpg, "kill": mock_kill}


def pytest_sessionfinish(session: Any, exitstatus: int) -> None:
    """Called after whole test run finished."""
    logging.shutdown()
