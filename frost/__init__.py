"""
Frost: process-isolated unit test harness

A test program registers suites of tests and hands control to ``frost.main()``,
which discovers the tests, selects a subset by ``suite[:glob]`` patterns, runs
every test in its own process under a timeout, can suspend a failing test for
a debugger to attach, and reports pass/fail with timing.

    import frost

    @frost.describe()
    def math(t):
        @t.it("adds")
        def _():
            frost.assert_equal(1 + 1, 2)

    if __name__ == "__main__":
        frost.main()
"""

__version__ = "0.1.0"

# Core exports
from .core import trace
from .core.barrier import synchronize
from .core.context import thread_index
from .core.enums import RunMode, UnitState
from .core.errors import FrostError
from .core.types import RunOptions, Suite, Test, UnitResult
from .test_management.registry import Registry, SuiteContext, describe, register
from .testing.assertions import (
    assert_equal,
    assert_failure,
    assert_not_equal,
    assert_success,
    assert_true,
    fail,
)
from .cli.main import cli_main as main

__all__ = [
    "__version__",
    # Registration
    "Registry",
    "SuiteContext",
    "describe",
    "register",
    "main",
    # Test bodies
    "synchronize",
    "thread_index",
    "trace",
    "fail",
    "assert_true",
    "assert_equal",
    "assert_not_equal",
    "assert_success",
    "assert_failure",
    # Types
    "FrostError",
    "RunMode",
    "UnitState",
    "RunOptions",
    "Suite",
    "Test",
    "UnitResult",
]
