"""Core enumerations for the Frost harness.

Separated from types.py so modules that only need the enums do not pull in
pydantic models.
"""

from enum import Enum


class UnitState(Enum):
    """Lifecycle of one unit execution."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    WAIT_ERROR = "wait_error"

    @property
    def is_terminal(self) -> bool:
        """Whether the state ends the unit."""
        return self not in (UnitState.NOT_STARTED, UnitState.RUNNING)

    @property
    def is_success(self) -> bool:
        """Whether the state counts as a passed unit."""
        return self is UnitState.PASSED


class RunMode(Enum):
    """Action selected on the command line."""

    VERSION = "version"
    LIST = "list"
    DEBUG = "debug"
    UNIT = "unit"
    RUN = "run"
