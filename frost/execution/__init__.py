"""Unit execution: process isolation, debug attach and the run loop."""

from .debugger import DebugController
from .executor import UnitExecutor
from .isolation import run_unit
from .session import SessionResult, TestSession

__all__ = [
    "DebugController",
    "UnitExecutor",
    "run_unit",
    "SessionResult",
    "TestSession",
]
