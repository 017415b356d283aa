"""Sequential run loop over the selected units."""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.log import get_logger, log_event
from ..core.types import RunOptions, Unit, UnitResult
from ..reporting.reporter import Reporter
from ..test_management.registry import Registry
from ..test_management.selector import Selector
from .debugger import DebugController
from .executor import UnitExecutor

logger = get_logger(__name__)


@dataclass
class SessionResult:
    """Counts and per-unit outcomes of one session."""

    test_count: int = 0
    success_count: int = 0
    results: List[UnitResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """0 when every selected test passed (also when none was selected), else 1."""
        return 0 if self.success_count == self.test_count else 1


class TestSession:
    """Runs every enabled unit one at a time and reports as it goes."""

    __test__ = False

    def __init__(
        self,
        registry: Registry,
        selector: Selector,
        executor: UnitExecutor,
        reporter: Reporter,
        options: RunOptions,
        debugger: Optional[DebugController] = None,
    ) -> None:
        self.registry = registry
        self.selector = selector
        self.executor = executor
        self.reporter = reporter
        self.options = options
        self.debugger = debugger

    def run(self) -> SessionResult:
        start = time.monotonic()
        session = SessionResult()
        log_event(logger, "session", "Session started", suites=len(self.registry))

        for suite in self.registry.suites:
            if not self.selector.is_suite_enabled(suite):
                continue
            self.reporter.suite_begin(suite)

            suite_tests = 0
            suite_successes = 0
            for test in suite.tests:
                if not self.selector.is_unit_enabled(suite, test):
                    continue
                unit = Unit(suite=suite, test=test)
                self.reporter.unit_begin(unit)
                result = self.executor.execute(unit)
                if not result.passed and self.options.rerun and self.debugger is not None:
                    self.debugger.debug_loop(unit)
                self.reporter.unit_end(unit, result)

                session.results.append(result)
                suite_tests += 1
                suite_successes += 1 if result.passed else 0

            self.reporter.suite_end(suite, suite_tests, suite_successes)
            session.test_count += suite_tests
            session.success_count += suite_successes

        self.reporter.summary(time.monotonic() - start, session.test_count, session.success_count)
        log_event(
            logger,
            "session",
            "Session finished",
            tests=session.test_count,
            passed=session.success_count,
        )
        return session
