"""Parent side of process isolation: run a unit in a child process and classify its end."""

import subprocess
import time
from typing import Optional

from ..core.enums import UnitState
from ..core.errors import ProcessWaitError
from ..core.log import get_logger, log_context, log_test_event
from ..core.process import UnitLauncher, describe_signal, poll_process, terminate_process
from ..core.time import Deadline, format_timeout
from ..core.types import DEFAULT_POLL_INTERVAL, EXIT_ASSERTION_FAILURE, Unit, UnitResult
from ..reporting.reporter import Reporter

logger = get_logger(__name__)


class UnitExecutor:
    """Runs one unit at a time in an isolated process under a timeout.

    The child is polled every ``poll_interval`` seconds rather than waited on,
    so that the timeout is checked on every tick. When ``enforce_timeout`` is
    off the unit may run indefinitely.
    """

    def __init__(
        self,
        launcher: UnitLauncher,
        reporter: Reporter,
        enforce_timeout: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.launcher = launcher
        self.reporter = reporter
        self.enforce_timeout = enforce_timeout
        self.poll_interval = poll_interval

    def execute(self, unit: Unit) -> UnitResult:
        """Spawn the unit process, wait for it and return its outcome.

        Raises ProcessStartupError when the process cannot be created.
        """
        process = self.launcher.spawn(unit)
        with log_context(unit=unit.name, pid=process.pid):
            log_test_event(logger, "unit.running", test_name=unit.name)
            return self._wait(unit, process)

    def _wait(self, unit: Unit, process: subprocess.Popen) -> UnitResult:
        deadline = Deadline.after(
            unit.test.timeout if self.enforce_timeout else None, start=unit.start_time
        )

        try:
            while True:
                try:
                    returncode = poll_process(process)
                except ProcessWaitError as e:
                    terminate_process(process)
                    message = f"Waiting for process failed ({e.message})."
                    self.reporter.diagnostic(message)
                    return self._result(unit, UnitState.WAIT_ERROR, message=message)

                if returncode is not None:
                    return self._classify(unit, returncode)

                if deadline.is_expired():
                    terminate_process(process)
                    message = f"Process timed out after {format_timeout(unit.test.timeout)}."
                    self.reporter.diagnostic(message)
                    return self._result(unit, UnitState.TIMED_OUT, message=message)

                time.sleep(self.poll_interval)
        except BaseException:
            # Orchestrator interrupted: never leave the child behind
            terminate_process(process)
            raise

    def _classify(self, unit: Unit, returncode: int) -> UnitResult:
        if returncode == 0:
            return self._result(unit, UnitState.PASSED, returncode=0)
        if returncode < 0:
            signum = -returncode
            message = f"Process terminated by signal {signum} ({describe_signal(signum)})."
            self.reporter.diagnostic(message)
            return self._result(unit, UnitState.FAILED, signal=signum, message=message)
        if returncode == EXIT_ASSERTION_FAILURE:
            # The child already printed its own diagnostic
            return self._result(unit, UnitState.FAILED, returncode=returncode)
        message = f"Process exited with code {returncode}."
        self.reporter.diagnostic(message)
        return self._result(unit, UnitState.FAILED, returncode=returncode, message=message)

    def _result(
        self,
        unit: Unit,
        state: UnitState,
        returncode: Optional[int] = None,
        signal: Optional[int] = None,
        message: Optional[str] = None,
    ) -> UnitResult:
        result = UnitResult(
            state=state,
            duration=unit.elapsed(),
            returncode=returncode,
            signal=signal,
            message=message,
        )
        log_test_event(logger, "unit.finished", test_name=unit.name, state=state.value)
        return result
