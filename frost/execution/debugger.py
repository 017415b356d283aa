"""Debug-attach controller.

The unit process is started suspended so that a debugger can attach to it by
pid before any test code runs. Once the debugger resumes it and the process
ends, the test is started again, until the user presses ctrl-c.
"""

import signal
import subprocess
import threading
import time

from ..core.errors import ProcessWaitError
from ..core.log import get_logger, log_context, log_test_event
from ..core.process import UnitLauncher, poll_process, terminate_process
from ..core.types import DEFAULT_POLL_INTERVAL, Unit
from ..reporting.reporter import Reporter

logger = get_logger(__name__)


class DebugController:
    """Runs a unit suspended for an external debugger and restarts it on exit."""

    def __init__(
        self,
        launcher: UnitLauncher,
        reporter: Reporter,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.launcher = launcher
        self.reporter = reporter
        self.poll_interval = poll_interval
        self._abort = threading.Event()

    def request_abort(self) -> None:
        """Ask the current wait to stop; safe to call from a signal handler."""
        self._abort.set()

    @property
    def abort_requested(self) -> bool:
        return self._abort.is_set()

    def _handle_sigint(self, signum, _frame) -> None:
        self.request_abort()

    def run(self, unit: Unit) -> bool:
        """One debug cycle; return True when the user aborted waiting.

        Returns False when the process exited (or waiting for it failed), in
        which case the caller starts the next cycle.
        """
        self._abort.clear()
        process = self.launcher.spawn(unit, suspend=True)
        with log_context(unit=unit.name, pid=process.pid):
            log_test_event(logger, "unit.debug", test_name=unit.name)
            return self._wait(process)

    def _wait(self, process: subprocess.Popen) -> bool:
        # Signal handlers can only be installed from the main thread
        installed = threading.current_thread() is threading.main_thread()
        previous = signal.signal(signal.SIGINT, self._handle_sigint) if installed else None
        try:
            self.reporter.notice(
                f"Waiting for debugger to attach, press ctrl-c to abort... (pid {process.pid})"
            )
            while True:
                try:
                    returncode = poll_process(process)
                except ProcessWaitError as e:
                    self.reporter.notice(f"Waiting for debug process failed ({e.message}).")
                    terminate_process(process)
                    return False

                if returncode is not None:
                    self.reporter.notice("Test process exited. Restarting test.")
                    return False

                if self.abort_requested:
                    terminate_process(process)
                    self.reporter.notice("Waiting aborted by user.", carriage_return=True)
                    return True

                time.sleep(self.poll_interval)
        except BaseException:
            terminate_process(process)
            raise
        finally:
            if installed:
                signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)

    def debug_loop(self, unit: Unit) -> None:
        """Repeat debug cycles for a unit until the user aborts."""
        while True:
            self.reporter.unit_debug(unit)
            if self.run(unit):
                break
