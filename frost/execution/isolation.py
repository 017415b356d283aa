"""Child side of process isolation: runs one unit inside its own process."""

import os
import threading
import traceback
from typing import List, Optional, Tuple

from ..core.barrier import install_barrier
from ..core.context import bind_thread
from ..core.errors import ConfigurationError
from ..core.log import get_logger, log_context, log_test_event
from ..core.process import suspend_self
from ..core.types import EXIT_ASSERTION_FAILURE, Suite, Test
from ..reporting.reporter import INDENT
from ..test_management.registry import (
    AFTER_EACH_ID,
    BEFORE_EACH_ID,
    Registry,
    dispatch_unit,
)
from ..utils.output import OutputStream, get_output

logger = get_logger(__name__)


def _abort(output: OutputStream, lines: List[str]) -> None:
    """Print lines under the output lock and end the process with the failure status."""
    with output.locked():
        for line in lines:
            output.write(line, flush=False)
        output.flush()
    os._exit(EXIT_ASSERTION_FAILURE)


def _report_exception(output: OutputStream, exc: BaseException) -> None:
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    _abort(output, [INDENT + line.replace("\n", "\n" + INDENT).rstrip(" ") for line in lines])


def _exit_from_thread(output: OutputStream, exc: SystemExit) -> None:
    """End the whole process for sys.exit() in a worker thread, as on the main thread."""
    code = exc.code
    if code is None or code == 0:
        return
    with output.locked():
        if not isinstance(code, int):
            output.line(str(code), flush=False)
        output.flush()
    os._exit(code if isinstance(code, int) else 1)


def _excepthook(output: OutputStream):
    def hook(args: "threading.ExceptHookArgs") -> None:
        if isinstance(args.exc_value, SystemExit):
            _exit_from_thread(output, args.exc_value)
            return
        _report_exception(output, args.exc_value)

    return hook


def resolve_unit(registry: Registry, suite_name: str, test_id: int) -> Tuple[Suite, Test]:
    """Look up the unit a parent process asked this process to run."""
    suite = registry.find_suite(suite_name)
    if suite is None:
        raise ConfigurationError(f"Unknown suite '{suite_name}'")
    test = suite.find_test(test_id)
    if test is None:
        raise ConfigurationError(f"Unknown test id {test_id} in suite '{suite_name}'")
    return suite, test


def _run_workers(suite: Suite, test: Test, output: OutputStream) -> None:
    def worker(index: int) -> None:
        bind_thread(index)
        dispatch_unit(suite, test.id)

    threads = []
    for index in range(test.threads):
        thread = threading.Thread(
            target=worker, args=(index,), name=f"frost-worker-{index}", daemon=True
        )
        try:
            thread.start()
        except RuntimeError as e:
            _abort(output, [f"{INDENT}Failed to create thread ({e}).\n"])
        threads.append(thread)
    for thread in threads:
        thread.join()


def run_unit(
    registry: Registry,
    suite_name: str,
    test_id: int,
    suspend: bool = False,
    output: Optional[OutputStream] = None,
) -> int:
    """Run before-each, the test body on its worker threads, then after-each.

    Returns 0 once everything completed. A failed assertion or an uncaught
    exception in any thread ends the process with status 255 instead.
    """
    output = output or get_output()
    suite, test = resolve_unit(registry, suite_name, test_id)

    if suspend:
        suspend_self()

    name = f"{suite.name}:{test.name}"
    with log_context(unit=name, pid=os.getpid()):
        log_test_event(logger, "unit.begin", test_name=name, threads=test.threads)
        previous_hook = threading.excepthook
        threading.excepthook = _excepthook(output)
        try:
            dispatch_unit(suite, BEFORE_EACH_ID)
            install_barrier(test.threads)
            if test.threads == 1:
                bind_thread(0)
                dispatch_unit(suite, test.id)
            else:
                _run_workers(suite, test, output)
            dispatch_unit(suite, AFTER_EACH_ID)
        except Exception as e:
            _report_exception(output, e)
        finally:
            threading.excepthook = previous_hook

        output.flush()
        log_test_event(logger, "unit.end", test_name=name)
    return 0
