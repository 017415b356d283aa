"""Actions behind the command line modes."""

import os
from typing import List, Optional, Sequence

from ..core.enums import RunMode
from ..core.errors import ConfigurationError
from ..core.log import get_logger
from ..core.process import UnitLauncher, parse_unit_selector, program_command
from ..core.types import FrostConfig, RunOptions, Unit
from ..execution.debugger import DebugController
from ..execution.executor import UnitExecutor
from ..execution.isolation import run_unit
from ..execution.session import TestSession
from ..reporting.reporter import Reporter, set_color_enabled
from ..test_management.registry import Registry
from ..test_management.selector import Selector
from ..utils.output import OutputStream, get_output, write_stdout

logger = get_logger(__name__)


def resolve_mode(
    version: bool = False,
    list_tests: bool = False,
    debug: Optional[str] = None,
    unit: Optional[str] = None,
) -> RunMode:
    """Pick the action; version wins over list, list over debug, debug over unit."""
    if version:
        return RunMode.VERSION
    if list_tests:
        return RunMode.LIST
    if debug is not None:
        return RunMode.DEBUG
    if unit is not None:
        return RunMode.UNIT
    return RunMode.RUN


def default_color(output: Optional[OutputStream] = None) -> bool:
    """Color when the report stream is a terminal and NO_COLOR is not set."""
    output = output or get_output()
    return output.isatty() and os.environ.get("NO_COLOR") is None


def build_options(
    color: Optional[bool] = None,
    rerun: Optional[bool] = None,
    timeout: Optional[bool] = None,
    list_tests: bool = False,
    output: Optional[OutputStream] = None,
) -> RunOptions:
    """Fill in defaults for flags the user did not give."""
    return RunOptions(
        color=default_color(output) if color is None else color,
        rerun=bool(rerun),
        timeout=True if timeout is None else timeout,
        list_mode=list_tests,
    )


def make_launcher(
    options: RunOptions, config: FrostConfig, command: Optional[Sequence[str]] = None
) -> UnitLauncher:
    """Launcher that re-invokes this program for single units."""
    extra_args: List[str] = []
    if config.config_file is not None:
        extra_args += ["--config-file", str(config.config_file)]
    return UnitLauncher(
        command=list(command) if command is not None else program_command(),
        color=options.color,
        log_level=config.log_level,
        extra_args=extra_args,
    )


def show_version() -> int:
    from .. import __version__

    write_stdout(f"Frost {__version__}\n")
    return 0


def list_suites(registry: Registry, reporter: Reporter) -> int:
    reporter.listing(registry.suites)
    return 0


def debug_test(
    registry: Registry,
    pattern: str,
    launcher: UnitLauncher,
    reporter: Reporter,
    config: FrostConfig,
) -> int:
    """Run the first test matching ``pattern`` suspended, until the user aborts."""
    suite, test = Selector.find_unit(registry, pattern)
    controller = DebugController(launcher, reporter, poll_interval=config.poll_interval)
    controller.debug_loop(Unit(suite=suite, test=test))
    return 0


def execute_unit(registry: Registry, selector: str, suspend: bool = False) -> int:
    """Child side: run the unit named by ``suite:id`` in this process."""
    try:
        suite_name, test_id = parse_unit_selector(selector)
    except ValueError as e:
        raise ConfigurationError(f"Invalid unit '{selector}'") from e
    return run_unit(registry, suite_name, test_id, suspend=suspend)


def run_tests(
    registry: Registry,
    patterns: Sequence[str],
    options: RunOptions,
    launcher: UnitLauncher,
    reporter: Reporter,
    config: FrostConfig,
) -> int:
    """Run every selected test; 0 when all of them passed."""
    selector = Selector(patterns)
    executor = UnitExecutor(
        launcher,
        reporter,
        enforce_timeout=options.timeout,
        poll_interval=config.poll_interval,
    )
    debugger = DebugController(launcher, reporter, poll_interval=config.poll_interval)
    session = TestSession(registry, selector, executor, reporter, options, debugger=debugger)
    return session.run().exit_code


def apply_color(options: RunOptions) -> None:
    set_color_enabled(options.color)
    logger.debug("Resolved run options: %s", options)
