"""Command line entry point of a Frost test program."""

import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

import click
import typer

from ..core.config import load_config
from ..core.enums import RunMode
from ..core.errors import FrostError
from ..core.log import configure_logging, get_logger
from ..reporting.reporter import Reporter
from ..test_management.registry import Registry, get_registry
from ..utils.output import get_output
from . import actions

app = typer.Typer(
    name="frost",
    help="Run the tests registered in this program, each in its own process.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
logger = get_logger(__name__)


@app.command()
def run(
    ctx: typer.Context,
    patterns: Optional[List[str]] = typer.Argument(
        None,
        metavar="[PATTERNS]...",
        help="Run only tests matching suite or suite:glob",
        show_default=False,
    ),
    version: bool = typer.Option(False, "--version", "-v", help="Print version and exit"),
    list_tests: bool = typer.Option(
        False, "--list", "-l", help="Print a list of all available tests"
    ),
    debug: Optional[str] = typer.Option(
        None,
        "--debug",
        metavar="PATTERN",
        help="Run one test and wait for a debugger to attach to the test",
    ),
    color: Optional[bool] = typer.Option(
        None,
        "--color/--no-color",
        "-c",
        help="Enable colored output [default: when stderr is a terminal and NO_COLOR is unset]",
        show_default=False,
    ),
    rerun: Optional[bool] = typer.Option(
        None,
        "--rerun/--no-rerun",
        "-r",
        help="Rerun failed tests waiting for a debugger to attach [default: off]",
        show_default=False,
    ),
    timeout: Optional[bool] = typer.Option(
        None,
        "--timeout/--no-timeout",
        "-t",
        help="Enable test timeouts [default: on]",
        show_default=False,
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Harness logging level (DEBUG, INFO, WARNING, ERROR)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config-file", help="YAML configuration file"
    ),
    unit: Optional[str] = typer.Option(None, "--unit", hidden=True),
    suspend: bool = typer.Option(False, "--suspend", hidden=True),
) -> None:
    """Run all tests that match the patterns."""
    obj = ctx.ensure_object(dict)
    registry: Registry = obj.get("registry") or get_registry()

    config = load_config(config_file=config_file, log_level=log_level)
    configure_logging(level=config.log_level, log_file=config.log_file, enable_console=True)

    options = actions.build_options(
        color=color, rerun=rerun, timeout=timeout, list_tests=list_tests
    )
    actions.apply_color(options)
    reporter = Reporter()

    mode = actions.resolve_mode(version, list_tests, debug, unit)
    logger.debug("Selected mode %s", mode.value)

    if mode is RunMode.VERSION:
        code = actions.show_version()
    elif mode is RunMode.LIST:
        code = actions.list_suites(registry, reporter)
    elif mode is RunMode.UNIT:
        code = actions.execute_unit(registry, unit, suspend=suspend)
    else:
        launcher = actions.make_launcher(options, config, obj.get("launcher"))
        if mode is RunMode.DEBUG:
            code = actions.debug_test(registry, debug, launcher, reporter, config)
        else:
            code = actions.run_tests(registry, patterns or [], options, launcher, reporter, config)

    raise typer.Exit(code)


def _fatal(message: str) -> int:
    get_output().line(f"Fatal error: {message.rstrip('.')}.")
    return 1


def main(
    argv: Optional[Sequence[str]] = None,
    registry: Optional[Registry] = None,
    launcher: Optional[Sequence[str]] = None,
    prog_name: Optional[str] = None,
) -> int:
    """Parse ``argv`` (default: ``sys.argv[1:]``) and run; return the exit status.

    ``registry`` defaults to the one filled by ``frost.describe``;
    ``launcher`` overrides the command used to start unit processes.
    """
    registry = registry or get_registry()
    registry.freeze()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        code = app(
            args=args,
            prog_name=prog_name or Path(sys.argv[0]).name,
            standalone_mode=False,
            obj={"registry": registry, "launcher": launcher},
        )
    except click.ClickException as e:
        return _fatal(e.format_message())
    except FrostError as e:
        logger.debug("Fatal error: %s", e.message, exc_info=True)
        return _fatal(e.message)
    except (KeyboardInterrupt, click.exceptions.Abort):
        get_output().line()
        return 130
    return code if isinstance(code, int) else 0


def cli_main(
    argv: Optional[Sequence[str]] = None,
    registry: Optional[Registry] = None,
    launcher: Optional[Sequence[str]] = None,
) -> NoReturn:
    """Entry point for test programs: run and exit with the resulting status."""
    sys.exit(main(argv, registry=registry, launcher=launcher))
