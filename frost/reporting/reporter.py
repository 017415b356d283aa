"""Terminal reporter for suite, unit and summary lines."""

from typing import Iterable, Optional

from ..core.log import get_logger
from ..core.time import format_elapsed
from ..core.types import Suite, Unit, UnitResult
from ..utils.output import OutputStream, get_output

logger = get_logger(__name__)

INDENT = "    "


# ANSI color codes for output formatting
class Colors:
    """ANSI color codes for terminal output formatting."""

    GREEN = "\033[32m"
    RED = "\033[31m"
    MAGENTA = "\033[35m"
    YELLOW = "\033[33m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


_color_enabled = False


def set_color_enabled(enabled: bool) -> None:
    """Set the global color flag; resolved once before the run."""
    global _color_enabled
    _color_enabled = enabled


def is_color_enabled() -> bool:
    """Current value of the global color flag."""
    return _color_enabled


def colorize(text: str, *codes: str) -> str:
    """Wrap text in ANSI codes when color output is enabled."""
    if not _color_enabled or not codes:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


class Reporter:
    """Formats execution outcomes; never decides them."""

    def __init__(self, output: Optional[OutputStream] = None) -> None:
        self.output = output or get_output()

    def _status_line(self, mark: str, label: str, color: str, name: str) -> str:
        return (
            colorize(f"{mark} ", Colors.BOLD, color)
            + colorize(f"{label}: ", color)
            + colorize(name, Colors.YELLOW)
        )

    def suite_begin(self, suite: Suite) -> None:
        self.output.line()
        self.output.line(colorize(f"Testing suite {suite.name}", Colors.BOLD) + ":")

    def unit_begin(self, unit: Unit) -> None:
        self.output.line(self._status_line("?", "Testing", Colors.MAGENTA, unit.test.name))

    def unit_debug(self, unit: Unit) -> None:
        self.output.line(self._status_line(">", "Running", Colors.RED, unit.test.name))

    def unit_end(self, unit: Unit, result: UnitResult) -> None:
        if result.passed:
            line = self._status_line("✓", "Success", Colors.GREEN, unit.test.name)
        else:
            line = self._status_line("✕", "Failure", Colors.RED, unit.test.name)
        self.output.line(f"{line} {format_elapsed(unit.elapsed())}")

    def suite_end(self, suite: Suite, test_count: int, success_count: int) -> None:
        self.output.line(
            colorize(
                f"Suite {suite.name}: Passed {success_count}/{test_count} tests.",
                Colors.BOLD,
            )
        )

    def summary(self, elapsed: float, test_count: int, success_count: int) -> None:
        self.output.line()
        self.output.line(
            colorize(f"Total: Passed {success_count}/{test_count} tests.", Colors.BOLD)
            + f" {format_elapsed(elapsed)}"
        )

    def listing(self, suites: Iterable[Suite]) -> int:
        """Print every suite with its test count; return the total."""
        total = 0
        with self.output.locked():
            self.output.line()
            self.output.line(colorize("Test suites:", Colors.BOLD))
            for suite in suites:
                self.output.line(
                    colorize(f"{suite.name}:", Colors.YELLOW) + f" {len(suite.tests)} tests"
                )
                total += len(suite.tests)
            self.output.line()
            self.output.line(colorize(f"Total: {total} tests.", Colors.BOLD))
        return total

    def diagnostic(self, message: str) -> None:
        """Indented reason line printed before a failure summary."""
        logger.debug("diagnostic: %s", message)
        self.output.line(f"{INDENT}{message}")

    def notice(self, message: str, carriage_return: bool = False) -> None:
        """Indented informational line (debug-attach prompts)."""
        prefix = "\r" if carriage_return else ""
        self.output.line(f"{prefix}{INDENT}{message}")
