"""Assertion helpers for test bodies.

A failed assertion prints its diagnostic and the source location under the
output lock, then ends the unit process immediately with status 255. Nothing
is unwound: after-each hooks and the remaining worker threads do not run.
"""

import os
from typing import Any, NoReturn

from ..core import trace
from ..core.context import current_context, update_location
from ..core.types import EXIT_ASSERTION_FAILURE
from ..reporting.reporter import INDENT
from ..utils.output import get_output


def _explained(text: str, explanation: str) -> str:
    return f"{text}: {explanation}" if explanation else text


def _fail(*lines: str) -> NoReturn:
    output = get_output()
    with output.locked():
        for line in lines:
            output.line(f"{INDENT}{line}", flush=False)
        output.line(f"{INDENT}in {current_context().location}")
    os._exit(EXIT_ASSERTION_FAILURE)


def fail(message: str) -> NoReturn:
    """Fail the test unconditionally."""
    update_location()
    _fail(f"{message}.")


def assert_true(value: Any, explanation: str = "") -> None:
    """Fail unless ``value`` is truthy."""
    update_location()
    if not value:
        _fail(_explained(f"Assertion failed: {value!r}", explanation) + ".")


def assert_equal(actual: Any, expected: Any, explanation: str = "") -> None:
    """Fail unless ``actual == expected``."""
    update_location()
    if not actual == expected:
        _fail(
            _explained(
                f"({type(expected).__name__}) Expected {expected!r}, but got {actual!r}",
                explanation,
            )
            + "."
        )


def assert_not_equal(actual: Any, unexpected: Any, explanation: str = "") -> None:
    """Fail if ``actual == unexpected``."""
    update_location()
    if actual == unexpected:
        _fail(
            _explained(
                f"({type(unexpected).__name__}) Expected {actual!r} to not equal {unexpected!r}",
                explanation,
            )
            + "."
        )


def assert_success(result: int, explanation: str = "") -> None:
    """Fail unless ``result`` is ``trace.SUCCESS``; prints the thread's error trace."""
    if result == trace.SUCCESS:
        return
    update_location()
    lines = [_explained(f"(result) Expected success, but got {trace.get_code()}", explanation) + "."]
    for index in range(trace.trace_length()):
        frame = trace.trace_nth(index)
        lines.append(f"at {frame.location}: {frame.message}")
    _fail(*lines)


def assert_failure(result: int, code: int, explanation: str = "") -> None:
    """Fail unless ``result`` is ``trace.FAILURE`` and the current error code is ``code``."""
    update_location()
    if result != trace.FAILURE:
        _fail(_explained(f"(result) Expected failure, but got {result}", explanation) + ".")
    if trace.get_code() != code:
        _fail(
            _explained(
                f"(result) Expected error code {code}, but got {trace.get_code()}", explanation
            )
            + "."
        )
