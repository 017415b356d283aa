"""Tests for the child side of process isolation.

Process exits are intercepted so that failures can be observed in-process.
"""

import os
import threading

import pytest
from unittest.mock import patch

from frost.core.barrier import active_barrier
from frost.core.context import thread_index
from frost.core.errors import ConfigurationError
from frost.core.log_formatters import unit_context
from frost.execution.isolation import run_unit
from frost.test_management.registry import FIRST_TEST_ID


class ProcessExit(BaseException):
    """Raised in place of os._exit."""

    def __init__(self, code):
        super().__init__(code)
        self.code = code


def _raise_exit(code):
    raise ProcessExit(code)


@pytest.fixture
def no_exit():
    with patch("frost.execution.isolation.os._exit", side_effect=_raise_exit) as mock_exit:
        yield mock_exit


class TestRunUnit:
    """Test hook ordering and worker threads."""

    def test_hooks_wrap_single_threaded_body(self, registry, output_buffer) -> None:
        calls = []

        def suite(t):
            t.before_each(lambda: calls.append("before"))
            t.it("body")(lambda: calls.append(("body", thread_index())))
            t.after_each(lambda: calls.append("after"))

        registry.register("s", suite)

        assert run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer) == 0
        assert calls == ["before", ("body", 0), "after"]

    def test_parallel_body_runs_on_each_thread(self, registry, output_buffer) -> None:
        seen = []
        lock = threading.Lock()

        def body():
            active_barrier().wait()
            with lock:
                seen.append(thread_index())

        registry.register("s", lambda t: t.parallel("p", 4)(body))

        assert run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer) == 0
        assert sorted(seen) == [0, 1, 2, 3]
        assert active_barrier().parties == 4

    def test_unknown_suite_is_fatal(self, registry) -> None:
        with pytest.raises(ConfigurationError):
            run_unit(registry, "missing", FIRST_TEST_ID)

    def test_unknown_test_is_fatal(self, registry) -> None:
        registry.register("s", lambda t: None)
        with pytest.raises(ConfigurationError):
            run_unit(registry, "s", FIRST_TEST_ID)

    def test_uncaught_exception_exits_with_failure_status(self, registry, output_buffer, no_exit) -> None:
        def body():
            raise RuntimeError("boom")

        registry.register("s", lambda t: t.it("raises")(body))

        with pytest.raises(ProcessExit) as exc_info:
            run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer)

        assert exc_info.value.code == 255
        text = output_buffer.file.getvalue()
        assert "RuntimeError: boom" in text
        assert all(line.startswith("    ") for line in text.splitlines() if line)

    def test_thread_start_failure(self, registry, output_buffer, no_exit) -> None:
        registry.register("s", lambda t: t.parallel("p", 2)(lambda: None))

        with patch("frost.execution.isolation.threading.Thread.start",
                   side_effect=RuntimeError("can't start new thread")):
            with pytest.raises(ProcessExit):
                run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer)

        assert output_buffer.file.getvalue() == "    Failed to create thread (can't start new thread).\n"

    def test_suspend_before_running(self, registry, output_buffer) -> None:
        registry.register("s", lambda t: t.it("x")(lambda: None))
        with patch("frost.execution.isolation.suspend_self") as mock_suspend:
            run_unit(registry, "s", FIRST_TEST_ID, suspend=True, output=output_buffer)
        mock_suspend.assert_called_once()


class TestWorkerExit:
    """sys.exit() in a worker thread ends the unit process like on the main thread."""

    def test_nonzero_exit_in_worker_ends_process(self, registry, output_buffer) -> None:
        def body():
            raise SystemExit(3)

        registry.register("s", lambda t: t.parallel("p", 2)(body))

        with patch("frost.execution.isolation.os._exit") as mock_exit:
            run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer)

        mock_exit.assert_called_with(3)

    def test_message_exit_in_worker_prints_and_exits_one(self, registry, output_buffer) -> None:
        def body():
            raise SystemExit("worker gave up")

        registry.register("s", lambda t: t.parallel("p", 2)(body))

        with patch("frost.execution.isolation.os._exit") as mock_exit:
            run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer)

        mock_exit.assert_called_with(1)
        assert "worker gave up\n" in output_buffer.file.getvalue()

    @pytest.mark.parametrize("code", [None, 0])
    def test_clean_exit_in_worker_only_ends_thread(self, registry, output_buffer, code) -> None:
        def body():
            raise SystemExit(code)

        registry.register("s", lambda t: t.parallel("p", 2)(body))

        with patch("frost.execution.isolation.os._exit") as mock_exit:
            assert run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer) == 0

        mock_exit.assert_not_called()
        assert output_buffer.file.getvalue() == ""


class TestLogContext:
    """Test that the child's log records identify the unit and process."""

    def test_records_carry_unit_and_pid(self, registry, output_buffer) -> None:
        registry.register("s", lambda t: t.it("x")(lambda: None))
        seen = []

        with patch(
            "frost.execution.isolation.log_test_event",
            side_effect=lambda *args, **kwargs: seen.append(unit_context.fields()),
        ):
            run_unit(registry, "s", FIRST_TEST_ID, output=output_buffer)

        assert seen == [{"unit": "s:x", "pid": os.getpid()}] * 2
        assert unit_context.fields() == {}
