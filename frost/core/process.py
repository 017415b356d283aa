"""Unit process creation, non-blocking status polling and forced termination."""

import os
import signal
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import psutil

from .errors import ProcessStartupError, ProcessWaitError, UnsupportedPlatformError
from .log import get_logger, log_process_event
from .types import Unit

logger = get_logger(__name__)

UNIT_OPTION = "--unit"
SUSPEND_OPTION = "--suspend"


def program_command(
    argv: Optional[Sequence[str]] = None, orig_argv: Optional[Sequence[str]] = None
) -> List[str]:
    """Command that re-launches the running test program without its arguments.

    ``sys.orig_argv`` holds the interpreter, its options and the script (or
    ``-m module`` / ``-c code``) followed by the user arguments that also end
    ``sys.argv``; dropping those arguments yields the launch prefix.
    """
    argv = list(sys.argv if argv is None else argv)
    if orig_argv is None:
        orig_argv = getattr(sys, "orig_argv", None) or []
    orig = list(orig_argv)
    user_args = max(len(argv) - 1, 0)

    if len(orig) > user_args:
        prefix = orig[: len(orig) - user_args]
        prefix[0] = sys.executable or prefix[0]
        return prefix

    script = argv[0] if argv else ""
    if script and Path(script).exists():
        return [sys.executable, script]
    raise ProcessStartupError(
        "Cannot determine how to re-launch the test program",
        details={"argv": argv, "orig_argv": orig},
    )


def unit_selector(unit: Unit) -> str:
    """Value of the internal ``--unit`` argument for a unit."""
    return f"{unit.suite.name}:{unit.test.id}"


def parse_unit_selector(value: str) -> Tuple[str, int]:
    """Split a ``--unit`` value into suite name and test id."""
    suite_name, sep, test_id = value.rpartition(":")
    if not sep or not suite_name:
        raise ValueError(f"invalid unit selector: {value}")
    return suite_name, int(test_id)


@dataclass
class UnitLauncher:
    """Starts isolated unit processes by re-invoking the test program."""

    command: List[str]
    color: bool = False
    log_level: str = "WARNING"
    extra_args: List[str] = field(default_factory=list)

    def build_command(self, unit: Unit, suspend: bool = False) -> List[str]:
        command = [
            *self.command,
            UNIT_OPTION,
            unit_selector(unit),
            "--color" if self.color else "--no-color",
            "--log-level",
            self.log_level,
            *self.extra_args,
        ]
        if suspend:
            command.append(SUSPEND_OPTION)
        return command

    def spawn(self, unit: Unit, suspend: bool = False) -> subprocess.Popen:
        """Start the unit process; it inherits stdout and stderr."""
        command = self.build_command(unit, suspend=suspend)
        log_process_event(logger, "unit.spawn", unit=unit.name, command=command)
        try:
            process = subprocess.Popen(
                command,
                start_new_session=os.name != "nt",
            )
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            raise ProcessStartupError(
                f"Failed to start process for {unit.name}: {e}",
                details={"command": command},
            ) from e
        log_process_event(logger, "unit.started", pid=process.pid, unit=unit.name)
        return process


def poll_process(process: subprocess.Popen) -> Optional[int]:
    """Non-blocking status check; return the exit status or None while running.

    Interrupted waits are retried; any other wait failure raises
    ProcessWaitError.
    """
    while True:
        try:
            return process.poll()
        except InterruptedError:
            continue
        except OSError as e:
            raise ProcessWaitError(
                e.strerror or str(e),
                pid=process.pid,
                errno=e.errno,
            ) from e


def describe_signal(signum: int) -> str:
    """Human-readable description of a signal number."""
    try:
        description = signal.strsignal(signum)
    except ValueError:
        description = None
    return description or f"signal {signum}"


def _signal_group(pid: int, signum: int) -> bool:
    if os.name == "nt":
        return False
    try:
        os.killpg(pid, signum)
        return True
    except (OSError, ProcessLookupError) as e:
        logger.debug("Could not send signal %s to process group %s: %s", signum, pid, e)
        return False


def terminate_process(process: subprocess.Popen, reap_timeout: float = 5.0) -> None:
    """Force-terminate a unit process and reap it.

    A stopped process (suspended for a debugger or stopped by a tracer) is
    resumed first, then killed together with everything in its session.
    """
    if process.poll() is not None:
        return
    log_process_event(logger, "unit.kill", pid=process.pid)

    if os.name != "nt":
        if not _signal_group(process.pid, signal.SIGCONT):
            try:
                os.kill(process.pid, signal.SIGCONT)
            except (OSError, ProcessLookupError):
                pass
    if not _signal_group(process.pid, signal.SIGKILL if os.name != "nt" else signal.SIGTERM):
        try:
            process.kill()
        except (OSError, ProcessLookupError):
            pass

    try:
        process.wait(timeout=reap_timeout)
    except subprocess.TimeoutExpired:
        logger.error(
            "Process %s did not die after SIGKILL, killing its process tree", process.pid
        )
        kill_process_tree(process.pid)
        process.wait()
    log_process_event(logger, "unit.reaped", pid=process.pid, returncode=process.returncode)


def kill_process_tree(root_pid: int, timeout: float = 3.0) -> bool:
    """Resume and kill a process and all of its descendants.

    Backup for processes that left their process group.
    """
    try:
        root = psutil.Process(root_pid)
        processes = [root] + root.children(recursive=True)
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return True
    except (psutil.Error, OSError) as e:
        logger.warning("Error collecting process tree of %s: %s", root_pid, e)
        return False

    for proc in processes:
        try:
            proc.resume()
            proc.kill()
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            continue
        except (psutil.Error, OSError) as e:
            logger.debug("Could not kill PID %s: %s", proc.pid, e)

    _, alive = psutil.wait_procs(processes, timeout=timeout)
    if alive:
        logger.warning(
            "Processes still alive after killing tree of %s: %s",
            root_pid,
            [p.pid for p in alive],
        )
    return not alive


def suspend_self() -> None:
    """Stop the calling process until something sends it SIGCONT."""
    if not hasattr(signal, "SIGSTOP"):
        raise UnsupportedPlatformError("Suspending a process needs SIGSTOP (POSIX only)")
    sys.stdout.flush()
    sys.stderr.flush()
    os.kill(os.getpid(), signal.SIGSTOP)
