"""Fixtures for running real Frost test programs in subprocesses."""

import os
import subprocess
import sys
import textwrap
from pathlib import Path
from typing import Callable, Generator

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


def _program_env() -> dict:
    """Environment that makes the frost package importable without installation."""
    env = dict(os.environ)
    env.pop("NO_COLOR", None)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    return env


@pytest.fixture
def program_env() -> dict:
    return _program_env()


@pytest.fixture
def write_program(temp_dir) -> Callable[[str], Path]:
    """Write a test program whose suites are given as source text."""

    def write(source: str, name: str = "program.py") -> Path:
        path = temp_dir / name
        body = textwrap.dedent(source)
        path.write_text(
            "import os\nimport signal\nimport sys\nimport time\n\nimport frost\n\n"
            + body
            + "\n\nif __name__ == '__main__':\n    frost.main()\n"
        )
        return path

    return write


@pytest.fixture
def run_program() -> Callable[..., subprocess.CompletedProcess]:
    """Run a test program with arguments and capture its output."""

    def run(path: Path, *args: str, timeout: float = 60, env=None) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, str(path), *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env or _program_env(),
        )

    return run


@pytest.fixture
def spawned() -> Generator[list, None, None]:
    """Collect Popen objects and make sure none outlives the test."""
    processes: list = []
    yield processes
    for process in processes:
        if process.poll() is None:
            process.kill()
            process.wait()
