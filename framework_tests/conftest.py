"""Test configuration and fixtures for framework tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock, patch

from frost.core.types import FrostConfig, RunOptions, Suite, Test, Unit
from frost.reporting.reporter import Reporter
from frost.test_management.registry import Registry
from frost.utils.output import OutputStream


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="frost_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_config():
    """Provide a fast-polling configuration for testing."""
    return FrostConfig(poll_interval=0.001, log_level="WARNING")


@pytest.fixture
def run_options():
    """Default run options without color."""
    return RunOptions(color=False, rerun=False, timeout=True)


@pytest.fixture
def isolated_environment(temp_dir):
    """Provide an environment without FROST_* or NO_COLOR variables."""
    with patch.dict("os.environ", {}, clear=True):
        yield temp_dir


@pytest.fixture
def output_buffer():
    """OutputStream writing into a StringIO; read back with ``.file.getvalue()``."""
    import io

    return OutputStream(io.StringIO())


@pytest.fixture
def reporter(output_buffer):
    """Reporter writing into the output buffer."""
    return Reporter(output_buffer)


@pytest.fixture
def registry():
    """Fresh registry, independent of the process-wide default one."""
    return Registry()


@pytest.fixture
def sample_unit():
    """A unit of a one-test suite with a 2 second timeout."""
    test = Test(name="adds", id=3, threads=1, timeout=2.0)
    suite = Suite(name="math", tests=(test,), dispatch=lambda t: None)
    return Unit(suite=suite, test=test)


@pytest.fixture
def mock_process():
    """Mock subprocess.Popen for process testing."""
    mock_popen = Mock()
    mock_popen.pid = 12345
    mock_popen.returncode = 0
    mock_popen.poll.return_value = None  # Still running
    mock_popen.wait.return_value = 0
    return mock_popen


@pytest.fixture
def mock_launcher(mock_process):
    """Launcher whose spawn() returns the mock process."""
    launcher = Mock()
    launcher.spawn.return_value = mock_process
    return launcher
