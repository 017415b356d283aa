"""Core type definitions for the Frost harness."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Tuple, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import UnitState

if TYPE_CHECKING:
    from ..test_management.registry import SuiteContext

DEFAULT_TIMEOUT = 2.0
DEFAULT_POLL_INTERVAL = 0.005

# Exit status a unit process uses to report a failed assertion. A test body
# that exits with 255 on purpose is indistinguishable from a failed assertion.
EXIT_ASSERTION_FAILURE = 255

Dispatch = Callable[["SuiteContext"], None]


@dataclass(frozen=True)
class Test:
    """A registered test: name, dispatch id, worker thread count and timeout."""

    name: str
    id: int
    threads: int = 1
    timeout: float = DEFAULT_TIMEOUT

    # Keep pytest from collecting this class when imported into test modules
    __test__ = False


@dataclass(frozen=True)
class Suite:
    """A named, ordered collection of tests sharing one dispatch callback."""

    name: str
    tests: Tuple[Test, ...]
    dispatch: Dispatch = field(compare=False, repr=False)

    def find_test(self, test_id: int) -> Optional[Test]:
        """Look up a test by its dispatch id."""
        for test in self.tests:
            if test.id == test_id:
                return test
        return None


@dataclass
class Unit:
    """One execution attempt of a test."""

    suite: Suite
    test: Test
    start_time: float = field(default_factory=time.monotonic)

    @property
    def name(self) -> str:
        """Qualified unit name as accepted by the selector."""
        return f"{self.suite.name}:{self.test.name}"

    def elapsed(self) -> float:
        """Seconds since the unit was created."""
        return time.monotonic() - self.start_time


@dataclass
class UnitResult:
    """Outcome of one unit execution."""

    state: UnitState
    duration: float
    returncode: Optional[int] = None
    signal: Optional[int] = None
    message: Optional[str] = None

    @property
    def passed(self) -> bool:
        """Whether the unit passed."""
        return self.state.is_success


class RunOptions(BaseModel):
    """Options resolved once before the run and immutable during it."""

    color: bool = False
    rerun: bool = False
    timeout: bool = True
    list_mode: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class FrostConfig(BaseModel):
    """Harness configuration loaded from file, environment and CLI."""

    poll_interval: float = Field(
        DEFAULT_POLL_INTERVAL, description="Seconds between child status polls"
    )
    log_level: str = Field("WARNING", description="Harness logging level")
    log_file: Optional[Path] = Field(None, description="JSON log file path")
    config_file: Optional[Path] = Field(None, description="YAML configuration file")

    model_config = ConfigDict(extra="ignore")

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v):
        """Poll interval must be positive and short."""
        if v <= 0 or v > 1.0:
            raise ValueError("poll_interval must be in (0, 1] seconds")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is supported."""
        if str(v).upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )
        return str(v).upper()
