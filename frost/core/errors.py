"""Error hierarchy for the Frost test harness."""

from typing import Optional, Dict, Any


class FrostError(Exception):
    """Base exception for all Frost errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration errors abort the whole run before any test executes
class ConfigurationError(FrostError):
    """Error in harness configuration."""


class PatternError(ConfigurationError):
    """Malformed selection pattern."""

    def __init__(self, message: str, pattern: str,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.pattern = pattern


class NoMatchingTestError(ConfigurationError):
    """No registered test matches a pattern that must resolve to one."""

    def __init__(self, message: str, pattern: str,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.pattern = pattern


class RegistryError(ConfigurationError):
    """Invalid suite or test registration."""


# Process errors
class ProcessError(FrostError):
    """Base class for process-related errors."""


class ProcessStartupError(ProcessError):
    """Unit process could not be created."""


class ProcessWaitError(ProcessError):
    """Waiting for a unit process failed."""

    def __init__(self, message: str, pid: int, errno: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.pid = pid
        self.errno = errno


class UnsupportedPlatformError(ProcessError):
    """Operation needs a POSIX process facility the platform lacks."""


# Thread synchronization errors
class BarrierError(FrostError):
    """Barrier used outside of a unit process."""
