"""Tests for error hierarchy and exception handling."""

import pytest

from frost.core.errors import (
    FrostError,
    ConfigurationError,
    PatternError,
    NoMatchingTestError,
    RegistryError,
    ProcessError,
    ProcessStartupError,
    ProcessWaitError,
    UnsupportedPlatformError,
    BarrierError,
)


class TestBaseError:
    """Test base FrostError class."""

    def test_basic_error_creation(self) -> None:
        """Test basic error creation."""
        error = FrostError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {}

    def test_error_with_details(self) -> None:
        """Test error creation with details."""
        details = {"code": 500, "context": "test"}
        error = FrostError("Test error", details)
        assert error.details == details

    def test_error_inheritance(self) -> None:
        """Test that all custom errors inherit from FrostError."""
        assert issubclass(ConfigurationError, FrostError)
        assert issubclass(ProcessError, FrostError)
        assert issubclass(BarrierError, FrostError)


class TestConfigurationErrors:
    """Test errors that abort the run before any test executes."""

    def test_pattern_error_keeps_pattern(self) -> None:
        error = PatternError("Unterminated bracket", "math:[a")
        assert isinstance(error, ConfigurationError)
        assert error.pattern == "math:[a"
        assert error.message == "Unterminated bracket"

    def test_no_matching_test_error(self) -> None:
        error = NoMatchingTestError("Could not find test", "nope")
        assert isinstance(error, ConfigurationError)
        assert error.pattern == "nope"

    def test_registry_error_is_configuration_error(self) -> None:
        assert issubclass(RegistryError, ConfigurationError)


class TestProcessErrors:
    """Test process-related errors."""

    def test_process_error_hierarchy(self) -> None:
        assert issubclass(ProcessStartupError, ProcessError)
        assert issubclass(ProcessWaitError, ProcessError)
        assert issubclass(UnsupportedPlatformError, ProcessError)

    def test_wait_error_attributes(self) -> None:
        error = ProcessWaitError("wait failed", pid=42, errno=10)
        assert error.pid == 42
        assert error.errno == 10

    def test_errors_can_be_raised_and_caught_as_base(self) -> None:
        with pytest.raises(FrostError):
            raise ProcessStartupError("cannot spawn", details={"command": ["x"]})
