"""Structured logging system with JSON output and rich terminal formatting."""

import logging
import threading
from typing import Any, ContextManager, Dict, Optional, Union
from pathlib import Path

from .log_formatters import FrostRichHandler, StructuredFormatter, unit_context


class LogManager:
    """Central logging configuration and management.

    Loggers handed out by the manager live under the ``frost`` namespace and
    do not propagate to the root logger, so a test program's own logging
    setup never duplicates harness records.
    """

    def __init__(self, namespace: str = "frost") -> None:
        self._namespace = namespace
        self._configured = False
        self._json_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None
        self._loggers: Dict[str, logging.Logger] = {}
        self._lock = threading.RLock()

    @property
    def is_configured(self) -> bool:
        """Whether configure() has been called."""
        return self._configured

    def configure(
        self,
        level: Union[int, str] = logging.WARNING,
        log_file: Optional[Path] = None,
        enable_json: bool = True,
        enable_console: bool = True,
        console_level: Optional[Union[int, str]] = None,
    ) -> None:
        """Configure logging system.

        Reconfiguration replaces the handlers of every logger created so far.
        """
        with self._lock:
            if self._configured:
                self._clear_configuration()

            if enable_json and log_file:
                log_file = Path(log_file)
                log_file.parent.mkdir(parents=True, exist_ok=True)
                self._json_handler = logging.FileHandler(log_file)
                self._json_handler.setFormatter(StructuredFormatter(include_context=True))
                self._json_handler.setLevel(level)

            if enable_console:
                self._console_handler = FrostRichHandler(
                    show_time=True, show_path=False, markup=False
                )
                self._console_handler.setLevel(console_level or level)

            for logger in self._loggers.values():
                self._attach_handlers(logger)

            self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger instance."""
        with self._lock:
            if name == self._namespace or name.startswith(f"{self._namespace}."):
                full_name = name
            else:
                full_name = f"{self._namespace}.{name}"

            if full_name in self._loggers:
                return self._loggers[full_name]

            logger = logging.getLogger(full_name)
            logger.propagate = False
            logger.setLevel(logging.DEBUG)
            self._attach_handlers(logger)

            self._loggers[full_name] = logger
            return logger

    def shutdown(self) -> None:
        """Shutdown logging system."""
        with self._lock:
            self._clear_configuration()
            self._loggers.clear()

    def _attach_handlers(self, logger: logging.Logger) -> None:
        if not self._json_handler and not self._console_handler:
            # Keep unconfigured loggers silent instead of falling back to
            # logging.lastResort, which would interleave with reporter lines.
            logger.addHandler(logging.NullHandler())
            return
        for handler in logger.handlers[:]:
            if isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)
        if self._json_handler:
            logger.addHandler(self._json_handler)
        if self._console_handler:
            logger.addHandler(self._console_handler)

    def _clear_configuration(self) -> None:
        for handler in (self._json_handler, self._console_handler):
            if handler is None:
                continue
            for logger in self._loggers.values():
                logger.removeHandler(handler)
            try:
                handler.close()
            except (OSError, RuntimeError):
                pass  # Ignore handler close errors
        self._json_handler = None
        self._console_handler = None
        self._configured = False


# Global log manager instance
_log_manager = LogManager()


def configure_logging(**kwargs: Any) -> None:
    """Configure the global logging system."""
    _log_manager.configure(**kwargs)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return _log_manager.get_logger(name)


def log_event(
    logger: logging.Logger, event_type: str, message: str, **kwargs: Any
) -> None:
    """Log a structured event with context."""
    logger.info(message, extra={"event_type": event_type, **kwargs})


def log_process_event(
    logger: logging.Logger, event: str, pid: Optional[int] = None, **kwargs: Any
) -> None:
    """Log a process-related event."""
    extra: Dict[str, Any] = {"event_type": "process", "process_event": event}
    if pid is not None:
        extra["pid"] = pid
    extra.update(kwargs)
    logger.info("Process %s %s", pid, event, extra=extra)


def log_test_event(
    logger: logging.Logger, event: str, test_name: Optional[str] = None, **kwargs: Any
) -> None:
    """Log a test-related event."""
    extra: Dict[str, Any] = {"event_type": "test", "test_event": event}
    if test_name is not None:
        extra["test_name"] = test_name
    extra.update(kwargs)
    logger.info("Test %s %s", test_name, event, extra=extra)


def log_context(**fields: Any) -> ContextManager[None]:
    """Attach fields such as the unit name and pid to JSON records of this thread."""
    return unit_context.bound(**fields)
