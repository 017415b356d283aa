"""JSON and console formatters for harness logs, plus the unit log context.

Records emitted while a unit is bound (``unit_context``) carry the unit name
and the pid of its process under a ``context`` key in the JSON log, so the
parent's and the child's records for one unit can be joined.
"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.theme import Theme


class UnitLogContext:
    """Thread-local fields describing the unit a thread is working on."""

    def __init__(self) -> None:
        self._local = threading.local()

    def fields(self) -> Dict[str, Any]:
        return dict(getattr(self._local, "fields", {}))

    @contextmanager
    def bound(self, **fields: Any) -> Iterator[None]:
        """Add fields for the duration of the block; nested blocks stack."""
        previous = getattr(self._local, "fields", {})
        self._local.fields = {**previous, **fields}
        try:
            yield
        finally:
            self._local.fields = previous


unit_context = UnitLogContext()

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_EVENT_STYLES = {
    "process": "frost.process",
    "test": "frost.test",
    "session": "frost.session",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, pid, message, extras."""

    def __init__(self, include_context: bool = True) -> None:
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        if extra:
            entry["fields"] = extra

        context = unit_context.fields() if self.include_context else {}
        if context:
            entry["context"] = context
        return json.dumps(entry, default=str)


class FrostRichHandler(RichHandler):
    """Rich console handler on stderr that colors records by event type."""

    THEME = Theme(
        {
            "logging.level.debug": "dim cyan",
            "logging.level.info": "dim blue",
            "frost.process": "bright_blue",
            "frost.test": "bright_magenta",
            "frost.session": "bright_green",
        }
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(console=Console(theme=self.THEME, stderr=True), **kwargs)

    def render_message(self, record: logging.LogRecord, message: str) -> Text:
        text = Text(message)
        style = _EVENT_STYLES.get(getattr(record, "event_type", None))
        if style:
            text.stylize(style)
        return text
