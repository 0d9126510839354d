"""Bridge from the stdlib ``logging`` machinery into a HookSet."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any

from loghooks.core.types import Level, LogEntry
from loghooks.hooks.dispatcher import HookSet

# Attributes every stdlib LogRecord carries; anything else came from ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime"}

# Keys structlog adds to the event dict that are not user fields.
_STRUCTLOG_META = frozenset(
    {"event", "level", "timestamp", "logger", "_record", "_from_structlog"}
)


def entry_from_record(record: logging.LogRecord) -> LogEntry:
    """Convert a stdlib record (plain or structlog-wrapped) to a LogEntry."""
    fields: dict[str, Any]
    stack: str | None = record.stack_info
    if isinstance(record.msg, dict):
        # structlog's ProcessorFormatter.wrap_for_formatter passes the event dict.
        event_dict = record.msg
        message = str(event_dict.get("event", ""))
        fields = {
            str(k): v for k, v in event_dict.items() if k not in _STRUCTLOG_META
        }
        # Already rendered by format_exc_info / StackInfoRenderer.
        exception = fields.pop("exception", None)
        rendered_stack = fields.pop("stack", None)
        stack = exception or rendered_stack or stack
    else:
        message = record.getMessage()
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}

    if record.exc_info and record.exc_info[0] is not None:
        stack = logging.Formatter().formatException(record.exc_info)

    return LogEntry(
        level=Level.from_stdlib(record.levelno),
        message=message,
        fields=fields,
        time=datetime.fromtimestamp(record.created).astimezone(),
        stack=stack,
    )


class HookHandler(logging.Handler):
    """Forwards every record it sees to a HookSet.

    Records logged by the hooks themselves (on the same thread, while a
    dispatch is in progress) are not forwarded again.
    """

    def __init__(self, hook_set: HookSet, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.hook_set = hook_set
        self._local = threading.local()

    def handle(self, record: logging.LogRecord) -> bool | logging.LogRecord:
        # No handler-wide lock: each hook serialises its own shared state
        # (the suppression store, the console stream).
        rv = self.filter(record)
        if isinstance(rv, logging.LogRecord):
            record = rv
        if rv:
            self.emit(record)
        return rv

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "dispatching", False):
            return
        self._local.dispatching = True
        try:
            self.hook_set.fire(entry_from_record(record))
        except Exception:
            self.handleError(record)
        finally:
            self._local.dispatching = False
