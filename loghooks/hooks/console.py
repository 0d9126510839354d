"""Console hook — mirrors warn-and-above records to stderr with a stack."""

from __future__ import annotations

import sys
import threading
from typing import Any, TextIO

import structlog

from loghooks.core.types import ALERT_LEVELS, Level, LogEntry
from loghooks.hooks.composer import current_stack
from loghooks.hooks.dispatcher import Hook

_renderer = structlog.processors.LogfmtRenderer(
    key_order=["time", "level", "msg"],
    bool_as_flag=False,
)


def _clean_key(key: str) -> str:
    # logfmt keys may not contain spaces, control characters, '=' or quotes.
    return "".join("_" if c <= " " or c in '="' else c for c in key) or "_"


def format_entry(entry: LogEntry) -> str:
    """Render *entry* as a single logfmt line with a full timestamp."""
    event_dict: dict[str, Any] = {
        "time": entry.time.isoformat(timespec="seconds"),
        "level": entry.level.label,
        "msg": entry.message,
    }
    for key, value in entry.fields.items():
        event_dict.setdefault(_clean_key(str(key)), value)
    return _renderer(None, entry.level.label, event_dict)


class ConsoleHook(Hook):
    """Best-effort diagnostic copy of alerts on the error stream.

    Write failures are swallowed; delivery is not guaranteed. The line and
    its stack go out under one lock so concurrent alerts do not interleave.
    """

    def __init__(self, stream: TextIO | None = None, capture_stack: bool = True) -> None:
        self._stream = stream
        self._capture_stack = capture_stack
        self._lock = threading.Lock()

    @property
    def levels(self) -> frozenset[Level]:
        return ALERT_LEVELS

    def fire(self, entry: LogEntry) -> None:
        text = format_entry(entry) + "\n"
        if self._capture_stack:
            text += current_stack()
        stream = self._stream or sys.stderr
        with self._lock:
            try:
                stream.write(text)
                stream.flush()
            except (OSError, ValueError):
                pass
