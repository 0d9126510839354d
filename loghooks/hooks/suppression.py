"""Process-wide alert suppression store.

Maps an alert key to the monotonic time the last alert for it was sent.
Two keys are checked per record: a global key that throttles all mail
traffic, and a per-message key that throttles repeats of the same text.
Entries are never evicted; memory grows with the number of distinct
messages that reach the mail hook.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from loghooks.core.config import GLOBAL_WINDOW_SECS, MESSAGE_WINDOW_SECS
from loghooks.core.types import LogEntry

GLOBAL_KEY = "global"

_store: SuppressionStore | None = None
_store_lock = threading.Lock()


def message_key(entry: LogEntry) -> str:
    """Suppression key for repeats of ``entry.message``."""
    return f"message:{entry.message}"


class ReadWriteLock:
    """Many readers or one writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class SuppressionStore:
    """Decides whether a mail alert may be sent for a record."""

    def __init__(
        self,
        global_window_secs: float = GLOBAL_WINDOW_SECS,
        message_window_secs: float = MESSAGE_WINDOW_SECS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 0 <= global_window_secs < message_window_secs:
            raise ValueError(
                "global window must be non-negative and shorter than the "
                "message window"
            )
        self._global_window = global_window_secs
        self._message_window = message_window_secs
        self._clock = clock
        self._sent_at: dict[str, float] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sent_at)

    def permit(self, key: str, window_secs: float) -> bool:
        """True if *key* was never sent or its window has elapsed."""
        with self._lock.read():
            return self._elapsed(key, window_secs, self._clock())

    def record_sent(self, *keys: str) -> None:
        """Stamp the current time against every key."""
        with self._lock.write():
            now = self._clock()
            for key in keys:
                self._sent_at[key] = now

    def can_send_alert(self, entry: LogEntry) -> bool:
        return self.permit(GLOBAL_KEY, self._global_window) and self.permit(
            message_key(entry), self._message_window
        )

    def mark_sent(self, entry: LogEntry) -> None:
        self.record_sent(GLOBAL_KEY, message_key(entry))

    def claim(self, entry: LogEntry) -> bool:
        """Check both windows and stamp them in one step.

        Concurrent callers for the same window see exactly one winner.
        """
        key = message_key(entry)
        with self._lock.write():
            now = self._clock()
            if not (
                self._elapsed(GLOBAL_KEY, self._global_window, now)
                and self._elapsed(key, self._message_window, now)
            ):
                return False
            self._sent_at[GLOBAL_KEY] = now
            self._sent_at[key] = now
            return True

    def _elapsed(self, key: str, window_secs: float, now: float) -> bool:
        sent_at = self._sent_at.get(key)
        if sent_at is None:
            return True
        return sent_at + window_secs <= now


def get_suppression_store() -> SuppressionStore:
    """Return the process-wide store, creating it on first use."""
    global _store  # noqa: PLW0603
    with _store_lock:
        if _store is None:
            _store = SuppressionStore()
        return _store


def reset_suppression_store() -> None:
    """Drop the process-wide store (useful for testing)."""
    global _store  # noqa: PLW0603
    with _store_lock:
        _store = None
