"""Hook set — routes each log entry to the hooks registered for its level."""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable

import structlog

from loghooks.core.types import Level, LogEntry

logger = structlog.get_logger(__name__)

ErrorHandler = Callable[["Hook", LogEntry, Exception], None]


class Hook(abc.ABC):
    """Base class for log delivery targets."""

    @property
    @abc.abstractmethod
    def levels(self) -> frozenset[Level]:
        """Levels this hook fires for."""

    @abc.abstractmethod
    def fire(self, entry: LogEntry) -> None:
        """Deliver *entry*. Raises on failure."""


def _log_hook_error(hook: Hook, entry: LogEntry, exc: Exception) -> None:
    logger.error(
        "hook_fire_error",
        hook=type(hook).__name__,
        level=entry.level.label,
        message=entry.message,
        exc_info=exc,
    )


class HookSet:
    """Ordered hooks, each invoked for the levels it declares.

    - Hooks run sequentially on the caller's thread, in registration order.
    - A hook that raises is reported to *on_error*; later hooks still run.
    - Nothing raised by a hook reaches the caller of :meth:`fire`.
    """

    def __init__(
        self,
        hooks: Iterable[Hook] | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._hooks: list[Hook] = list(hooks or [])
        self._on_error = on_error or _log_hook_error

    def __len__(self) -> int:
        return len(self._hooks)

    @property
    def hooks(self) -> tuple[Hook, ...]:
        return tuple(self._hooks)

    def add(self, hook: Hook) -> None:
        self._hooks.append(hook)

    def levels_for(self, level: Level) -> list[Hook]:
        """Hooks that fire for *level*, in invocation order."""
        return [h for h in self._hooks if level in h.levels]

    def fire(self, entry: LogEntry) -> int:
        """Run every eligible hook. Returns how many were invoked."""
        fired = 0
        for hook in self.levels_for(entry.level):
            fired += 1
            try:
                hook.fire(entry)
            except Exception as exc:
                try:
                    self._on_error(hook, entry, exc)
                except Exception:
                    logger.exception(
                        "hook_error_handler_failed", hook=type(hook).__name__
                    )
        return fired
