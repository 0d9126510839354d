"""Domain types shared by the logging setup and the hooks."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field


class Level(IntEnum):
    """Record severity — ordered so comparisons work naturally."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    PANIC = 6

    @property
    def label(self) -> str:
        """Lowercase name used in mail subjects and console output."""
        return _LABELS[self]

    @property
    def stdlib(self) -> int:
        """Numeric level understood by the ``logging`` module."""
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, name: str) -> Level:
        try:
            return _NAMES[name.strip().lower()]
        except KeyError:
            raise ValueError(f"not a valid log level: {name!r}") from None

    @classmethod
    def from_stdlib(cls, levelno: int) -> Level:
        """Map a ``logging`` level number onto the closest level at or below it."""
        result = cls.TRACE
        for level in cls:
            if _STDLIB_LEVELS[level] <= levelno:
                result = level
        return result


_LABELS: dict[Level, str] = {
    Level.TRACE: "trace",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "panic",
}

_STDLIB_LEVELS: dict[Level, int] = {
    Level.TRACE: 5,
    Level.DEBUG: 10,
    Level.INFO: 20,
    Level.WARN: 30,
    Level.ERROR: 40,
    Level.FATAL: 50,
    Level.PANIC: 60,
}

_NAMES: dict[str, Level] = {
    "trace": Level.TRACE,
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "error": Level.ERROR,
    "fatal": Level.FATAL,
    "critical": Level.FATAL,
    "panic": Level.PANIC,
}

# Severities that reach the alerting hooks.
ALERT_LEVELS: frozenset[Level] = frozenset(
    {Level.WARN, Level.ERROR, Level.FATAL, Level.PANIC}
)


class LogEntry(BaseModel):
    """A single emitted record, as seen by the hooks."""

    level: Level
    message: str
    fields: dict[str, Any] = Field(default_factory=dict)
    time: datetime = Field(default_factory=lambda: datetime.now().astimezone())
    stack: str | None = None
