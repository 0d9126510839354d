"""Core module — config, types, logging."""

from loghooks.core.config import (
    MailAddress,
    MailConfig,
    MarkPolicy,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)
from loghooks.core.logging import setup_logging
from loghooks.core.types import ALERT_LEVELS, Level, LogEntry

__all__ = [
    "ALERT_LEVELS",
    "Level",
    "LogEntry",
    "MailAddress",
    "MailConfig",
    "MarkPolicy",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
