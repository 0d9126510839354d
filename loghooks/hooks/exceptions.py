"""Exception hierarchy for log hooks."""

from __future__ import annotations


class HookError(Exception):
    """Base exception for all hook errors."""


class ConfigurationError(HookError):
    """Invalid hook settings or unreachable mail endpoint at setup time."""


class DeliveryError(HookError):
    """An SMTP step failed while sending an alert."""


class FormattingError(HookError):
    """Record fields could not be rendered."""
