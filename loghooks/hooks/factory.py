"""Convenience factory for wiring hooks into the logging stack."""

from __future__ import annotations

from typing import TextIO

import structlog
from pydantic import ValidationError

from loghooks.core.config import (
    MailConfig,
    Settings,
    SuppressionConfig,
    get_settings,
)
from loghooks.core.logging import setup_logging
from loghooks.core.types import Level
from loghooks.hooks.console import ConsoleHook
from loghooks.hooks.dispatcher import HookSet
from loghooks.hooks.exceptions import ConfigurationError
from loghooks.hooks.handler import HookHandler
from loghooks.hooks.suppression import SuppressionStore
from loghooks.hooks.transport import MailAuthHook, MailHook, SmtpFactory

logger = structlog.get_logger(__name__)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
        for err in exc.errors()
    )


def create_hook_set(
    settings: Settings,
    store: SuppressionStore | None = None,
    console_stream: TextIO | None = None,
    smtp_factory: SmtpFactory | None = None,
) -> HookSet:
    """Build the console and mail hooks described by *settings*.

    Hooks fire in a fixed order: console first, then mail.

    Raises:
        ConfigurationError: if the mail endpoint is unreachable.
    """
    hook_set = HookSet()

    if settings.console.enabled:
        hook_set.add(
            ConsoleHook(
                stream=console_stream,
                capture_stack=settings.console.capture_stack,
            )
        )

    if settings.mail is not None:
        if store is None:
            store = _store_for(settings.suppression)
        hook_cls = MailAuthHook if settings.mail.authenticated else MailHook
        kwargs = {"smtp_factory": smtp_factory} if smtp_factory else {}
        hook_set.add(hook_cls(settings.mail, store=store, **kwargs))

    return hook_set


def _store_for(config: SuppressionConfig) -> SuppressionStore | None:
    # Default windows share the process-wide store.
    if config == SuppressionConfig():
        return None
    return SuppressionStore(
        global_window_secs=config.global_window_secs,
        message_window_secs=config.message_window_secs,
    )


def install_from_settings(
    settings: Settings | None = None,
    stream: TextIO | None = None,
    console_stream: TextIO | None = None,
) -> HookSet:
    """Configure logging and attach hooks, all driven by YAML settings."""
    settings = settings or get_settings()
    hook_set = create_hook_set(settings, console_stream=console_stream)
    setup_logging(
        level=settings.logging.level,
        fmt=settings.logging.format,
        stream=stream,
        extra_handlers=[HookHandler(hook_set)],
    )
    logger.info(
        "log_hooks_installed",
        hooks=[type(h).__name__ for h in hook_set.hooks],
    )
    return hook_set


def setup_alert_logging(
    mail_endpoint: str,
    fmt: str,
    level: str,
    app_name: str,
    sender: str,
    recipient: str,
    *,
    stream: TextIO | None = None,
    console_stream: TextIO | None = None,
    smtp_factory: SmtpFactory | None = None,
) -> HookSet:
    """One-call setup: primary output, stderr mirror and mail alerts.

    1) primary output to stdout as ``json`` or text
    2) verbosity ``panic|fatal|error|warn|info|debug|trace``
    3) warn-and-above mailed to *recipient*, throttled
    4) warn-and-above mirrored to stderr with a stack trace

    Everything is validated before logging is touched, so a failure
    leaves the previous configuration in place.

    Raises:
        ConfigurationError: malformed endpoint or address, unknown level,
            or a mail server that does not accept connections.
    """
    try:
        Level.parse(level)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    try:
        mail = MailConfig(
            endpoint=mail_endpoint,
            app_name=app_name,
            sender=sender,
            recipient=recipient,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"invalid mail settings: {_describe(exc)}") from exc

    settings = Settings(mail=mail)
    hook_set = create_hook_set(
        settings, console_stream=console_stream, smtp_factory=smtp_factory
    )

    setup_logging(
        level=level,
        fmt=fmt,
        stream=stream,
        extra_handlers=[HookHandler(hook_set)],
    )
    return hook_set
