"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import TextIO

import structlog

from loghooks.core.config import get_settings
from loghooks.core.types import Level


def register_level_names() -> None:
    """Teach stdlib ``logging`` the TRACE and PANIC levels."""
    logging.addLevelName(Level.TRACE.stdlib, "TRACE")
    logging.addLevelName(Level.PANIC.stdlib, "PANIC")


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
    extra_handlers: Iterable[logging.Handler] = (),
) -> None:
    """Configure structlog with JSON or console renderer.

    Args:
        level: Log level override (e.g. "debug"). Uses config if None.
        fmt: Renderer format override ("json" or "text"). Uses config if None.
        stream: Primary output stream. Defaults to stdout.
        extra_handlers: Further root handlers, e.g. a HookHandler.

    Raises:
        ValueError: if the level name is not recognised.
    """
    if level is None or fmt is None:
        settings = get_settings()
        level = level or settings.logging.level
        fmt = fmt or settings.logging.format
    log_level = Level.parse(level)
    log_format = fmt

    register_level_names()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    for extra in extra_handlers:
        root_logger.addHandler(extra)
    root_logger.setLevel(log_level.stdlib)
