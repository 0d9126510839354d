"""Pure functions that turn a LogEntry into a plain-text mail message."""

from __future__ import annotations

import json
import traceback
from typing import Any

from pydantic import BaseModel

from loghooks.core.types import LogEntry
from loghooks.hooks.exceptions import FormattingError

TIME_FORMAT = "%Y-%m-%d %H:%M:%S%z"

_UNRENDERABLE = "<unrenderable {type}>"


class MailMessage(BaseModel):
    """Subject and body ready to go over the wire."""

    subject: str
    body: str

    @property
    def payload(self) -> str:
        return f"Subject: {self.subject}\r\n\r\n{self.body}"


def current_stack() -> str:
    """Text of the caller's stack, the way ``traceback`` prints it."""
    return "".join(traceback.format_stack()[:-1])


# ── Field rendering ─────────────────────────────────────────────


def render_fields(fields: dict[str, Any]) -> str:
    """Dump *fields* as tab-indented JSON.

    Any failure raised while serialising, including one from a value's
    ``__str__``, is reported as FormattingError.

    Raises:
        FormattingError: if the mapping cannot be serialised as a whole.
    """
    try:
        return json.dumps(fields, indent="\t", default=str, ensure_ascii=False)
    except Exception as exc:
        raise FormattingError(f"cannot render fields: {exc}") from exc


def render_fields_partial(fields: dict[str, Any]) -> str:
    """Render each field on its own, substituting a placeholder on failure."""
    rendered: dict[str, Any] = {}
    for key, value in fields.items():
        try:
            json.dumps(value, default=str)
        except Exception:
            value = _UNRENDERABLE.format(type=type(value).__name__)
        rendered[str(key)] = value
    return json.dumps(rendered, indent="\t", default=str, ensure_ascii=False)


# ── Composer ────────────────────────────────────────────────────


def compose_message(
    entry: LogEntry,
    app_name: str,
    capture_stack: bool = True,
) -> MailMessage:
    """Build the alert mail for *entry*."""
    subject = f"{app_name} - {entry.level.label}"

    try:
        data = render_fields(entry.fields)
    except FormattingError:
        data = render_fields_partial(entry.fields)

    stack = ""
    if capture_stack:
        stack = current_stack()
        if entry.stack:
            stack += f"\n{entry.stack}"

    timestamp = entry.time.astimezone().strftime(TIME_FORMAT)
    body = (
        f"TIME: {timestamp}\n"
        f"MESSAGE: {entry.message}\n\n"
        f"DATA: {data}\n\n"
        f"STACKTRACE: \n{stack}"
    )
    return MailMessage(subject=subject, body=body)
