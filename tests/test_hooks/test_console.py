"""Tests for ConsoleHook — logfmt line, stack trace, swallowed write errors."""

from __future__ import annotations

import io
import threading
from datetime import datetime, timezone

import pytest

from loghooks.core.types import ALERT_LEVELS, Level, LogEntry
from loghooks.hooks.console import ConsoleHook, format_entry


def _entry(**kw: object) -> LogEntry:
    defaults: dict[str, object] = {
        "level": Level.ERROR,
        "message": "payment failed",
        "fields": {"user": "a", "count": 3},
        "time": datetime(2024, 3, 9, 14, 5, 7, tzinfo=timezone.utc),
    }
    defaults.update(kw)
    return LogEntry(**defaults)  # type: ignore[arg-type]


class BrokenStream(io.StringIO):
    def write(self, s: str) -> int:
        raise OSError("broken pipe")


class RecordingStream(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def write(self, s: str) -> int:
        self.calls.append("write")
        return super().write(s)

    def flush(self) -> None:
        self.calls.append("flush")


class TestFormatEntry:
    def test_logfmt_line(self) -> None:
        line = format_entry(_entry())
        assert line == (
            'time=2024-03-09T14:05:07+00:00 level=error msg="payment failed" '
            "user=a count=3"
        )

    def test_reserved_keys_not_overwritten(self) -> None:
        line = format_entry(_entry(fields={"msg": "other"}))
        assert 'msg="payment failed"' in line
        assert "other" not in line

    def test_awkward_keys_cleaned(self) -> None:
        line = format_entry(_entry(fields={"request id": "r1"}))
        assert "request_id=r1" in line

    def test_control_characters_in_keys_cleaned(self) -> None:
        line = format_entry(_entry(fields={"a\x01b": 1, "tab\there": 2, "nl\n": 3}))
        assert "a_b=1" in line
        assert "tab_here=2" in line
        assert "nl_=3" in line

    def test_empty_key_replaced(self) -> None:
        assert "_=1" in format_entry(_entry(fields={"": 1}))


class TestConsoleHook:
    def test_levels(self) -> None:
        assert ConsoleHook().levels == ALERT_LEVELS

    def test_writes_line_and_stack(self) -> None:
        buf = io.StringIO()
        ConsoleHook(stream=buf).fire(_entry())
        out = buf.getvalue()
        first, rest = out.split("\n", 1)
        assert first.startswith("time=2024-03-09T14:05:07+00:00 level=error")
        assert "test_writes_line_and_stack" in rest

    def test_stack_can_be_disabled(self) -> None:
        buf = io.StringIO()
        ConsoleHook(stream=buf, capture_stack=False).fire(_entry())
        assert buf.getvalue().count("\n") == 1

    def test_defaults_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        ConsoleHook(capture_stack=False).fire(_entry())
        captured = capsys.readouterr()
        assert "payment failed" in captured.err
        assert captured.out == ""

    def test_write_failure_swallowed(self) -> None:
        ConsoleHook(stream=BrokenStream()).fire(_entry())

    def test_closed_stream_swallowed(self) -> None:
        buf = io.StringIO()
        buf.close()
        ConsoleHook(stream=buf).fire(_entry())

    def test_control_character_key_still_mirrored(self) -> None:
        buf = io.StringIO()
        ConsoleHook(stream=buf, capture_stack=False).fire(_entry(fields={"a\x01b": 1}))
        assert "a_b=1" in buf.getvalue()

    def test_concurrent_fires_do_not_interleave(self) -> None:
        buf = RecordingStream()
        hook = ConsoleHook(stream=buf)
        threads = [threading.Thread(target=hook.fire, args=(_entry(),)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert buf.calls == ["write", "flush"] * 8
