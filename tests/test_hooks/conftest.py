"""Shared fixtures for hook tests — loopback endpoints and fake SMTP clients."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from loghooks.core.config import MailConfig


@pytest.fixture
def listening_port() -> Iterator[int]:
    """A loopback port that accepts TCP connections."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as srv:
        srv.bind(("127.0.0.1", 0))
        srv.listen(16)
        yield srv.getsockname()[1]


@pytest.fixture
def closed_port() -> int:
    """A loopback port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def mail_config(listening_port: int) -> MailConfig:
    return MailConfig(
        endpoint=f"127.0.0.1:{listening_port}",
        app_name="svc",
        sender="alerts@example.com",  # type: ignore[arg-type]
        recipient="oncall@example.com",  # type: ignore[arg-type]
    )


@pytest.fixture
def smtp_client() -> MagicMock:
    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = False
    client.mail.return_value = (250, b"2.1.0 Ok")
    client.rcpt.return_value = (250, b"2.1.5 Ok")
    client.data.return_value = (250, b"2.0.0 Queued")
    client.has_extn.return_value = False
    return client


@pytest.fixture
def smtp_factory(smtp_client: MagicMock) -> MagicMock:
    return MagicMock(return_value=smtp_client)
