"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from email.errors import HeaderParseError
from email.headerregistry import Address
from email.utils import formataddr, parseaddr
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)

from loghooks.core.types import Level

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

GLOBAL_WINDOW_SECS = 60.0
MESSAGE_WINDOW_SECS = 600.0


def parse_endpoint(endpoint: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6addr]:port``) into its parts.

    Raises:
        ValueError: if the string is not a host followed by a numeric port.
    """
    host, sep, port_str = endpoint.rpartition(":")
    if not sep or not host:
        raise ValueError(f"missing port in address {endpoint!r}")
    if host.startswith("["):
        if not host.endswith("]"):
            raise ValueError(f"missing ']' in address {endpoint!r}")
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"too many colons in address {endpoint!r}")
    if not port_str.isdigit():
        raise ValueError(f"invalid port {port_str!r} in address {endpoint!r}")
    port = int(port_str)
    if not 0 < port < 65536:
        raise ValueError(f"port {port} out of range in address {endpoint!r}")
    return host, port


def parse_address(text: str) -> tuple[str, str]:
    """Split an RFC 5322 mailbox into ``(display name, addr-spec)``.

    Accepts ``user@domain`` and ``Name <user@domain>``. Only syntax is
    checked, so dotless and internal domains (``root@localhost``) pass.

    Raises:
        ValueError: if *text* is not a single mailbox.
    """
    name, addr_spec = parseaddr(text)
    try:
        parsed = Address(addr_spec=addr_spec)
    except (HeaderParseError, IndexError, ValueError) as exc:
        raise ValueError(f"invalid mail address {text!r}") from exc
    if not parsed.username or not parsed.domain:
        raise ValueError(f"invalid mail address {text!r}")
    return name, parsed.addr_spec


class MailAddress(BaseModel):
    """A mailbox with an optional display name."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            name, email = parse_address(data)
            return {"name": name, "email": email}
        return data

    @field_validator("email")
    @classmethod
    def _valid_addr_spec(cls, v: str) -> str:
        return parse_address(v)[1]

    def __str__(self) -> str:
        return formataddr((self.name, self.email))


class MarkPolicy(StrEnum):
    """When the suppression window is stamped relative to delivery."""

    BEFORE_SEND = "before"  # a failed send still consumes the window
    AFTER_SEND = "after"  # only successful sends are stamped


class LoggingConfig(BaseModel):
    """Primary log output configuration."""

    level: str = "info"
    format: str = "text"

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        Level.parse(v)
        return v


class ConsoleConfig(BaseModel):
    """Stderr mirror for warn-and-above records."""

    enabled: bool = True
    capture_stack: bool = True


class SuppressionConfig(BaseModel):
    """Alert throttling windows."""

    global_window_secs: float = GLOBAL_WINDOW_SECS
    message_window_secs: float = MESSAGE_WINDOW_SECS

    @model_validator(mode="after")
    def _global_shorter(self) -> SuppressionConfig:
        if not 0 <= self.global_window_secs < self.message_window_secs:
            raise ValueError(
                "global_window_secs must be non-negative and shorter than "
                "message_window_secs"
            )
        return self


class MailConfig(BaseModel):
    """Mail alert hook settings, validated once at construction."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    app_name: str
    sender: MailAddress
    recipient: MailAddress
    username: str = ""
    password: SecretStr = SecretStr("")
    connect_timeout_secs: float = Field(default=3.0, gt=0)
    send_timeout_secs: float | None = None
    mark_policy: MarkPolicy = MarkPolicy.BEFORE_SEND
    capture_stack: bool = True

    @field_validator("endpoint")
    @classmethod
    def _valid_endpoint(cls, v: str) -> str:
        parse_endpoint(v)
        return v

    @property
    def host(self) -> str:
        return parse_endpoint(self.endpoint)[0]

    @property
    def port(self) -> int:
        return parse_endpoint(self.endpoint)[1]

    @property
    def authenticated(self) -> bool:
        return bool(self.username)


class Settings(BaseModel):
    """Root settings container."""

    logging: LoggingConfig = LoggingConfig()
    console: ConsoleConfig = ConsoleConfig()
    suppression: SuppressionConfig = SuppressionConfig()
    mail: MailConfig | None = None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
