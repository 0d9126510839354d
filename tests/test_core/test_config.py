"""Tests for loghooks/core/config.py — YAML loading, defaults, mail validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from loghooks.core.config import (
    ConsoleConfig,
    LoggingConfig,
    MailConfig,
    MarkPolicy,
    Settings,
    SuppressionConfig,
    get_settings,
    load_settings,
    parse_endpoint,
    reset_settings,
)


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


def _mail(**kw: object) -> MailConfig:
    defaults: dict[str, object] = {
        "endpoint": "smtp.internal:25",
        "app_name": "svc",
        "sender": "alerts@example.com",
        "recipient": "oncall@example.com",
    }
    defaults.update(kw)
    return MailConfig(**defaults)  # type: ignore[arg-type]


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "info"
        assert cfg.format == "text"

    def test_default_console_config(self) -> None:
        cfg = ConsoleConfig()
        assert cfg.enabled is True
        assert cfg.capture_stack is True

    def test_default_suppression_windows(self) -> None:
        cfg = SuppressionConfig()
        assert cfg.global_window_secs == 60.0
        assert cfg.message_window_secs == 600.0

    def test_default_settings_have_no_mail(self) -> None:
        s = Settings()
        assert s.mail is None
        assert s.logging.level == "info"

    def test_get_settings_caches(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert get_settings() is get_settings()


class TestEndpointParsing:
    def test_host_and_port(self) -> None:
        assert parse_endpoint("smtp.internal:25") == ("smtp.internal", 25)

    def test_ipv6_brackets(self) -> None:
        assert parse_endpoint("[::1]:2525") == ("::1", 2525)

    @pytest.mark.parametrize(
        "endpoint",
        ["smtp.internal", "smtp.internal:", "smtp.internal:smtp", "::1:25", ":25", "host:70000"],
    )
    def test_malformed_rejected(self, endpoint: str) -> None:
        with pytest.raises(ValueError):
            parse_endpoint(endpoint)


class TestMailConfig:
    def test_valid_config(self) -> None:
        cfg = _mail()
        assert cfg.host == "smtp.internal"
        assert cfg.port == 25
        assert cfg.sender.email == "alerts@example.com"
        assert cfg.recipient.email == "oncall@example.com"
        assert cfg.connect_timeout_secs == 3.0
        assert cfg.send_timeout_secs is None
        assert cfg.mark_policy is MarkPolicy.BEFORE_SEND
        assert cfg.authenticated is False

    def test_display_name_address_accepted(self) -> None:
        cfg = _mail(sender="Alerts <alerts@example.com>")
        assert cfg.sender.email == "alerts@example.com"
        assert cfg.sender.name == "Alerts"

    def test_bad_sender_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _mail(sender="not an address")

    def test_bad_recipient_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _mail(recipient="oncall@")

    @pytest.mark.parametrize(
        "address",
        ["root@localhost", "ops@mailhost.local", "alerts@corp.test"],
    )
    def test_internal_relay_addresses_accepted(self, address: str) -> None:
        cfg = _mail(sender=address, recipient=address)
        assert cfg.sender.email == address
        assert cfg.recipient.email == address

    def test_display_name_with_local_domain(self) -> None:
        cfg = _mail(recipient="Name <ops@host.local>")
        assert cfg.recipient.email == "ops@host.local"
        assert cfg.recipient.name == "Name"
        assert str(cfg.recipient) == "Name <ops@host.local>"

    @pytest.mark.parametrize("address", ["nobody", "@example.com", ""])
    def test_malformed_addresses_rejected(self, address: str) -> None:
        with pytest.raises(ValidationError):
            _mail(sender=address)

    def test_survives_json_round_trip(self) -> None:
        cfg = _mail(sender="Alerts <root@localhost>")
        again = MailConfig(**cfg.model_dump(mode="json"))
        assert again.sender == cfg.sender

    def test_bad_endpoint_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _mail(endpoint="smtp.internal")

    def test_frozen(self) -> None:
        cfg = _mail()
        with pytest.raises(ValidationError):
            cfg.app_name = "other"  # type: ignore[misc]

    def test_authenticated_when_username_set(self) -> None:
        cfg = _mail(username="alerts", password="hunter2")
        assert cfg.authenticated is True
        assert cfg.password.get_secret_value() == "hunter2"

    def test_password_not_leaked_in_repr(self) -> None:
        cfg = _mail(username="alerts", password="hunter2")
        assert "hunter2" not in repr(cfg)


class TestSuppressionConfig:
    def test_global_must_be_shorter(self) -> None:
        with pytest.raises(ValidationError):
            SuppressionConfig(global_window_secs=600, message_window_secs=60)

    def test_equal_windows_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SuppressionConfig(global_window_secs=60, message_window_secs=60)


class TestLoggingConfig:
    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "logging": {"level": "debug", "format": "json"},
            "console": {"capture_stack": False},
            "suppression": {"global_window_secs": 30, "message_window_secs": 300},
            "mail": {
                "endpoint": "smtp.internal:2525",
                "app_name": "billing",
                "sender": "alerts@example.com",
                "recipient": "oncall@example.com",
                "username": "alerts",
                "password": "s3cret",
                "mark_policy": "after",
            },
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        settings = load_settings(config_file)

        assert settings.logging.level == "debug"
        assert settings.logging.format == "json"
        assert settings.console.capture_stack is False
        assert settings.suppression.global_window_secs == 30
        assert settings.mail is not None
        assert settings.mail.port == 2525
        assert settings.mail.password.get_secret_value() == "s3cret"
        assert settings.mail.mark_policy is MarkPolicy.AFTER_SEND

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.mail is None
        assert settings.console.enabled is True

    def test_load_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        settings = load_settings(config_file)
        assert settings.logging.format == "text"

    def test_load_caches_globally(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"logging": {"level": "warn"}}))
        settings = load_settings(config_file)
        assert get_settings() is settings
