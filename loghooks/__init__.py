"""Severity-routed log hooks: stderr mirror and throttled mail alerts."""

from loghooks.hooks.factory import install_from_settings, setup_alert_logging

__all__ = ["install_from_settings", "setup_alert_logging"]
