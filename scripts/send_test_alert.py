#!/usr/bin/env python3
"""Install the log hooks and emit one alert to check delivery end to end.

Usage::

    # Everything from a settings file
    python scripts/send_test_alert.py --config config/settings.yaml

    # One-call setup from flags
    python scripts/send_test_alert.py --endpoint smtp.internal:25 \\
        --app billing-api --sender alerts@example.com \\
        --recipient oncall@example.com
"""

from __future__ import annotations

import argparse
import sys

import structlog

from loghooks.core.config import load_settings
from loghooks.hooks.exceptions import ConfigurationError
from loghooks.hooks.factory import install_from_settings, setup_alert_logging

logger = structlog.get_logger(__name__)


def run(args: argparse.Namespace) -> int:
    try:
        if args.endpoint:
            if not (args.app and args.sender and args.recipient):
                print(
                    "--endpoint needs --app, --sender and --recipient",
                    file=sys.stderr,
                )
                return 2
            hook_set = setup_alert_logging(
                args.endpoint,
                args.format,
                args.log_level,
                args.app,
                args.sender,
                args.recipient,
            )
        else:
            hook_set = install_from_settings(load_settings(args.config))
    except ConfigurationError as exc:
        print(f"setup failed: {exc}", file=sys.stderr)
        return 1

    logger.warning(
        args.message,
        hooks=[type(h).__name__ for h in hook_set.hooks],
        source="send_test_alert",
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Send a test alert through the configured log hooks.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument("--endpoint", default=None, help="Mail server host:port")
    parser.add_argument("--app", default=None, help="Application name")
    parser.add_argument("--sender", default=None, help="Sender address")
    parser.add_argument("--recipient", default=None, help="Recipient address")
    parser.add_argument(
        "--format",
        default="text",
        choices=["text", "json"],
        help="Primary output format (default: text)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Minimum level to log (default: info)",
    )
    parser.add_argument(
        "--message",
        default="test alert",
        help="Alert message text",
    )
    sys.exit(run(parser.parse_args()))


if __name__ == "__main__":
    main()
