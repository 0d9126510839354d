"""Log hooks — severity routing, alert suppression, mail and console delivery."""

from loghooks.hooks.composer import MailMessage, compose_message
from loghooks.hooks.console import ConsoleHook
from loghooks.hooks.dispatcher import Hook, HookSet
from loghooks.hooks.exceptions import (
    ConfigurationError,
    DeliveryError,
    FormattingError,
    HookError,
)
from loghooks.hooks.factory import (
    create_hook_set,
    install_from_settings,
    setup_alert_logging,
)
from loghooks.hooks.handler import HookHandler, entry_from_record
from loghooks.hooks.suppression import (
    GLOBAL_KEY,
    SuppressionStore,
    get_suppression_store,
    reset_suppression_store,
)
from loghooks.hooks.transport import MailAuthHook, MailHook, check_mail_params

__all__ = [
    "GLOBAL_KEY",
    "ConfigurationError",
    "ConsoleHook",
    "DeliveryError",
    "FormattingError",
    "Hook",
    "HookError",
    "HookHandler",
    "HookSet",
    "MailAuthHook",
    "MailHook",
    "MailMessage",
    "SuppressionStore",
    "check_mail_params",
    "compose_message",
    "create_hook_set",
    "entry_from_record",
    "get_suppression_store",
    "install_from_settings",
    "reset_suppression_store",
    "setup_alert_logging",
]
