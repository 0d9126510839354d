"""Mail hooks — SMTP delivery of alert mails, with and without auth.

Each send opens a fresh connection that is closed on every exit path.
Failures are raised as DeliveryError and never retried.

With the default ``MarkPolicy.BEFORE_SEND`` the suppression window is
stamped before the SMTP transaction starts: a failed delivery still
consumes the window. That keeps a down mail server from being hammered by
every repeat of the error, at the cost of silently losing that alert.
"""

from __future__ import annotations

import abc
import smtplib
import socket
from collections.abc import Callable

import structlog

from loghooks.core.config import MailConfig, MarkPolicy
from loghooks.core.types import ALERT_LEVELS, Level, LogEntry
from loghooks.hooks.composer import MailMessage, compose_message
from loghooks.hooks.dispatcher import Hook
from loghooks.hooks.exceptions import ConfigurationError, DeliveryError
from loghooks.hooks.suppression import SuppressionStore, get_suppression_store

logger = structlog.get_logger(__name__)

SmtpFactory = Callable[..., smtplib.SMTP]


def check_mail_params(config: MailConfig) -> None:
    """Verify the mail server accepts TCP connections.

    Sender and recipient syntax is already enforced by MailConfig.

    Raises:
        ConfigurationError: if the endpoint cannot be reached in time.
    """
    try:
        with socket.create_connection(
            (config.host, config.port), timeout=config.connect_timeout_secs
        ):
            pass
    except OSError as exc:
        raise ConfigurationError(
            f"mail server {config.endpoint} is not reachable: {exc}"
        ) from exc


class _BaseMailHook(Hook):
    """Shared suppression and composition logic for the mail hooks."""

    def __init__(
        self,
        config: MailConfig,
        store: SuppressionStore | None = None,
        smtp_factory: SmtpFactory = smtplib.SMTP,
    ) -> None:
        check_mail_params(config)
        self._config = config
        self._store = store
        self._smtp_factory = smtp_factory

    @property
    def levels(self) -> frozenset[Level]:
        return ALERT_LEVELS

    @property
    def config(self) -> MailConfig:
        return self._config

    @property
    def store(self) -> SuppressionStore:
        if self._store is not None:
            return self._store
        return get_suppression_store()

    def fire(self, entry: LogEntry) -> None:
        store = self.store
        if self._config.mark_policy is MarkPolicy.BEFORE_SEND:
            if not store.claim(entry):
                logger.debug("mail_alert_suppressed", message=entry.message)
                return
        elif not store.can_send_alert(entry):
            logger.debug("mail_alert_suppressed", message=entry.message)
            return

        message = compose_message(
            entry, self._config.app_name, capture_stack=self._config.capture_stack
        )
        try:
            self._deliver(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(
                f"mail delivery to {self._config.endpoint} failed: {exc}"
            ) from exc

        if self._config.mark_policy is MarkPolicy.AFTER_SEND:
            store.mark_sent(entry)

    def _connect(self) -> smtplib.SMTP:
        kwargs: dict[str, float] = {}
        if self._config.send_timeout_secs is not None:
            kwargs["timeout"] = self._config.send_timeout_secs
        return self._smtp_factory(self._config.host, self._config.port, **kwargs)

    @abc.abstractmethod
    def _deliver(self, message: MailMessage) -> None:
        """Run the SMTP transaction for *message*."""


class MailHook(_BaseMailHook):
    """Sends alert mails without authentication, one SMTP step at a time."""

    def _deliver(self, message: MailMessage) -> None:
        sender = self._config.sender.email
        recipient = self._config.recipient.email

        with self._connect() as client:
            client.ehlo_or_helo_if_needed()

            code, resp = client.mail(sender)
            if code != 250:
                raise smtplib.SMTPSenderRefused(code, resp, sender)

            code, resp = client.rcpt(recipient)
            if code not in (250, 251):
                raise smtplib.SMTPRecipientsRefused({recipient: (code, resp)})

            client.data(message.payload.encode("utf-8"))

        logger.info("mail_alert_sent", subject=message.subject, recipient=recipient)


class MailAuthHook(_BaseMailHook):
    """Sends alert mails after PLAIN authentication in a single transaction."""

    def _deliver(self, message: MailMessage) -> None:
        sender = self._config.sender.email
        recipient = self._config.recipient.email

        with self._connect() as client:
            client.ehlo()
            if client.has_extn("starttls"):
                client.starttls()
                client.ehlo()
            client.user = self._config.username
            client.password = self._config.password.get_secret_value()
            client.auth("PLAIN", client.auth_plain)
            client.sendmail(sender, [recipient], message.payload.encode("utf-8"))

        logger.info("mail_alert_sent", subject=message.subject, recipient=recipient)
