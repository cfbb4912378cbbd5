"""Outbound mail delivery."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from typing import Protocol

from academy_cms.core.config import MailSettings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail server."""


class Mailer(Protocol):
    async def send(self, address: str, subject: str, body: str) -> None:
        """Deliver a message or raise :class:`MailDeliveryError`."""
        ...


class SmtpMailer:
    """Sends plain text mail through an SMTP relay."""

    def __init__(self, settings: MailSettings) -> None:
        self._settings = settings

    async def send(self, address: str, subject: str, body: str) -> None:
        message = MIMEText(body, "plain", "utf-8")
        message["Subject"] = subject
        message["From"] = self._settings.sender
        message["To"] = address

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Failed to send mail to {address}") from exc

        logger.info("Mail sent to %s: %s", address, subject)

    def _deliver(self, message: MIMEText) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout) as client:
            if settings.use_tls:
                client.starttls()
            if settings.username:
                password = settings.password.get_secret_value() if settings.password else ""
                client.login(settings.username, password)
            client.send_message(message)


class LoggingMailer:
    """Development mailer: records that a message would be sent, never its body."""

    async def send(self, address: str, subject: str, body: str) -> None:
        logger.info("Mail delivery disabled; dropping message to %s: %s", address, subject)


def build_mailer(settings: MailSettings) -> Mailer:
    if settings.backend == "smtp":
        return SmtpMailer(settings)
    return LoggingMailer()


__all__ = ["LoggingMailer", "MailDeliveryError", "Mailer", "SmtpMailer", "build_mailer"]
