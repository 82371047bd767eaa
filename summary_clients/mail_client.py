"""
SMTP client that delivers the weekly summary through Gmail with XOAUTH2.
"""

import logging
import smtplib
import ssl
from datetime import datetime, tzinfo
from email.utils import make_msgid
from typing import Callable, Optional

from .auth import CredentialContext
from .errors import AuthError, DeliveryError
from .formatter import summary_subject, summary_to_html
from .models import OutboundMessage

logger = logging.getLogger(__name__)


class MailSender:
    def __init__(self, context: CredentialContext, sender: str, recipient: str,
                 timezone: tzinfo, sender_name: str = 'Calendar Summary',
                 host: str = 'smtp.gmail.com', port: int = 465,
                 smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP_SSL):
        self.context = context
        self.sender = sender
        self.recipient = recipient
        self.timezone = timezone
        self.sender_name = sender_name
        self.host = host
        self.port = port
        self.smtp_factory = smtp_factory

    @classmethod
    def from_settings(cls, settings, context: CredentialContext) -> 'MailSender':
        return cls(
            context=context,
            sender=settings.email_user,
            recipient=settings.email_recipient,
            timezone=settings.timezone,
            sender_name=settings.sender_name,
            host=settings.smtp_host,
            port=settings.smtp_port,
        )

    def build_message(self, body: str, now: Optional[datetime] = None) -> OutboundMessage:
        if now is None:
            now = datetime.now(self.timezone)
        domain = self.sender.rpartition('@')[2] or None
        return OutboundMessage(
            sender_name=self.sender_name,
            sender=self.sender,
            recipient=self.recipient,
            subject=summary_subject(now),
            text=body,
            html=summary_to_html(body),
            message_id=make_msgid(domain=domain),
        )

    def open_session(self) -> smtplib.SMTP:
        """Connect, authenticate and verify an SMTP session.

        Raises AuthError if any step fails; the caller owns the returned
        session and must close it.
        """
        auth_string = self.context.xoauth2_string(self.sender)

        try:
            server = self.smtp_factory(self.host, self.port, context=ssl.create_default_context())
        except (smtplib.SMTPException, OSError) as error:
            raise AuthError(f"Could not connect to {self.host}:{self.port}: {error}") from error

        try:
            server.ehlo()
            server.auth('XOAUTH2', lambda challenge=None: auth_string if challenge is None else '')
            code, reply = server.noop()
            if code != 250:
                raise AuthError(f"SMTP verification failed: {code} {reply!r}")
        except (smtplib.SMTPException, OSError) as error:
            self._close(server)
            raise AuthError(f"SMTP authentication failed: {error}") from error
        except AuthError:
            self._close(server)
            raise

        logger.info("Transporter verified successfully")
        return server

    def send(self, body: str, now: Optional[datetime] = None) -> str:
        """Send the summary and return the message id."""
        server = self.open_session()
        try:
            message = self.build_message(body, now)
            try:
                refused = server.send_message(
                    message.to_mime(),
                    from_addr=self.sender,
                    to_addrs=[self.recipient],
                )
            except (smtplib.SMTPException, OSError) as error:
                raise DeliveryError(f"Sending to {self.recipient} failed: {error}") from error
            if refused:
                raise DeliveryError(f"Recipients refused: {refused}")
        except BaseException:
            # Failed or interrupted (e.g. SystemExit from a signal): drop the
            # socket without waiting on a QUIT reply.
            server.close()
            raise
        self._close(server)

        logger.info("Email sent successfully: %s", message.message_id)
        return message.message_id

    @staticmethod
    def _close(server: smtplib.SMTP) -> None:
        try:
            server.quit()
        except (smtplib.SMTPException, OSError) as error:
            logger.debug("Ignoring error while closing SMTP session: %s", error)
