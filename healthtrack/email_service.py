# healthtrack/email_service.py
"""
Outbound email delivery over SMTP.

When no SMTP host is configured the service runs in preview mode and only
logs what it would have sent, so local development needs no mail server.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from .config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a message could not be handed to the SMTP server."""


class EmailService:
    """Sends HTML emails through a single SMTP account."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "Health Tracker <noreply@healthtracker.ai>",
        use_tls: bool = True,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "EmailService":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.EMAIL_FROM,
            use_tls=settings.SMTP_USE_TLS,
        )

    @property
    def preview_mode(self) -> bool:
        return not self.host

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain="healthtracker.ai")
        msg.set_content("Your email client does not support HTML.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send_email(self, to: str, subject: str, html: str) -> str:
        """
        Sends a single HTML email.

        Args:
            to (str): Recipient address.
            subject (str): Email subject line.
            html (str): HTML body.

        Raises:
            EmailDeliveryError: If the SMTP conversation fails.

        Returns:
            str: The Message-ID of the sent (or previewed) email.
        """
        msg = self.build_message(to, subject, html)

        if self.preview_mode:
            logger.info(f"[preview] Email to {to} | subject={subject!r} | id={msg['Message-ID']}")
            return msg["Message-ID"]

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Email delivery to {to} failed: {e}") from e

        logger.info(f"Email sent to {to}: {msg['Message-ID']}")
        return msg["Message-ID"]


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Returns the process-wide email service, created lazily from settings."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService.from_settings()
    return _email_service
