"""Outgoing mail.

Mail goes out over SMTP. When no SMTP host is configured (local development,
tests) the message is written to the log instead of being sent.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from config import FRONTEND_URL, SMTP_FROM, SMTP_HOST, SMTP_PASS, SMTP_PORT, SMTP_USER
from core.exceptions import EmailDeliveryFailedError

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


class Mailer:
    """Sends HTML mail through SMTP."""

    def __init__(
        self,
        host: Optional[str] = SMTP_HOST,
        port: int = SMTP_PORT,
        user: Optional[str] = SMTP_USER,
        password: Optional[str] = SMTP_PASS,
        sender: str = SMTP_FROM,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    def send(self, to: str, subject: str, html_body: str) -> None:
        """Send one message.

        Args:
            to: Recipient address.
            subject: Message subject.
            html_body: HTML content.

        Raises:
            EmailDeliveryFailedError: If the SMTP exchange fails.
        """
        if not self.host:
            logger.info("Email would be sent (no SMTP host): to=%s subject=%s", to, subject)
            logger.debug("Email body:\n%s", html_body)
            return

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html_body, subtype="html")

        try:
            if self.port == 465:
                smtp = smtplib.SMTP_SSL(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
            else:
                smtp = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
            with smtp:
                if self.port != 465:
                    smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise EmailDeliveryFailedError() from e

        logger.info("Email sent to %s: %s", to, subject)


def build_password_reset_email(reset_token: str, frontend_url: str = FRONTEND_URL) -> str:
    """Return the HTML body of a password reset email."""
    reset_url = f"{frontend_url.rstrip('/')}/reset-password?token={reset_token}"
    return f"""
    <h2>Password Reset Request</h2>
    <p>You requested a password reset for your School Management System account.</p>
    <p>Click the link below to reset your password:</p>
    <a href="{reset_url}" style="display: inline-block; padding: 10px 20px; background-color: #007bff; color: white; text-decoration: none; border-radius: 5px;">Reset Password</a>
    <p>This link will expire in 1 hour.</p>
    <p>If you didn't request this reset, please ignore this email.</p>
    """
