"""Verification email delivery, dispatched off the request path."""
import logging
import re
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from eventauth.config import Settings
from eventauth.schemas.records import UserRecord

logger = logging.getLogger(__name__)


class VerificationMailer(Protocol):
    def send_verification_email(self, user: UserRecord) -> bool: ...


def generate_verification_html(user: UserRecord, site_url: str) -> str:
    """Generate HTML content for the verification email."""
    greeting = f"Hi {user.name}," if user.name else "Hi,"
    link = f"{site_url.rstrip('/')}/verify-email"
    return f"""
    <html>
    <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="color: #1e40af;">Confirm your email</h1>
        <p>{greeting}</p>
        <p>Thanks for signing up. Please confirm that {user.email} is your address.</p>
        <p><a href="{link}" style="color: #1e40af;">Verify my email</a></p>
        <p style="margin-top: 24px; padding-top: 16px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 12px;">
            If you did not create an account you can ignore this message.
        </p>
    </body>
    </html>
    """


class SmtpVerificationMailer:
    """Send verification email over SMTP.

    Does nothing (returns False) when ``smtp_host`` is not configured. SMTP
    errors propagate to the caller.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def send_verification_email(self, user: UserRecord) -> bool:
        if user.email_verified:
            logger.info("Email already verified for user %s, skipping", user.id)
            return False
        html = generate_verification_html(user, self.settings.site_url)
        return self._send(user.email, "Confirm your email address", html)

    def _send(self, to_email: str, subject: str, html_content: str) -> bool:
        if not self.settings.smtp_host:
            logger.info("SMTP not configured, skipping email")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.mail_from
        msg["To"] = to_email

        # Plain text fallback
        plain_text = html_content.replace("<br>", "\n").replace("</p>", "\n\n")
        plain_text = re.sub(r"<[^>]+>", "", plain_text)

        msg.attach(MIMEText(plain_text, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as server:
            server.starttls()
            if self.settings.smtp_user and self.settings.smtp_password:
                server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.send_message(msg)
        return True


class MailDispatcher:
    """Fire-and-forget delivery of verification email on a small pool."""

    def __init__(self, mailer: VerificationMailer, max_workers: int = 2) -> None:
        self._mailer = mailer
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")

    def dispatch(self, user: UserRecord) -> Future:
        """Queue a verification email; outcome is only logged."""
        future = self._executor.submit(self._mailer.send_verification_email, user)
        future.add_done_callback(self._log_outcome)
        return future

    @staticmethod
    def _log_outcome(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Failed to send verification email", exc_info=exc)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
