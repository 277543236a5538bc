"""
Transactional emails over SMTP.
Without EMAIL_HOST configured the messages are logged instead of sent.
"""
import smtplib
from email.message import EmailMessage
from typing import Optional

from loguru import logger

from storefront.config import settings

STORE_NAME = "Daily Dose"

_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.button { display: inline-block; padding: 12px 24px; color: #fff; text-decoration: none;
          border-radius: 5px; margin: 20px 0; background-color: %s; }
.footer { margin-top: 30px; font-size: 12px; color: #666; }
"""


def _page(body: str, button_color: str = "#4CAF50") -> str:
    return (
        "<!DOCTYPE html><html><head><style>"
        + _STYLE % button_color
        + "</style></head><body><div class=\"container\">"
        + body
        + "</div></body></html>"
    )


class EmailService:
    def __init__(self, config=settings):
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config.email_host)

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.config.email_host, self.config.email_port, timeout=10)
        if self.config.email_use_tls:
            server.starttls()
        if self.config.email_user:
            server.login(self.config.email_user, self.config.email_password or "")
        return server

    def check_connection(self) -> bool:
        """Probe the SMTP server; only logs, never raises"""
        if not self.enabled:
            logger.warning("Email service not configured, emails will be logged only")
            return False
        try:
            with self._connect() as server:
                server.noop()
            logger.info("Email service connected successfully")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email service connection failed: {e}")
            return False

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.enabled:
            logger.info(f"[email disabled] to={to} subject={subject!r}")
            return

        message = EmailMessage()
        message["From"] = f'"{STORE_NAME}" <{self.config.email_from}>'
        message["To"] = to
        message["Subject"] = subject
        message.set_content("Please view this email in an HTML capable client.")
        message.add_alternative(html, subtype="html")

        with self._connect() as server:
            server.send_message(message)

    def send_verification_email(self, email: str, token: str) -> None:
        url = f"{self.config.client_url}/verify-email?token={token}"
        html = _page(
            f"<h2>Welcome to {STORE_NAME}!</h2>"
            "<p>Thank you for registering. Please verify your email address to complete your registration.</p>"
            f'<a href="{url}" class="button">Verify Email</a>'
            "<p>Or copy and paste this link in your browser:</p>"
            f'<p style="word-break: break-all; color: #666;">{url}</p>'
            "<p>This link will expire in 24 hours.</p>"
            '<div class="footer"><p>If you didn\'t create an account, please ignore this email.</p></div>'
        )
        self.send(email, f"Verify Your Email - {STORE_NAME}", html)
        logger.info(f"Verification email sent to: {email}")

    def send_password_reset_email(self, email: str, token: str) -> None:
        url = f"{self.config.client_url}/reset-password?token={token}"
        html = _page(
            "<h2>Password Reset Request</h2>"
            "<p>We received a request to reset your password. Click the button below to reset it:</p>"
            f'<a href="{url}" class="button">Reset Password</a>'
            "<p>Or copy and paste this link in your browser:</p>"
            f'<p style="word-break: break-all; color: #666;">{url}</p>'
            "<p>This link will expire in 1 hour.</p>"
            '<div class="footer"><p>If you didn\'t request a password reset, please ignore this email.</p></div>',
            button_color="#f44336",
        )
        self.send(email, f"Reset Your Password - {STORE_NAME}", html)
        logger.info(f"Password reset email sent to: {email}")

    def send_welcome_email(self, email: str, first_name: Optional[str] = None) -> None:
        html = _page(
            f"<h2>Welcome, {first_name or 'there'}!</h2>"
            "<p>Your email has been verified successfully!</p>"
            "<p>Start browsing our collection.</p>"
            f'<div class="footer"><p>Thank you for choosing {STORE_NAME}!</p></div>'
        )
        self.send(email, f"Welcome to {STORE_NAME}!", html)
        logger.info(f"Welcome email sent to: {email}")


email_service = EmailService()


def get_email_service() -> EmailService:
    """FastAPI dependency, overridable in tests"""
    return email_service
