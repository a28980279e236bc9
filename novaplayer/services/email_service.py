"""
Email delivery for account verification and password reset.

Sends through the SendGrid REST API. Without SENDGRID_API_KEY the
message is logged instead of sent, which is what development and tests
rely on.
"""

import html
import logging

import requests
from flask import current_app

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailService:
    """Service for sending transactional email."""

    @staticmethod
    def send_email(to_email: str, subject: str, html_content: str) -> bool:
        """
        Send one HTML email.

        Returns:
            True if SendGrid accepted the message, False otherwise.
            Delivery failures are logged, never raised.
        """
        api_key = current_app.config.get("SENDGRID_API_KEY")
        if not api_key:
            logger.info(f"[EMAIL NOT SENT - No SendGrid API key] To: {to_email}")
            logger.info(f"[EMAIL] Subject: {subject}")
            return False

        data = {
            "personalizations": [
                {"to": [{"email": to_email}], "subject": subject}
            ],
            "from": {"email": current_app.config.get("MAIL_FROM")},
            "content": [{"type": "text/html", "value": html_content}],
        }
        try:
            response = requests.post(
                SENDGRID_URL,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json=data,
                timeout=10,
            )
        except requests.RequestException as e:
            logger.error(f"Email send failed to {to_email}: {e}")
            return False

        if response.status_code in (200, 202):
            logger.info(f"Email sent to {to_email}: {response.status_code}")
            return True
        logger.error(
            f"Email send failed: {response.status_code} - {response.text}"
        )
        return False

    @staticmethod
    def send_verification_email(email: str, name: str, code: str) -> bool:
        html_content = (
            f"<b>Hi {html.escape(name or '')}</b><br>"
            f"Your NovaPlayer verification code is: <h1>{code}</h1>"
        )
        return EmailService.send_email(
            email, "Verify your account - security code", html_content
        )

    @staticmethod
    def send_password_reset_email(email: str, token: str) -> bool:
        frontend_url = current_app.config.get("FRONTEND_URL", "").rstrip("/")
        reset_url = f"{frontend_url}/reset-password?token={token}"
        html_content = f"""
        <h3>You asked to reset your password</h3>
        <p>Follow this link to choose a new one:</p>
        <a href="{reset_url}">Reset password</a>
        <p>This link expires in 1 hour.</p>
        """
        return EmailService.send_email(email, "Reset your password", html_content)
