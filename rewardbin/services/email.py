"""
Email service for sending transactional emails
"""

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import asyncio
from jinja2 import Template
import logging

from rewardbin.core.config import Settings

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = """
<html>
    <body>
        <h2>Welcome to {{ app_name }}, {{ name }}!</h2>
        <p>Thank you for joining. Scan a bin, recycle, and collect points you can trade for coupons.</p>
        <a href="{{ frontend_url }}" style="background-color: #16A34A; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">
            Get Started
        </a>
    </body>
</html>
"""

RESET_PASSWORD_TEMPLATE = """
<html>
    <body>
        <h2>Reset your password</h2>
        <p>Hi {{ name }}, we received a request to reset your password.</p>
        <p>The link below is valid for {{ expires_minutes }} minutes.</p>
        <a href="{{ reset_url }}" style="background-color: #16A34A; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">
            Reset Password
        </a>
        <p>If you did not ask for this, you can ignore this email.</p>
    </body>
</html>
"""


class EmailService:
    """Email service using SMTP"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME

    @property
    def configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send email asynchronously

        Args:
            to_email: Recipient email
            subject: Email subject
            html_content: HTML content
            text_content: Plain text content

        Returns:
            True if sent successfully
        """
        if not self.configured:
            logger.warning(f"SMTP not configured, skipping email '{subject}' to {to_email}")
            return False

        try:
            # Run in thread pool to avoid blocking
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None,
                self._send_email_sync,
                to_email,
                subject,
                html_content,
                text_content
            )
        except Exception as e:
            logger.error(f"Failed to send email: {str(e)}")
            return False

    def _send_email_sync(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = to_email

        if text_content:
            msg.attach(MIMEText(text_content, 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
            return True
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error: {str(e)}")
            return False

    async def send_welcome_email(self, user_email: str, user_name: str) -> bool:
        """Send welcome email to new user"""
        html_content = Template(WELCOME_TEMPLATE).render(
            app_name=self.settings.APP_NAME,
            name=user_name,
            frontend_url=self.settings.FRONTEND_URL,
        )

        return await self.send_email(
            to_email=user_email,
            subject=f"Welcome to {self.settings.APP_NAME}!",
            html_content=html_content
        )

    async def send_reset_password_email(self, user_email: str, user_name: str, token: str) -> bool:
        """Send the password reset link"""
        reset_url = f"{self.settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        html_content = Template(RESET_PASSWORD_TEMPLATE).render(
            name=user_name,
            reset_url=reset_url,
            expires_minutes=self.settings.RESET_PASSWORD_TOKEN_EXPIRE_MINUTES,
        )

        return await self.send_email(
            to_email=user_email,
            subject="Reset your password",
            html_content=html_content,
            text_content=f"Reset your password: {reset_url}"
        )
