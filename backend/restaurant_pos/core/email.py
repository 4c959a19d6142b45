"""
Email service for the restaurant POS.
Sends transactional mail (bills) over SMTP.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Dict, Optional

from restaurant_pos.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """SMTP email sender returning a result dict instead of raising."""

    def __init__(self, smtp_host: Optional[str] = None, smtp_port: int = 587):
        self.smtp_host = smtp_host or "localhost"
        self.smtp_port = smtp_port
        self.username = ""
        self.password = ""
        self.use_tls = True
        self.from_email = ""
        self.from_name = ""
        self.configured = False

    def configure(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_email: str = "",
        from_name: str = "",
    ) -> None:
        """Configure SMTP settings"""
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_email = from_email or username
        self.from_name = from_name
        self.configured = bool(username and password)
        if self.configured:
            logger.info(f"Email service configured for {smtp_host}")

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email

        Args:
            to: Recipient email address
            subject: Email subject
            body: Plain text body
            html_body: Optional HTML body

        Returns:
            {"success": True, "message": ...} or {"success": False, "error": ...}
        """
        if not self.configured:
            logger.warning(f"Email not configured, would send to {to}: {subject}")
            return {"success": False, "error": "Email service is not configured"}

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_email)) if self.from_name else self.from_email
        msg["To"] = to
        msg.attach(MIMEText(body, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.from_email, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return {"success": False, "error": str(e) or "Failed to send email"}

        logger.info(f"Email sent to {to}: {subject}")
        return {"success": True, "message": "Email sent successfully"}


# Global email service instance
_email_service = EmailService()
_email_service.configure(
    smtp_host=settings.smtp_host,
    smtp_port=settings.smtp_port,
    username=settings.smtp_user,
    password=settings.smtp_password,
    use_tls=settings.smtp_use_tls,
    from_email=settings.smtp_from_email,
    from_name=settings.smtp_from_name,
)


def get_email_service() -> EmailService:
    return _email_service
