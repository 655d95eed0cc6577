"""
Operator alerts: printed always, emailed when SMTP is configured.
"""

import asyncio
import smtplib
from email.mime.text import MIMEText
from typing import Optional


class AdminNotifier:
    """Delivers operator-facing alerts about publishing problems."""

    def __init__(
        self,
        admin_email: Optional[str] = None,
        from_email: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
    ):
        self.admin_email = admin_email
        self.from_email = from_email
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port

    @property
    def email_enabled(self) -> bool:
        return bool(self.admin_email and self.from_email and self.smtp_host)

    def _send_email(self, subject: str, body: str) -> None:
        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = self.admin_email

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.sendmail(self.from_email, [self.admin_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            print(f"[ALERT] ✗ Failed to email admin: {e}")

    async def notify_operator(self, message: str, subject: str = "Oracle alert") -> None:
        """Report a problem to the operator. Never raises on delivery failure."""
        print(f"[ALERT] {subject}: {message}")
        if self.email_enabled:
            await asyncio.to_thread(self._send_email, subject, message)

    async def notify_about_posting_problem(self, message: str) -> None:
        await self.notify_operator(message, subject="Posting problem")

    async def notify_about_failed_posting(self, error: Exception) -> None:
        await self.notify_operator(f"Failed to post data feed: {error}", subject="Failed posting")
