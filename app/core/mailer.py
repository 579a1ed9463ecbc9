import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.exceptions import MailError

log = logging.getLogger(__name__)


def _format_from(from_email: str, from_name: str = "") -> str:
    if from_name:
        return f"{from_name} <{from_email}>"
    return from_email


class SmtpMailer:
    """
    Plain-text mail over SMTP.

    Port 465 uses implicit TLS, anything else STARTTLS. When host, user or
    password are missing the mailer runs in debug mode: the message is logged
    and nothing is sent.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email or user
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            timeout=settings.smtp_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def build_message(self, to: str, subject: str, body: str, sender_name: str = "") -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = _format_from(self.from_email or "", sender_name)
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send_sync(self, to: str, subject: str, body: str, sender_name: str = "") -> None:
        if not self.configured:
            log.info("EMAIL DEBUG MODE: SMTP not configured. Would send to %s (subject=%s)", to, subject)
            log.debug("Body: %s", body)
            return

        msg = self.build_message(to, subject, body, sender_name)
        context = ssl.create_default_context()
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as smtp:
                    smtp.login(self.user, self.password)
                    smtp.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                    smtp.ehlo()
                    smtp.starttls(context=context)
                    smtp.ehlo()
                    smtp.login(self.user, self.password)
                    smtp.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            raise MailError("SMTP authentication failed. Check SMTP_USER / SMTP_PASSWORD.") from e
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"Email sending failed: {e}") from e
        log.info("Email sent to %s (subject: %s)", to, subject)

    async def send(self, to: str, subject: str, body: str, sender_name: str = "") -> None:
        """Send one message; raises MailError on failure."""
        await run_in_threadpool(self.send_sync, to, subject, body, sender_name)
