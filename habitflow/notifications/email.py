from __future__ import annotations
from email.message import EmailMessage

import aiosmtplib
from loguru import logger

from ..config import settings

SEND_TIMEOUT_SECONDS = 10


class EmailDispatcher:
    """
    Outbound email over SMTP. send() never raises: failures are logged and
    reported through the return value, and nothing is retried.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port if port is not None else settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.EMAIL_FROM

    @property
    def configured(self) -> bool:
        return bool(self.host)

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    async def send(self, to: str, subject: str, body: str) -> bool:
        if not self.configured:
            logger.warning("SMTP is not configured; dropping email '{}' to {}", subject, to)
            return False
        try:
            await aiosmtplib.send(
                self.build_message(to, subject, body),
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=settings.SMTP_USE_TLS,
                start_tls=settings.SMTP_START_TLS and not settings.SMTP_USE_TLS,
                timeout=SEND_TIMEOUT_SECONDS,
            )
            logger.info("Sent email '{}' to {}", subject, to)
            return True
        except Exception as e:
            logger.error("Email send to {} failed: {}", to, e)
            return False
