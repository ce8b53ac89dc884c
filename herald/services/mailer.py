"""SMTP email transport."""

import logging
import ssl
from collections.abc import Sequence
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from pathlib import Path
from typing import Protocol

import aiosmtplib

from herald.core.config import settings

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    async def send_email(
        self,
        subject: str,
        content: str,
        to: Sequence[str],
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        attach_files: Sequence[str | Path] = (),
    ) -> None: ...


class Mailer:
    """Sends HTML mail through an authenticated SMTP relay using STARTTLS."""

    def __init__(
        self,
        name: str,
        from_address: str,
        password: str,
        host: str = "smtp.gmail.com",
        port: int = 587,
    ) -> None:
        self.name = name
        self.from_address = from_address
        self.password = password
        self.host = host
        self.port = port

    def build_message(
        self,
        subject: str,
        content: str,
        to: Sequence[str],
        cc: Sequence[str] = (),
        attach_files: Sequence[str | Path] = (),
    ) -> MIMEMultipart:
        """Assemble the MIME message; bcc recipients never appear in headers."""
        msg = MIMEMultipart()
        msg["From"] = formataddr((self.name, self.from_address))
        msg["To"] = ", ".join(to)
        if cc:
            msg["Cc"] = ", ".join(cc)
        msg["Subject"] = subject
        msg.attach(MIMEText(content, "html", "utf-8"))

        for file in attach_files:
            path = Path(file)
            part = MIMEApplication(path.read_bytes(), Name=path.name)
            part["Content-Disposition"] = f'attachment; filename="{path.name}"'
            msg.attach(part)
        return msg

    async def send_email(
        self,
        subject: str,
        content: str,
        to: Sequence[str],
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        attach_files: Sequence[str | Path] = (),
    ) -> None:
        """Send an HTML email. Transport errors propagate to the caller."""
        msg = self.build_message(subject, content, to, cc, attach_files)
        recipients = [*to, *cc, *bcc]
        await aiosmtplib.send(
            msg,
            sender=self.from_address,
            recipients=recipients,
            hostname=self.host,
            port=self.port,
            username=self.from_address or None,
            password=self.password or None,
            start_tls=True,
            tls_context=ssl.create_default_context(),
        )
        logger.info("email sent", extra={"subject": subject, "recipients": len(recipients)})


def get_mailer() -> Mailer:
    """Build the mailer from settings."""
    return Mailer(
        name=settings.mailer_name,
        from_address=settings.mailer_email_address,
        password=settings.mailer_email_password,
        host=settings.smtp_host,
        port=settings.smtp_port,
    )
