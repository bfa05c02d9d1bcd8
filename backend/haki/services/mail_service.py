# Overview: Outbound email for OTP delivery behind a small mailer interface.

"""
Mailers

create_app() binds one mailer per app (see extensions.get_mailer):
- SmtpMailer: STARTTLS SMTP relay (Gmail in production).
- OutboxMailer: keeps the latest messages in memory and logs them; used locally
  and in tests so OTP codes can be read back without a mail server.
"""

from __future__ import annotations

import smtplib
from collections import deque
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

from flask import current_app

from ..extensions import get_mailer


OUTBOX_LIMIT = 100

OTP_BODY_TEMPLATE = (
    "Mã OTP của bạn là: <strong>{otp}</strong>. "
    "Vui lòng sử dụng mã này để hoàn tất quá trình."
)


class MailDeliveryError(Exception):
    """Raised when the mail relay rejects or cannot accept a message."""


@dataclass
class SentMessage:
    to: str
    subject: str
    html_body: str


class OutboxMailer:
    """Keeps only the most recent `limit` messages."""

    def __init__(self, limit: int = OUTBOX_LIMIT):
        self.outbox: deque[SentMessage] = deque(maxlen=limit)

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.outbox.append(SentMessage(to=to, subject=subject, html_body=html_body))
        current_app.logger.info("Queued mail to %s: %s", to, subject)

    def clear(self) -> None:
        self.outbox.clear()


class SmtpMailer:
    def __init__(self, *, server: str, port: int, username: str, password: str,
                 sender: str, sender_name: str, timeout: float = 10.0):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.sender_name = sender_name
        self.timeout = timeout

    def send(self, to: str, subject: str, html_body: str) -> None:
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.sender))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"Could not deliver mail to {to}") from exc


def build_mailer(config) -> OutboxMailer | SmtpMailer:
    backend = config.get("MAIL_BACKEND", "smtp")
    if backend == "smtp":
        return SmtpMailer(
            server=config["MAIL_SERVER"],
            port=config["MAIL_PORT"],
            username=config["MAIL_USERNAME"],
            password=config["MAIL_PASSWORD"],
            sender=config["MAIL_SENDER"],
            sender_name=config["MAIL_SENDER_NAME"],
        )
    if backend == "outbox":
        return OutboxMailer(config.get("MAIL_OUTBOX_LIMIT", OUTBOX_LIMIT))
    raise ValueError(f"Unknown MAIL_BACKEND: {backend}")


def send_otp_email(to: str, subject: str, otp: str) -> None:
    get_mailer().send(to, subject, OTP_BODY_TEMPLATE.format(otp=otp))
