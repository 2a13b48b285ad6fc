from __future__ import annotations

from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import List, Optional, Union

from .config import (
    GMAIL_SMTP_HOST,
    GMAIL_SMTP_PORT,
    SENDGRID_SMTP_HOST,
    SENDGRID_SMTP_PORT,
    SENDGRID_SMTP_USER,
)
from .utils import is_blank, sender_domain


@dataclass(frozen=True)
class SendGridSmtp:
    api_key: str = field(repr=False)

    host = SENDGRID_SMTP_HOST
    port = SENDGRID_SMTP_PORT
    secure = False
    user = SENDGRID_SMTP_USER

    @property
    def password(self) -> str:
        return self.api_key

    def describe(self) -> str:
        return "sendgrid-smtp"


@dataclass(frozen=True)
class CustomSmtp:
    host: str
    port: int
    secure: bool
    user: str
    password: str = field(repr=False)

    def describe(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class GmailService:
    user: str
    password: str = field(repr=False)

    host = GMAIL_SMTP_HOST
    port = GMAIL_SMTP_PORT
    secure = True

    def describe(self) -> str:
        return "gmail-service"


@dataclass(frozen=True)
class Unconfigured:
    def describe(self) -> str:
        return "none"


SmtpProfile = Union[SendGridSmtp, CustomSmtp, GmailService]
TransportProfile = Union[SendGridSmtp, CustomSmtp, GmailService, Unconfigured]


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    subject: str
    from_addr: str
    html: Optional[str] = None
    text: Optional[str] = None
    # Generated from the sender's domain when not supplied
    message_id: Optional[str] = None

    def missing_fields(self) -> List[str]:
        missing: List[str] = []
        if is_blank(self.to):
            missing.append("to")
        if is_blank(self.subject):
            missing.append("subject")
        if is_blank(self.html) and is_blank(self.text):
            missing.append("html or text")
        return missing

    def unsafe_headers(self) -> List[str]:
        """Header fields carrying CR/LF, which could inject extra headers."""
        fields = {
            "to": self.to,
            "subject": self.subject,
            "from": self.from_addr,
            "message_id": self.message_id,
        }
        return [name for name, value in fields.items() if value and ("\r" in value or "\n" in value)]

    def to_email_message(self) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.from_addr
        msg["To"] = self.to
        msg["Subject"] = self.subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = self.message_id or make_msgid(domain=sender_domain(self.from_addr))

        has_text = not is_blank(self.text)
        has_html = not is_blank(self.html)
        if has_text:
            msg.set_content(self.text)
            if has_html:
                msg.add_alternative(self.html, subtype="html")
        elif has_html:
            msg.set_content(self.html, subtype="html")
        return msg


@dataclass(frozen=True)
class SendResult:
    message_id: str
    response: str = ""
    rejected: List[str] = field(default_factory=list)
