from __future__ import annotations

import logging
from email.message import EmailMessage
from typing import Dict, Optional, Protocol, Tuple

import aiosmtplib

from .config import DEFAULT_SMTP_PORT, SMTP_TIMEOUT_SECONDS, Settings
from .models import (
    CustomSmtp,
    GmailService,
    SendGridSmtp,
    SmtpProfile,
    TransportProfile,
    Unconfigured,
)
from .utils import default_secure, parse_port, parse_secure_flag

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    provider: str

    async def verify(self) -> None: ...

    async def send(self, message: EmailMessage) -> Tuple[Dict[str, object], str]: ...


def select_profile(settings: Settings) -> TransportProfile:
    """
    Provider selection (first match wins, groups are never merged):
    - SENDGRID_API_KEY set: SendGrid SMTP relay.
    - EMAIL_HOST, EMAIL_USER and EMAIL_PASS set: custom SMTP host.
    - EMAIL_USER and EMAIL_PASS set: Gmail.
    - Otherwise unconfigured.

    EMAIL_PORT and EMAIL_SECURE are parsed only for the custom host; a
    malformed EMAIL_PORT raises ValueError there and nowhere else.
    """
    if settings.sendgrid_api_key:
        return SendGridSmtp(api_key=settings.sendgrid_api_key)
    if settings.email_host and settings.email_user and settings.email_pass:
        port = parse_port(settings.email_port) if settings.email_port is not None else DEFAULT_SMTP_PORT
        if settings.email_secure is not None:
            secure = parse_secure_flag(settings.email_secure)
        else:
            secure = default_secure(port)
        return CustomSmtp(
            host=settings.email_host,
            port=port,
            secure=secure,
            user=settings.email_user,
            password=settings.email_pass,
        )
    if settings.email_user and settings.email_pass:
        return GmailService(user=settings.email_user, password=settings.email_pass)
    return Unconfigured()


class SmtpTransport:
    """Opens a fresh SMTP connection per operation; safe to share between tasks."""

    def __init__(self, profile: SmtpProfile, *, timeout: float = SMTP_TIMEOUT_SECONDS):
        self._profile = profile
        self._timeout = timeout
        self.provider = profile.describe()

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self._profile.host,
            port=self._profile.port,
            username=self._profile.user,
            password=self._profile.password,
            use_tls=self._profile.secure,
            # None upgrades with STARTTLS when the server offers it
            start_tls=False if self._profile.secure else None,
            timeout=self._timeout,
        )

    async def verify(self) -> None:
        smtp = self._client()
        async with smtp:
            await smtp.noop()

    async def send(self, message: EmailMessage) -> Tuple[Dict[str, object], str]:
        smtp = self._client()
        async with smtp:
            return await smtp.send_message(message)


def init_client(profile: TransportProfile, *, timeout: float = SMTP_TIMEOUT_SECONDS) -> Optional[SmtpTransport]:
    if isinstance(profile, Unconfigured):
        return None
    logger.debug("Creating SMTP transport for provider=%s", profile.describe())
    return SmtpTransport(profile, timeout=timeout)
