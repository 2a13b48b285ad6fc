from __future__ import annotations

import asyncio
import logging
import threading
from typing import NoReturn, Optional, Union

from .config import FALLBACK_FROM_EMAIL, Settings
from .models import OutgoingMessage, SendResult, TransportProfile, Unconfigured
from .transport import MailTransport, init_client, select_profile
from .utils import format_sender

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Email transport not configured. Please set SENDGRID_API_KEY or EMAIL_HOST/EMAIL_USER/EMAIL_PASS."
)


class MailError(Exception):
    """Raised when mail sending fails."""


class NotConfiguredError(MailError):
    """Raised when no transport profile could be resolved from configuration."""


class InvalidMessageError(MailError):
    """Raised when a message lacks a recipient, a subject or a body."""


class DeliveryError(MailError):
    """Raised when the SMTP provider rejects the message or cannot be reached.

    ``code`` and ``response`` carry the SMTP reply when the provider sent one.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        code: Optional[int] = None,
        response: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.code = code
        self.response = response


def default_sender(settings: Settings) -> str:
    if settings.email_from:
        return settings.email_from
    if settings.email_user:
        return format_sender(settings.from_name, settings.email_user)
    return format_sender(settings.from_name, FALLBACK_FROM_EMAIL)


class Mailer:
    """Send handle bound to one transport profile for the life of the process."""

    def __init__(
        self,
        profile: TransportProfile,
        transport: Optional[MailTransport],
        *,
        default_from: str,
    ):
        self.profile = profile
        self._transport = transport
        self._default_from = default_from
        self._verification: Union[asyncio.Task, threading.Thread, None] = None
        # None until the startup handshake finishes
        self.verified: Optional[bool] = None

    @property
    def provider(self) -> str:
        return self.profile.describe()

    @property
    def configured(self) -> bool:
        return self._transport is not None

    def start_verification(self) -> Union[asyncio.Task, threading.Thread, None]:
        """
        Start the one-off connectivity/credential check without waiting for it.

        Inside a running event loop the check is scheduled as a task; otherwise
        it runs on a daemon thread. The outcome is only logged and stored in
        ``verified``; sending works regardless of it.
        """
        if self._transport is None or self._verification is not None:
            return self._verification
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            thread = threading.Thread(
                target=asyncio.run,
                args=(self._verify(),),
                name="blog-mailer-verify",
                daemon=True,
            )
            thread.start()
            self._verification = thread
        else:
            self._verification = loop.create_task(self._verify())
        return self._verification

    async def wait_verification(self) -> Optional[bool]:
        verification = self._verification
        if isinstance(verification, asyncio.Task):
            await verification
        elif isinstance(verification, threading.Thread):
            await asyncio.to_thread(verification.join)
        return self.verified

    async def _verify(self) -> None:
        transport = self._transport
        if transport is None:
            return
        try:
            await transport.verify()
        except Exception as exc:  # noqa: BLE001
            self.verified = False
            logger.error("SMTP transport verification failed (provider=%s): %s", self.provider, exc)
            return
        self.verified = True
        logger.info("SMTP transport verified and ready to send emails (provider=%s)", self.provider)

    async def send_email(
        self,
        *,
        to: str,
        subject: str,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> SendResult:
        message = OutgoingMessage(
            to=to,
            subject=subject,
            from_addr=self._default_from,
            html=html,
            text=text,
        )
        return await self.send(message)

    async def send(self, message: OutgoingMessage) -> SendResult:
        if self._transport is None:
            logger.error(
                "%s to=%s subject=%s provider=%s", NOT_CONFIGURED_MESSAGE, message.to, message.subject, self.provider
            )
            raise NotConfiguredError(NOT_CONFIGURED_MESSAGE)

        missing = message.missing_fields()
        if missing:
            self._reject(
                message,
                "Invalid email options. 'to', 'subject' and 'html' or 'text' are required "
                f"(missing: {', '.join(missing)}).",
            )
        unsafe = message.unsafe_headers()
        if unsafe:
            self._reject(message, f"Invalid email options. Line breaks are not allowed in: {', '.join(unsafe)}.")

        try:
            email_message = message.to_email_message()
        except ValueError as exc:
            self._reject(message, f"Invalid email options. {exc}", cause=exc)
        message_id = email_message["Message-ID"]
        try:
            refused, response = await self._transport.send(email_message)
        except Exception as exc:  # noqa: BLE001
            code = getattr(exc, "code", None)
            reply = getattr(exc, "message", None)
            logger.error(
                "Error sending email: to=%s subject=%s provider=%s code=%s response=%s error=%s",
                message.to,
                message.subject,
                self.provider,
                code,
                reply,
                exc,
            )
            raise DeliveryError(
                f"Failed to send email: {exc}",
                provider=self.provider,
                code=code if isinstance(code, int) else None,
                response=reply if isinstance(reply, str) else None,
            ) from exc

        if refused:
            logger.warning("Provider refused recipients %s for message_id=%s", sorted(refused), message_id)
        logger.info("Email queued/sent to %s. message_id=%s", message.to, message_id)
        return SendResult(message_id=message_id, response=response, rejected=sorted(refused))

    def _reject(self, message: OutgoingMessage, reason: str, cause: Optional[Exception] = None) -> NoReturn:
        logger.error("%s to=%r subject=%r provider=%s", reason, message.to, message.subject, self.provider)
        raise InvalidMessageError(reason) from cause


def build_mailer(settings: Settings, *, verify: bool = True) -> Mailer:
    profile = select_profile(settings)
    if isinstance(profile, Unconfigured):
        logger.warning(
            "No email provider configured. Set SENDGRID_API_KEY or EMAIL_HOST/EMAIL_USER/EMAIL_PASS."
        )
    mailer = Mailer(profile, init_client(profile), default_from=default_sender(settings))
    logger.info("Using mail provider=%s", mailer.provider)
    if verify:
        mailer.start_verification()
    return mailer
