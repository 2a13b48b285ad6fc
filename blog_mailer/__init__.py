"""Transactional mail helper for Blogify."""

from .config import Settings
from .mailer import (
    DeliveryError,
    InvalidMessageError,
    MailError,
    Mailer,
    NotConfiguredError,
    build_mailer,
)
from .models import OutgoingMessage, SendResult
from .transport import init_client, select_profile

__all__ = [
    "DeliveryError",
    "InvalidMessageError",
    "MailError",
    "Mailer",
    "NotConfiguredError",
    "OutgoingMessage",
    "SendResult",
    "Settings",
    "build_mailer",
    "init_client",
    "select_profile",
]
