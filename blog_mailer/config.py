from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# --------------------------------
# Transport constants

# SendGrid SMTP relay. The username is always the literal "apikey".
SENDGRID_SMTP_HOST = "smtp.sendgrid.net"
SENDGRID_SMTP_PORT = 587
SENDGRID_SMTP_USER = "apikey"

GMAIL_SMTP_HOST = "smtp.gmail.com"
GMAIL_SMTP_PORT = 465

# Port used for EMAIL_HOST when EMAIL_PORT is not set
DEFAULT_SMTP_PORT = 465

# Per-connection timeout handed to the SMTP client (seconds)
SMTP_TIMEOUT_SECONDS = 30.0

DEFAULT_FROM_NAME = "Blogify"
FALLBACK_FROM_EMAIL = "no-reply@example.com"
# --------------------------------


@dataclass(frozen=True)
class Settings:
    sendgrid_api_key: str | None = None
    email_host: str | None = None
    # Kept raw; only the custom-host profile parses them
    email_port: str | None = None
    email_secure: str | None = None
    email_user: str | None = None
    email_pass: str | None = None
    email_from: str | None = None
    from_name: str = DEFAULT_FROM_NAME

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        from_name_default: str = DEFAULT_FROM_NAME,
    ) -> "Settings":
        e = env if env is not None else os.environ

        def optional(name: str) -> str | None:
            value = e.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        def present(name: str) -> str | None:
            value = e.get(name)
            return value.strip() if value is not None else None

        return Settings(
            sendgrid_api_key=optional("SENDGRID_API_KEY"),
            email_host=optional("EMAIL_HOST"),
            email_port=optional("EMAIL_PORT"),
            # A blank EMAIL_SECURE is still "set" and means false
            email_secure=present("EMAIL_SECURE"),
            email_user=optional("EMAIL_USER"),
            email_pass=optional("EMAIL_PASS"),
            email_from=optional("EMAIL_FROM"),
            from_name=from_name_default,
        )
