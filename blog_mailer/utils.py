from __future__ import annotations

from email.utils import formataddr, parseaddr


def parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable EMAIL_PORT must be a number: {value}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Environment variable EMAIL_PORT is out of range: {value}")
    return port


def parse_secure_flag(value: str) -> bool:
    """Only the exact string "true" enables implicit TLS; blank means false."""
    return value.strip() == "true"


def default_secure(port: int) -> bool:
    return port == 465


def format_sender(name: str, address: str) -> str:
    return formataddr((name, address))


def sender_domain(from_addr: str) -> str | None:
    """
    Domain part of a From header, used for Message-ID generation.

    Returns None when the header carries no usable address.
    """
    _, address = parseaddr(from_addr)
    if "@" not in address:
        return None
    domain = address.rsplit("@", 1)[1].strip()
    return domain or None


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
