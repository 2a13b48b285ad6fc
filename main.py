from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from blog_mailer import config
from blog_mailer.mailer import MailError, build_mailer


async def _send_test(recipient: str, subject: str) -> None:
    mailer = build_mailer(config.Settings.from_env())
    if mailer.configured and not await mailer.wait_verification():
        logging.warning("Verification did not succeed; attempting to send anyway.")
    result = await mailer.send_email(
        to=recipient,
        subject=subject,
        text="This is a test message from Blogify.",
        html="<p>This is a test message from <strong>Blogify</strong>.</p>",
    )
    logging.info("Test message accepted: message_id=%s response=%s", result.message_id, result.response)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Send a test email with the configured transport.")
    parser.add_argument("recipient")
    parser.add_argument("--subject", default="Blogify test email")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        asyncio.run(_send_test(args.recipient, args.subject))
    except ValueError as exc:
        logging.error("Invalid configuration: %s", exc)
        sys.exit(1)
    except MailError as exc:
        logging.error("Test email failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
