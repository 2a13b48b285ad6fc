from __future__ import annotations

from blog_mailer.models import CustomSmtp, GmailService, OutgoingMessage, SendGridSmtp, Unconfigured


def test_profiles_describe_without_secrets():
    profiles = [
        SendGridSmtp(api_key="SG.very-secret"),
        CustomSmtp(host="smtp.example.com", port=465, secure=True, user="u", password="very-secret"),
        GmailService(user="user@gmail.com", password="very-secret"),
        Unconfigured(),
    ]
    assert [p.describe() for p in profiles] == [
        "sendgrid-smtp",
        "smtp.example.com:465",
        "gmail-service",
        "none",
    ]
    for profile in profiles:
        assert "very-secret" not in repr(profile)


def test_missing_fields_lists_every_problem():
    message = OutgoingMessage(to=" ", subject="", from_addr="Blogify <b@example.com>")
    assert message.missing_fields() == ["to", "subject", "html or text"]


def test_text_only_message_is_plain():
    msg = OutgoingMessage(to="a@b.com", subject="s", text="hello", from_addr="b@example.com").to_email_message()
    assert msg.get_content_type() == "text/plain"
    assert msg.get_content().strip() == "hello"
    assert msg["Date"]


def test_html_only_message_is_html():
    msg = OutgoingMessage(to="a@b.com", subject="s", html="<p>x</p>", from_addr="b@example.com").to_email_message()
    assert msg.get_content_type() == "text/html"


def test_text_and_html_message_is_alternative():
    msg = OutgoingMessage(
        to="a@b.com",
        subject="s",
        text="hello",
        html="<p>hello</p>",
        from_addr="Blogify <b@example.com>",
    ).to_email_message()
    assert msg.get_content_type() == "multipart/alternative"
    assert [part.get_content_type() for part in msg.iter_parts()] == ["text/plain", "text/html"]
    assert msg["Message-ID"].endswith("@example.com>")


def test_unsafe_headers_flags_line_breaks():
    message = OutgoingMessage(
        to="a@b.com",
        subject="Hi\r\nBcc: evil@x.com",
        text="t",
        from_addr="b@example.com\n",
    )
    assert message.unsafe_headers() == ["subject", "from"]


def test_unsafe_headers_ignores_body_line_breaks():
    message = OutgoingMessage(to="a@b.com", subject="s", text="line 1\nline 2", from_addr="b@example.com")
    assert message.unsafe_headers() == []
