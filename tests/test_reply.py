"""
Tests for autoreply/reply.py - reply construction and encoding.
"""

import base64
import email

from autoreply.reply import build_reply, encode_message, extract_address, is_same_address


def test_build_reply_headers():
    msg = build_reply("Jane <jane@example.com>", "Re: Your Message", "Thanks for contacting.")

    assert msg["To"] == "Jane <jane@example.com>"
    assert msg["Subject"] == "Re: Your Message"
    assert msg["MIME-Version"] == "1.0"
    assert msg.get_content_type() == "text/plain"
    assert msg.get_content_charset() == "utf-8"


def test_encoded_message_decodes_back():
    msg = build_reply("a@x.com", "Re: Your Message", "Gracias por escribir, señor.")
    raw = encode_message(msg)

    assert "+" not in raw and "/" not in raw
    parsed = email.message_from_bytes(base64.urlsafe_b64decode(raw))
    assert parsed["To"] == "a@x.com"
    body = parsed.get_payload(decode=True).decode(parsed.get_content_charset())
    assert body.strip() == "Gracias por escribir, señor."


def test_extract_address():
    assert extract_address("Jane Doe <Jane@Example.com>") == "jane@example.com"
    assert extract_address("plain@example.com") == "plain@example.com"
    assert extract_address("") == ""


def test_is_same_address():
    assert is_same_address("Me <me@example.com>", "ME@example.com")
    assert not is_same_address("other@example.com", "me@example.com")
    assert not is_same_address("", "")
