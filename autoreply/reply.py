"""
Reply message construction.

Builds the static acknowledgement and encodes it for the Gmail send call.
"""

import base64
from email.message import EmailMessage
from email.utils import parseaddr


def extract_address(header_value: str) -> str:
    """
    Return the bare, lower-cased address from a From/To header value.

    "Jane Doe <Jane@Example.com>" -> "jane@example.com"
    """
    _, address = parseaddr(header_value or "")
    return address.strip().lower()


def is_same_address(a: str, b: str) -> bool:
    """Compare two header values by their bare address."""
    addr_a = extract_address(a)
    return bool(addr_a) and addr_a == extract_address(b)


def build_reply(to: str, subject: str, body: str) -> EmailMessage:
    """
    Build a minimal plain-text reply.

    Args:
        to: Recipient, exactly as it appeared in the incoming From header
        subject: Reply subject
        body: Plain-text body

    Returns:
        EmailMessage with text/plain UTF-8 content
    """
    msg = EmailMessage()
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body, charset="utf-8")
    return msg


def encode_message(msg: EmailMessage) -> str:
    """Encode a message as the base64url 'raw' string the Gmail API expects."""
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii")
