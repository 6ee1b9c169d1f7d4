"""
Mailbox gateway implementations.

This package contains adapters for mail services, all implementing the
abstract MailboxGateway interface consumed by the reply loop.

Supported Gateways:
    - GmailGateway: Gmail API (google-api-python-client)
"""

from providers.base import MailboxGateway

__all__ = [
    "MailboxGateway",
]

# Lazy import to avoid loading the Google client stack when unused
def get_gmail_gateway():
    from providers.gmail import GmailGateway
    return GmailGateway
