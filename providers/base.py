"""
Abstract base class for mailbox gateways.

Defines the capabilities the reply loop consumes, so the loop never talks
to a mail API directly.
"""

from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import List

from autoreply.models import Thread


class MailboxGateway(ABC):
    """
    Abstract base class for mailbox gateway implementations.

    The class supports the context manager protocol for clean connection
    management.

    Example:
        with GmailGateway() as gateway:
            for thread_id in gateway.list_unread():
                thread = gateway.get_thread(thread_id)
                ...

    Attributes:
        name: Human-readable gateway name
    """

    name: str = "abstract"

    def __enter__(self) -> "MailboxGateway":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    @abstractmethod
    def connect(self) -> None:
        """
        Establish connection to the mail service.

        Raises:
            RuntimeError: If credentials are missing or invalid
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection. Safe to call more than once."""

    @abstractmethod
    def list_unread(self) -> List[str]:
        """
        List the ids of unread threads, in the order the provider returns them.
        """

    @abstractmethod
    def get_thread(self, thread_id: str) -> Thread:
        """
        Fetch a thread with its messages, headers and labels.

        Args:
            thread_id: Provider thread identifier
        """

    @abstractmethod
    def send_message(self, message: EmailMessage) -> None:
        """
        Send a fully built message.

        Args:
            message: The reply to send
        """

    @abstractmethod
    def ensure_label(self, name: str) -> str:
        """
        Ensure a label exists, creating it if necessary.

        Args:
            name: Label name

        Returns:
            The provider-specific label ID
        """

    @abstractmethod
    def apply_label(self, thread_id: str, label_id: str) -> None:
        """
        Add a label to a thread and clear its unread marker.

        Args:
            thread_id: Thread to modify
            label_id: Label ID returned by ensure_label()
        """

    @abstractmethod
    def get_own_address(self) -> str:
        """Return the address of the authenticated mailbox."""
