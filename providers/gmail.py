"""
Gmail API gateway implementation.

Wraps the Gmail API (google-api-python-client) to implement the
MailboxGateway interface used by the reply loop.
"""

import logging
from email.message import EmailMessage
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from autoreply.models import Thread, ThreadMessage
from autoreply.reply import encode_message
from providers.base import MailboxGateway

logger = logging.getLogger(__name__)

# Default API scopes
DEFAULT_SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

DEFAULT_QUERY = "in:inbox is:unread"
UNREAD_LABEL = "UNREAD"
LIST_PAGE_SIZE = 100  # Threads per list page (API default)


class GmailGateway(MailboxGateway):
    """
    Gmail API gateway.

    Example:
        from providers.gmail import GmailGateway

        with GmailGateway() as gmail:
            for thread_id in gmail.list_unread():
                thread = gmail.get_thread(thread_id)
                label_id = gmail.ensure_label("REPLIED")
                gmail.apply_label(thread_id, label_id)
    """

    name = "gmail"

    def __init__(
        self,
        query: str = DEFAULT_QUERY,
        scopes: Optional[List[str]] = None,
        token_file: Optional[str] = None,
        credentials_file: Optional[str] = None,
        service: Optional[Any] = None,
    ):
        """
        Initialize Gmail gateway.

        Args:
            query: Gmail search used to list unread threads
            scopes: OAuth scopes (defaults to gmail.modify)
            token_file: Cached authorized-user token path
            credentials_file: OAuth client config path
            service: Optional pre-built Gmail service for testing
        """
        self.query = query
        self.scopes = scopes or DEFAULT_SCOPES
        self.token_file = token_file
        self.credentials_file = credentials_file
        self._service = service
        self._label_cache: Dict[str, str] = {}
        self._connected = False

    def connect(self) -> None:
        """Establish connection via OAuth."""
        if self._service is None:
            import gmail_auth
            self._service = gmail_auth.build_gmail_service(
                scopes=self.scopes,
                token_file=self.token_file,
                credentials_file=self.credentials_file,
            )
        self._connected = True
        self._init_label_cache()
        logger.info("Gmail gateway connected")

    def disconnect(self) -> None:
        """Disconnect (no-op for Gmail API)."""
        self._connected = False
        logger.debug("Gmail gateway disconnected")

    def _init_label_cache(self) -> None:
        """Fetch all label IDs so thread labels can be resolved to names."""
        results = self._service.users().labels().list(userId="me").execute()
        self._label_cache = {
            label["name"]: label["id"] for label in results.get("labels", [])
        }
        logger.debug(f"Cached {len(self._label_cache)} labels")

    def _label_names(self, label_ids: List[str]) -> set:
        by_id = {id_: name for name, id_ in self._label_cache.items()}
        if any(lid not in by_id for lid in label_ids):
            # A label was created elsewhere since the cache was built
            self._init_label_cache()
            by_id = {id_: name for name, id_ in self._label_cache.items()}
        return {by_id.get(lid, lid) for lid in label_ids}

    def list_unread(self) -> List[str]:
        """List unread thread ids, following page tokens."""
        thread_ids: List[str] = []
        page_token = None
        while True:
            results = self._service.users().threads().list(
                userId="me",
                q=self.query,
                maxResults=LIST_PAGE_SIZE,
                pageToken=page_token,
            ).execute()

            for thread in results.get("threads", []):
                thread_ids.append(thread["id"])

            page_token = results.get("nextPageToken")
            if not page_token:
                break
        return thread_ids

    def get_thread(self, thread_id: str) -> Thread:
        """
        Fetch a thread with message headers and labels.

        A thread deleted since it was listed comes back without messages.
        """
        try:
            data = self._service.users().threads().get(
                userId="me",
                id=thread_id,
                format="metadata",
                metadataHeaders=["From", "Subject"],
            ).execute()
        except HttpError as e:
            if e.resp.status == 404:
                logger.warning(f"Thread {thread_id} no longer exists")
                return Thread(id=thread_id)
            raise
        return self._parse_thread_response(thread_id, data)

    def _parse_thread_response(self, thread_id: str, data: dict) -> Thread:
        """Parse a Gmail thread response into a Thread."""
        messages = []
        all_label_ids: List[str] = []
        for msg in data.get("messages", []) or []:
            headers = msg.get("payload", {}).get("headers", [])
            sender = ""
            subject = ""
            for h in headers:
                name = h.get("name", "").lower()
                if name == "from":
                    sender = h.get("value", "")
                elif name == "subject":
                    subject = h.get("value", "")

            label_ids = msg.get("labelIds", [])
            for lid in label_ids:
                if lid not in all_label_ids:
                    all_label_ids.append(lid)

            messages.append(ThreadMessage(
                id=msg.get("id", ""),
                sender=sender,
                subject=subject,
                label_ids=list(label_ids),
            ))

        return Thread(
            id=data.get("id", thread_id),
            messages=messages,
            labels=self._label_names(all_label_ids),
        )

    def send_message(self, message: EmailMessage) -> None:
        """Send a message through users.messages.send."""
        self._service.users().messages().send(
            userId="me",
            body={"raw": encode_message(message)},
        ).execute()
        logger.debug(f"Sent message to {message['To']}")

    def ensure_label(self, name: str) -> str:
        """Ensure label exists, creating if necessary."""
        if name not in self._label_cache:
            self._init_label_cache()
        if name in self._label_cache:
            return self._label_cache[name]

        label_object = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        created = self._service.users().labels().create(
            userId="me",
            body=label_object,
        ).execute()
        self._label_cache[name] = created["id"]
        logger.info(f"Label '{name}' created.")
        return created["id"]

    def apply_label(self, thread_id: str, label_id: str) -> None:
        """Add the label and remove UNREAD in a single modify call."""
        self._service.users().threads().modify(
            userId="me",
            id=thread_id,
            body={
                "addLabelIds": [label_id],
                "removeLabelIds": [UNREAD_LABEL],
            },
        ).execute()
        logger.info(f"Thread {thread_id} label updated.")

    def get_own_address(self) -> str:
        """Look up the authenticated address from the Gmail profile."""
        profile = self._service.users().getProfile(userId="me").execute()
        return profile.get("emailAddress", "")
