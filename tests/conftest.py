"""
Shared test fixtures for the auto-reply tests.
"""

import sys
from pathlib import Path

# Ensure project root is importable without pip install
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from autoreply.config import Config
from autoreply.ledger import DedupLedger
from autoreply.models import Thread, ThreadMessage
from providers.base import MailboxGateway

OWN_ADDRESS = "me@example.com"


class FakeGateway(MailboxGateway):
    """In-memory mailbox that records every side effect."""

    name = "fake"

    def __init__(self, threads=None, own_address=OWN_ADDRESS):
        self.threads = {t.id: t for t in (threads or [])}
        self.unread = [t.id for t in (threads or [])]
        self.own_address = own_address
        self.labels = {}
        self.sent = []
        self.applied = []
        self.created_labels = []
        self.fetched = []
        self.fail_send_to = set()

    def connect(self):
        pass

    def disconnect(self):
        pass

    def list_unread(self):
        return list(self.unread)

    def get_thread(self, thread_id):
        self.fetched.append(thread_id)
        return self.threads[thread_id]

    def send_message(self, message):
        if message["To"] in self.fail_send_to:
            raise RuntimeError(f"send to {message['To']} failed")
        self.sent.append(message)

    def ensure_label(self, name):
        if name not in self.labels:
            self.labels[name] = f"Label_{len(self.labels) + 1}"
            self.created_labels.append(name)
        return self.labels[name]

    def apply_label(self, thread_id, label_id):
        self.applied.append((thread_id, label_id))
        name = next(n for n, i in self.labels.items() if i == label_id)
        thread = self.threads[thread_id]
        self.threads[thread_id] = Thread(
            id=thread.id,
            messages=thread.messages,
            labels=set(thread.labels) | {name},
        )
        if thread_id in self.unread:
            self.unread.remove(thread_id)

    def get_own_address(self):
        return self.own_address


def make_thread(thread_id, *senders, labels=None):
    """Build a thread whose messages come from the given senders, oldest first."""
    messages = [
        ThreadMessage(id=f"{thread_id}-m{i}", sender=sender, subject="Hello")
        for i, sender in enumerate(senders)
    ]
    return Thread(id=thread_id, messages=messages, labels=set(labels or ()))


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "repliedThreads.json"


@pytest.fixture
def ledger(ledger_path):
    return DedupLedger(str(ledger_path))


@pytest.fixture
def config(ledger_path):
    return Config(own_address=OWN_ADDRESS, ledger_file=str(ledger_path))
