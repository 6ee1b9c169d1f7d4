"""
Data models for the auto-reply loop.

Provides provider-agnostic data structures for mail threads and the
per-thread and per-cycle outcomes of the reply loop.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set


class ThreadState(Enum):
    """States a thread moves through during one cycle."""
    FETCHED = "fetched"
    FILTERED = "filtered"
    REPLIED = "replied"
    TAGGED = "tagged"
    SKIPPED = "skipped"


class SkipReason(Enum):
    """Why a thread ended in the SKIPPED state."""
    LEDGER = "ledger"
    LABELED = "labeled"
    NO_MESSAGES = "no_messages"
    NO_SENDER = "no_sender"
    OWN_ADDRESS = "own_address"


@dataclass(frozen=True)
class ThreadMessage:
    """
    A single message inside a thread.

    Attributes:
        id: Provider-specific message identifier
        sender: The 'From' header value ("" when the header is missing)
        subject: The 'Subject' header value
        label_ids: Provider label IDs on the message
    """
    id: str
    sender: str = ""
    subject: str = ""
    label_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Thread:
    """
    Provider-agnostic representation of a conversation.

    Attributes:
        id: Provider-assigned thread identifier
        messages: Messages in the order the provider returns them (oldest first)
        labels: Label names present on any message of the thread
    """
    id: str
    messages: List[ThreadMessage] = field(default_factory=list)
    labels: Set[str] = field(default_factory=set)

    @property
    def latest_message(self) -> Optional[ThreadMessage]:
        """The newest message, which decides the reply target."""
        if not self.messages:
            return None
        return self.messages[-1]

    def has_label(self, name: str) -> bool:
        return name in self.labels


@dataclass
class ThreadOutcome:
    """Terminal state of one thread in a cycle."""
    thread_id: str
    state: ThreadState
    reason: Optional[SkipReason] = None
    recipient: Optional[str] = None

    @property
    def replied(self) -> bool:
        return self.state is ThreadState.TAGGED


@dataclass
class CycleResult:
    """
    Summary of one pass over the unread threads.

    Returned by ReplyLoop.run_cycle() to report statistics.
    """
    seen_count: int = 0
    replied_count: int = 0
    skip_counts: Dict[str, int] = field(default_factory=dict)
    outcomes: List[ThreadOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def add(self, outcome: ThreadOutcome) -> None:
        """Record a thread outcome and update the counters."""
        self.outcomes.append(outcome)
        self.seen_count += 1
        if outcome.replied:
            self.replied_count += 1
        elif outcome.reason is not None:
            key = outcome.reason.value
            self.skip_counts[key] = self.skip_counts.get(key, 0) + 1

    @property
    def aborted(self) -> bool:
        return self.error is not None
