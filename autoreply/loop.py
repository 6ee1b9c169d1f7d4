"""
The reply loop.

One cycle lists the unread threads, filters out the ones that were already
handled, sends the static reply and tags each answered thread remotely.
"""

import logging
from typing import Optional

from autoreply.config import DEDUP_BY_SENDER, Config
from autoreply.ledger import DedupLedger
from autoreply.models import (
    CycleResult,
    SkipReason,
    Thread,
    ThreadOutcome,
    ThreadState,
)
from autoreply.reply import build_reply, extract_address, is_same_address
from providers.base import MailboxGateway

logger = logging.getLogger(__name__)


class ReplyLoop:
    """
    Orchestrates one pass over the unread threads.

    Two signals mark a thread as handled: the local ledger and the remote
    label. The label survives loss of the ledger file.

    Example:
        loop = ReplyLoop(gateway, DedupLedger("repliedThreads.json"), config)
        result = loop.run_cycle()
    """

    def __init__(
        self,
        gateway: MailboxGateway,
        ledger: DedupLedger,
        config: Optional[Config] = None,
    ):
        self.gateway = gateway
        self.ledger = ledger
        self.config = config or Config()
        self._own_address: Optional[str] = self.config.own_address

    @property
    def own_address(self) -> str:
        """The mailbox's own address, looked up once when not configured."""
        if not self._own_address:
            self._own_address = self.gateway.get_own_address()
            logger.info(f"Using mailbox address {self._own_address}")
        return self._own_address

    @property
    def dedup_by_sender(self) -> bool:
        return self.config.dedup_by == DEDUP_BY_SENDER

    def dedup_key(self, thread: Thread) -> str:
        """Identifier stored in the ledger for a thread."""
        if self.dedup_by_sender:
            latest = thread.latest_message
            return extract_address(latest.sender) if latest else ""
        return thread.id

    def run_cycle(self) -> CycleResult:
        """
        Process every currently unread thread once.

        A remote failure ends the cycle early; the error is logged and
        reported in the result instead of being raised.
        """
        result = CycleResult()
        thread_ids = []

        try:
            self.ledger.load()
            logger.info("Fetching unread messages from the inbox...")
            thread_ids = self.gateway.list_unread()
            if not thread_ids:
                logger.info("Nothing in the inbox.")

            for thread_id in thread_ids:
                result.add(self.process_thread(thread_id))
        except Exception as e:
            logger.error(f"Cycle aborted: {e}", exc_info=True)
            result.error = str(e)
        finally:
            # An empty listing leaves the ledger file untouched
            if thread_ids:
                self.ledger.save()

        logger.info(
            f"Cycle finished: {result.seen_count} threads, "
            f"{result.replied_count} replies sent"
        )
        return result

    def process_thread(self, thread_id: str) -> ThreadOutcome:
        """
        Move one thread from FETCHED to TAGGED or SKIPPED.

        Remote errors propagate to run_cycle().
        """
        if not self.dedup_by_sender and self.ledger.contains(thread_id):
            logger.info(f"Thread {thread_id} already replied. Skipping...")
            return ThreadOutcome(thread_id, ThreadState.SKIPPED, SkipReason.LEDGER)

        logger.info(f"Processing thread: {thread_id}")
        thread = self.gateway.get_thread(thread_id)

        reason = self.skip_reason(thread)
        if reason is not None:
            return ThreadOutcome(thread_id, ThreadState.SKIPPED, reason)

        sender = thread.latest_message.sender
        self.send_reply(sender)
        self.tag(thread)
        return ThreadOutcome(thread_id, ThreadState.TAGGED, recipient=sender)

    def skip_reason(self, thread: Thread) -> Optional[SkipReason]:
        """Return why a fetched thread must not be answered, or None."""
        if thread.has_label(self.config.label_name):
            logger.info(f"Thread {thread.id} is already labeled as '{self.config.label_name}'. Skipping...")
            return SkipReason.LABELED

        latest = thread.latest_message
        if latest is None:
            logger.debug(f"Thread {thread.id} has no messages")
            return SkipReason.NO_MESSAGES
        if not latest.sender:
            logger.debug(f"Thread {thread.id} has no sender header")
            return SkipReason.NO_SENDER

        if self.dedup_by_sender and self.ledger.contains(self.dedup_key(thread)):
            logger.info(f"Email from {latest.sender} already replied. Skipping...")
            return SkipReason.LEDGER

        if is_same_address(latest.sender, self.own_address):
            logger.debug(f"Thread {thread.id} ends with our own message")
            return SkipReason.OWN_ADDRESS

        return None

    def send_reply(self, sender: str) -> None:
        logger.info(f"Replying to email: {sender}")
        message = build_reply(
            to=sender,
            subject=self.config.reply_subject,
            body=self.config.reply_body,
        )
        self.gateway.send_message(message)

    def tag(self, thread: Thread) -> None:
        """Record the thread locally, then label it and clear UNREAD."""
        self.ledger.record(self.dedup_key(thread))
        logger.info(f"Email from {thread.latest_message.sender} marked as replied.")
        label_id = self.gateway.ensure_label(self.config.label_name)
        self.gateway.apply_label(thread.id, label_id)
