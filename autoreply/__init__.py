"""
Gmail auto-reply core.

Provides the dedup ledger, the reply loop and the scheduler that answers
each new unread conversation exactly once.
"""

from autoreply.models import (
    CycleResult,
    SkipReason,
    Thread,
    ThreadMessage,
    ThreadOutcome,
    ThreadState,
)
from autoreply.ledger import DedupLedger
from autoreply.config import Config, load_config
from autoreply.reply import build_reply, encode_message, extract_address

# ReplyLoop and Scheduler live in autoreply.loop and autoreply.scheduler;
# they import providers.base, which imports this package.

__all__ = [
    "CycleResult",
    "SkipReason",
    "Thread",
    "ThreadMessage",
    "ThreadOutcome",
    "ThreadState",
    "DedupLedger",
    "Config",
    "load_config",
    "build_reply",
    "encode_message",
    "extract_address",
]
