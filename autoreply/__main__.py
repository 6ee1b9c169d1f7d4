#!/usr/bin/env python3
"""
Gmail auto-reply daemon.

Usage:
    python -m autoreply

Polls the inbox for unread conversations and answers each new one with a
static acknowledgement. Settings come from gmail_autoreply.yaml and
AUTOREPLY_* environment variables; there are no command-line flags.
"""

import logging
import signal
import sys

from autoreply.config import load_config
from autoreply.ledger import DedupLedger
from autoreply.loop import ReplyLoop
from autoreply.scheduler import Scheduler
from providers.gmail import GmailGateway

logger = logging.getLogger("autoreply")


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    config = load_config()
    logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    gateway = GmailGateway(
        query=config.query,
        scopes=config.scopes,
        token_file=config.token_file,
        credentials_file=config.credentials_file,
    )
    try:
        gateway.connect()
    except Exception as e:
        logger.critical(f"Could not connect to Gmail: {e}", exc_info=True)
        return 1

    ledger = DedupLedger(config.ledger_file)
    loop = ReplyLoop(gateway, ledger, config)
    scheduler = Scheduler(
        loop,
        min_delay=config.min_delay_seconds,
        max_delay=config.max_delay_seconds,
    )

    def _handle_signal(signum, frame):
        logger.warning(f"Received signal {signum}, stopping...")
        scheduler.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        scheduler.run()
    finally:
        gateway.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
