"""
Dedup ledger for the auto-reply loop.

Keeps the identifiers of conversations that were already answered and
mirrors them to a JSON file so they survive restarts.
"""

import json
import logging
import os
from typing import Iterator, List

logger = logging.getLogger(__name__)


class DedupLedger:
    """
    Local record of handled identifiers.

    The durable copy is a flat JSON array that is rewritten wholesale on
    every write. Identifiers are only ever appended.

    Attributes:
        filename: Path to the ledger JSON file
        entries: Handled identifiers in the order they were recorded

    Example:
        ledger = DedupLedger("repliedThreads.json")
        if not ledger.contains(thread_id):
            # ... send the reply ...
            ledger.record(thread_id)
    """

    def __init__(self, filename: str):
        """
        Initialize the ledger and load the persisted entries.

        Args:
            filename: Path to the ledger file (JSON)
        """
        self.filename = filename
        self.entries: List[str] = []
        self._index = set()
        self.load()

    def load(self) -> List[str]:
        """
        Reload entries from the file.

        A missing or malformed file yields an empty ledger.

        Returns:
            The loaded entries
        """
        self.entries = self._read()
        self._index = set(self.entries)
        return list(self.entries)

    def _read(self) -> List[str]:
        if not os.path.exists(self.filename):
            logger.info(f"No ledger found at {self.filename}, starting empty")
            return []
        try:
            with open(self.filename, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Failed to parse ledger file {self.filename}: {e}")
            return []
        except OSError as e:
            logger.error(f"Failed to load ledger file {self.filename}: {e}")
            return []

        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            logger.warning(f"Ledger file {self.filename} is not a list of identifiers, ignoring it")
            return []

        # Keep first occurrence order, drop repeats
        seen = set()
        entries = []
        for item in data:
            if item not in seen:
                seen.add(item)
                entries.append(item)
        return entries

    def contains(self, identifier: str) -> bool:
        """Check whether an identifier was already handled."""
        return identifier in self._index

    def record(self, identifier: str) -> None:
        """
        Mark an identifier as handled and rewrite the file.

        Args:
            identifier: Thread ID or sender address, depending on the dedup mode
        """
        if identifier not in self._index:
            self.entries.append(identifier)
            self._index.add(identifier)
        self.save()

    def save(self) -> None:
        """Rewrite the whole ledger file."""
        tmp_name = f"{self.filename}.tmp"
        try:
            with open(tmp_name, "w", encoding="utf-8") as f:
                json.dump(self.entries, f, indent=2)
            os.replace(tmp_name, self.filename)
            logger.debug(f"Ledger saved ({len(self.entries)} entries)")
        except OSError as e:
            logger.error(f"Failed to save ledger to {self.filename}: {e}")

    def __contains__(self, identifier: str) -> bool:
        return self.contains(identifier)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.entries))
