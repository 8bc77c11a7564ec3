"""
Transaction Log

Append-only record of every decoded transaction, in receipt order.
Bounded: once capacity is reached the oldest entries are evicted.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Iterator, List, Optional

from .transaction import LogEntry, Transaction

logger = logging.getLogger(__name__)


class TransactionLog:
    """
    Bounded in-memory transaction log.

    Usage:
        log = TransactionLog(capacity=10000)
        log.record(tx)

        len(log)            # entries currently held
        log.latest()        # most recent entry
    """

    def __init__(self, capacity: int = 10000):
        """
        Initialize transaction log.

        Args:
            capacity: Max entries kept before the oldest are evicted
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")

        self.capacity = capacity
        self._entries: deque = deque(maxlen=capacity)

        # Statistics
        self.recorded_count = 0
        self.evicted_count = 0

    def record(self, tx: Transaction, received_at: Optional[datetime] = None) -> LogEntry:
        """
        Append a transaction.

        Args:
            tx: Decoded transaction
            received_at: Receipt time (default: now, UTC)

        Returns:
            The appended entry
        """
        entry = LogEntry.from_transaction(tx, received_at)

        if len(self._entries) == self.capacity:
            self.evicted_count += 1
            if self.evicted_count == 1:
                logger.warning(
                    f"Transaction log reached capacity ({self.capacity}), evicting oldest entries"
                )

        self._entries.append(entry)
        self.recorded_count += 1

        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def entries(self) -> List[LogEntry]:
        """Entries oldest first."""
        return list(self._entries)

    def latest(self) -> Optional[LogEntry]:
        """Most recent entry, or None if empty."""
        return self._entries[-1] if self._entries else None

    def clear(self):
        """Drop all entries (counters are kept)."""
        self._entries.clear()
        logger.info("Transaction log cleared")

    def get_stats(self) -> dict:
        """
        Get log statistics.

        Returns:
            Dict with stats
        """
        return {
            'size': len(self._entries),
            'capacity': self.capacity,
            'recorded_count': self.recorded_count,
            'evicted_count': self.evicted_count
        }
