"""
In-memory log ring buffer.

Keeps the most recent diagnostic lines for the /logs endpoint.
Nothing is persisted; entries are lost on restart.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class LogBuffer:
    """
    Bounded, insertion-ordered log of timestamped messages.

    Appending past capacity evicts the oldest entry. The running
    total counts every recorded message, including evicted ones.

    All mutation happens on the event loop thread.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("Log buffer capacity must be at least 1")

        self._capacity = capacity
        self._entries: Deque[str] = deque(maxlen=capacity)
        self._total = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total(self) -> int:
        """Number of messages recorded since the buffer was created."""
        return self._total

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, message: str) -> str:
        """
        Record a message.

        Args:
            message: Log message

        Returns:
            The stored entry, prefixed with an ISO-8601 UTC timestamp
        """
        timestamp = datetime.now(timezone.utc).isoformat(timespec='milliseconds')
        entry = f"[{timestamp}] {message}"

        self._entries.append(entry)
        self._total += 1

        logger.info(entry)
        return entry

    def recent(self, n: int) -> List[str]:
        """
        Get the last n entries, oldest first.

        Args:
            n: Maximum number of entries to return

        Returns:
            Up to n entries in insertion order
        """
        if n <= 0:
            return []

        entries = list(self._entries)
        return entries[-n:]
