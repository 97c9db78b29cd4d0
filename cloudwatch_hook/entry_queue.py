"""Thread-safe FIFO handing enriched entries from the write path to the hook.

The enriching core pushes from whatever thread issued the log call; the
dispatch hook pops from the thread the logging pipeline runs hooks on. Plain
FIFO correspondence between a push and "its" pop only holds while one
enrich/dispatch pair is in flight at a time. ``take`` matches on the entry id
instead and is what the hook uses by default.

The queue is unbounded: if entries are enriched faster than they are
dispatched, or enriched at levels the hook never accepts, it grows.
"""

import threading
from collections import deque

from cloudwatch_hook.models import LogEntry


class EntryQueue:
    def __init__(self):
        self._entries: deque[LogEntry] = deque()
        self._lock = threading.Lock()

    def push(self, entry: LogEntry):
        """Append an entry to the tail."""
        with self._lock:
            self._entries.append(entry)

    def pop(self) -> LogEntry | None:
        """Remove and return the head, or None if the queue is empty."""
        with self._lock:
            if not self._entries:
                return None
            return self._entries.popleft()

    def take(self, entry_id: str) -> LogEntry | None:
        """Remove and return the oldest entry with *entry_id*, or None."""
        with self._lock:
            for i, entry in enumerate(self._entries):
                if entry.entry_id == entry_id:
                    del self._entries[i]
                    return entry
            return None

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Shared by every core and hook that is not handed its own queue.
shared_queue = EntryQueue()
