"""Bounded, insertion-ordered history of processed alerts."""

from __future__ import annotations

import threading
from collections import deque

from medtriage.dispatch.types import AlertPayload

DEFAULT_CAPACITY = 100


class AlertHistory:
    """Keeps the last *capacity* archived alerts, evicting the oldest first."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: deque[AlertPayload] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, entry: AlertPayload) -> None:
        with self._lock:
            self._entries.append(entry)

    def snapshot(self) -> list[AlertPayload]:
        """Copy of the stored alerts, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
