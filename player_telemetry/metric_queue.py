"""Thread-safe FIFO of serialized metric lines."""

import logging
import threading
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


class MetricQueue:
    """Multi-producer, single-consumer queue of metric lines.

    Unbounded unless ``max_size`` is positive, in which case the oldest
    line is evicted to make room for a new one. ``on_evict`` is called once
    per evicted line, outside the lock.
    """

    def __init__(self, max_size: int = 0, on_evict: Callable[[], None] | None = None):
        self._max_size = max_size
        self._on_evict = on_evict
        self._lines: deque[str] = deque()
        self._lock = threading.Lock()
        self._evicted = 0

    def enqueue(self, line: str):
        """Append a line to the tail. Never blocks on I/O."""
        evicted = None
        with self._lock:
            if self._max_size > 0 and len(self._lines) >= self._max_size:
                evicted = self._lines.popleft()
                self._evicted += 1
            self._lines.append(line)
        if evicted is not None:
            logger.warning("Metric queue full (%d), dropped oldest line", self._max_size)
            if self._on_evict is not None:
                self._on_evict()

    def requeue(self, line: str):
        """Re-append a line that failed to send. Goes to the tail, not the head."""
        self.enqueue(line)

    def dequeue(self) -> str | None:
        """Pop the head line, or None if the queue is empty."""
        with self._lock:
            if not self._lines:
                return None
            return self._lines.popleft()

    def dequeue_all(self) -> list[str]:
        """Remove and return every queued line in FIFO order."""
        with self._lock:
            lines = list(self._lines)
            self._lines.clear()
            return lines

    def snapshot(self) -> list[str]:
        """Copy of the queued lines, leaving the queue untouched."""
        with self._lock:
            return list(self._lines)

    @property
    def evicted(self) -> int:
        with self._lock:
            return self._evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
