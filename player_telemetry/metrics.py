"""Thread-safe shipper counters and periodic reporting."""

import logging
import threading

logger = logging.getLogger(__name__)


class ShipperMetrics:
    """Thread-safe counters for tracking shipper behaviour."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_locked()

    def _reset_locked(self):
        self._samples_recorded = 0
        self._samples_dropped = 0
        self._lines_sent = 0
        self._lines_requeued = 0
        self._lines_evicted = 0
        self._cycles = 0
        self._connect_failures = 0
        self._write_failures = 0
        self._queue_depth = 0

    def record_sample(self):
        with self._lock:
            self._samples_recorded += 1

    def record_dropped_sample(self):
        """A sentinel sample that was filtered out."""
        with self._lock:
            self._samples_dropped += 1

    def record_sent(self):
        with self._lock:
            self._lines_sent += 1

    def record_requeued(self):
        with self._lock:
            self._lines_requeued += 1

    def record_evicted(self):
        """A queued line dropped because the queue cap was reached."""
        with self._lock:
            self._lines_evicted += 1

    def record_cycle(self, queue_depth: int):
        with self._lock:
            self._cycles += 1
            self._queue_depth = queue_depth

    def record_connect_failure(self):
        with self._lock:
            self._connect_failures += 1

    def record_write_failure(self):
        with self._lock:
            self._write_failures += 1

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "samples_recorded": self._samples_recorded,
                "samples_dropped": self._samples_dropped,
                "lines_sent": self._lines_sent,
                "lines_requeued": self._lines_requeued,
                "lines_evicted": self._lines_evicted,
                "cycles": self._cycles,
                "connect_failures": self._connect_failures,
                "write_failures": self._write_failures,
                "queue_depth": self._queue_depth,
            }

    def snapshot_and_reset(self) -> dict:
        """Atomically read all counters and reset them to zero.

        The last observed queue depth is a gauge and survives the reset.
        """
        with self._lock:
            depth = self._queue_depth
            snapshot = {
                "samples_recorded": self._samples_recorded,
                "samples_dropped": self._samples_dropped,
                "lines_sent": self._lines_sent,
                "lines_requeued": self._lines_requeued,
                "lines_evicted": self._lines_evicted,
                "cycles": self._cycles,
                "connect_failures": self._connect_failures,
                "write_failures": self._write_failures,
                "queue_depth": depth,
            }
            self._reset_locked()
            self._queue_depth = depth
            return snapshot


class MetricsReporter:
    """Background thread that periodically logs metrics summaries."""

    def __init__(
        self,
        metrics: ShipperMetrics,
        interval: float,
        shutdown_event: threading.Event,
    ):
        self._metrics = metrics
        self._interval = interval
        self._shutdown = shutdown_event
        self._thread: threading.Thread | None = None

    def start(self):
        """Start the reporter thread."""
        self._thread = threading.Thread(
            target=self._report_loop, name="metrics-reporter", daemon=True
        )
        self._thread.start()

    def stop(self):
        """Wait for the reporter to exit once shutdown has been signalled."""
        if self._thread:
            self._thread.join(timeout=5)

    def _report_loop(self):
        while not self._shutdown.is_set():
            self._shutdown.wait(self._interval)
            if self._shutdown.is_set():
                break
            self.report()

    def report(self) -> dict:
        snapshot = self._metrics.snapshot_and_reset()
        logger.info(
            "[metrics] samples=%d dropped=%d sent=%d requeued=%d evicted=%d cycles=%d "
            "connect_failures=%d write_failures=%d queue_depth=%d",
            snapshot["samples_recorded"],
            snapshot["samples_dropped"],
            snapshot["lines_sent"],
            snapshot["lines_requeued"],
            snapshot["lines_evicted"],
            snapshot["cycles"],
            snapshot["connect_failures"],
            snapshot["write_failures"],
            snapshot["queue_depth"],
        )
        return snapshot
