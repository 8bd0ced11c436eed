"""Metric shipper: queues player samples and drains them to the collector.

Producers call ``record_sample`` from any thread; it only encodes and
enqueues. A single background thread wakes every ``flush_interval``
seconds and, if there is anything queued, runs one drain cycle:

    IDLE -> CONNECTING -> SENDING -> CLOSING -> IDLE

Delivery is at-least-once and best-effort. A connect failure leaves the
queue untouched. A write failure puts the in-flight line back at the tail
and ends the cycle; the rest of the queue waits for the next one.
"""

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from player_telemetry.config import ShipperConfig
from player_telemetry.connection import CollectorConnection
from player_telemetry.line_protocol import encode_sample, is_sentinel
from player_telemetry.metric_queue import MetricQueue
from player_telemetry.metrics import MetricsReporter, ShipperMetrics
from player_telemetry.models import Sample
from player_telemetry.tls_context import create_client_context

logger = logging.getLogger(__name__)


class ShipperState(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    SENDING = "sending"
    CLOSING = "closing"


@dataclass
class CycleResult:
    """Outcome of one drain cycle."""

    lines_sent: int = 0
    requeued: int = 0
    connect_failed: bool = False
    aborted: bool = False


class MetricShipper:
    """Owns the metric queue and the background drain thread."""

    def __init__(
        self,
        config: ShipperConfig,
        shutdown_event: threading.Event | None = None,
        connection_factory: Callable[[], CollectorConnection] | None = None,
        metrics: ShipperMetrics | None = None,
        clock: Callable[[], int] = time.time_ns,
    ):
        self._config = config
        self._owns_shutdown = shutdown_event is None
        self._shutdown = shutdown_event or threading.Event()
        self._connection_factory = connection_factory or self._create_tls_connection
        self._metrics = metrics or ShipperMetrics()
        self._clock = clock
        self._queue = MetricQueue(
            max_size=config.max_queue_size, on_evict=self._metrics.record_evicted
        )
        self._ssl_ctx = None
        self._state = ShipperState.IDLE
        self._thread: threading.Thread | None = None
        self._reporter: MetricsReporter | None = None

    @property
    def queue(self) -> MetricQueue:
        return self._queue

    @property
    def metrics(self) -> ShipperMetrics:
        return self._metrics

    @property
    def state(self) -> ShipperState:
        return self._state

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def record_sample(self, resolution: str, state: int):
        """Record a player observation. Never raises, never blocks on I/O."""
        try:
            self.enqueue_sample(Sample(resolution=resolution, state=int(state)))
        except Exception:
            logger.exception("Failed to record sample (%r, %r)", resolution, state)

    def enqueue_sample(self, sample: Sample, timestamp_ns: int | None = None) -> str | None:
        """Encode a sample and queue it. Returns the queued line, or None if filtered."""
        if is_sentinel(sample):
            self._metrics.record_dropped_sample()
            return None
        if timestamp_ns is None:
            timestamp_ns = self._clock()
        line = encode_sample(sample, self._config.peer_id, timestamp_ns)
        self._queue.enqueue(line)
        self._metrics.record_sample()
        return line

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start the background drain thread (and metrics reporter, if enabled).

        A shipper that created its own shutdown event can be restarted after
        ``stop()``. With a caller-supplied event, the caller owns clearing it.
        """
        if self.running:
            return
        if self._owns_shutdown:
            self._shutdown.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="metric-shipper", daemon=True
        )
        self._thread.start()

        if self._config.metrics_interval > 0:
            self._reporter = MetricsReporter(
                self._metrics, self._config.metrics_interval, self._shutdown
            )
            self._reporter.start()

    def stop(self, timeout: float = 10.0):
        """Signal shutdown and wait for the current cycle to close its socket."""
        self._shutdown.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Metric shipper did not stop within %.1fs", timeout)
            self._thread = None
        if self._reporter:
            self._reporter.stop()
            self._reporter = None

    def discard_pending(self) -> list[str]:
        """Remove and return every undelivered line."""
        return self._queue.dequeue_all()

    def _run_loop(self):
        logger.info(
            "Metric shipper started: collector=%s:%d, interval=%.1fs",
            self._config.collector_host or "<unset>",
            self._config.collector_port,
            self._config.flush_interval,
        )
        while not self._shutdown.is_set():
            self.run_cycle()
            self._shutdown.wait(self._config.flush_interval)
        logger.info("Metric shipper stopped (%d line(s) undelivered)", len(self._queue))

    # ------------------------------------------------------------------
    # Drain cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> CycleResult:
        """Run one drain cycle synchronously. Never raises."""
        result = CycleResult()
        depth = len(self._queue)
        if depth == 0:
            return result

        self._metrics.record_cycle(depth)
        logger.debug("Drain cycle starting with %d queued line(s)", depth)
        try:
            connection = self._connect(result)
            if connection is None:
                return result
            try:
                self._send_queued(connection, result)
            finally:
                self._close(connection)
        except Exception:
            logger.exception("Unexpected error during drain cycle")
            result.aborted = True
        finally:
            self._state = ShipperState.IDLE

        logger.info(
            "Drain cycle finished: sent=%d requeued=%d remaining=%d",
            result.lines_sent, result.requeued, len(self._queue),
        )
        return result

    def _connect(self, result: CycleResult) -> CollectorConnection | None:
        self._state = ShipperState.CONNECTING
        connection = None
        try:
            connection = self._connection_factory()
            connection.open()
        except (OSError, ValueError) as e:
            # ValueError: IDNA rejects the hostname before any socket exists
            self._connect_failed(result, e)
            if connection is not None:
                self._close(connection)
            return None

        if not connection.connected:
            self._connect_failed(result, "socket not connected")
            self._close(connection)
            return None
        return connection

    def _connect_failed(self, result: CycleResult, reason):
        result.connect_failed = True
        self._metrics.record_connect_failure()
        logger.warning(
            "Cannot reach collector %s:%d, keeping %d line(s) for next cycle: %s",
            self._config.collector_host or "<unset>",
            self._config.collector_port,
            len(self._queue),
            reason,
        )

    def _send_queued(self, connection: CollectorConnection, result: CycleResult):
        self._state = ShipperState.SENDING
        while not self._shutdown.is_set():
            line = self._queue.dequeue()
            if line is None:
                return
            try:
                connection.write_line(line)
            except Exception as e:
                self._queue.requeue(line)
                result.requeued += 1
                result.aborted = True
                self._metrics.record_write_failure()
                self._metrics.record_requeued()
                logger.warning("Write to collector failed, line requeued: %s", e)
                return

            result.lines_sent += 1
            self._metrics.record_sent()
            if self._config.write_delay > 0:
                self._shutdown.wait(self._config.write_delay)

    def _close(self, connection: CollectorConnection):
        self._state = ShipperState.CLOSING
        try:
            connection.close()
        except OSError as e:
            logger.warning("Error closing collector connection: %s", e)

    def _create_tls_connection(self) -> CollectorConnection:
        if self._ssl_ctx is None:
            self._ssl_ctx = create_client_context(self._config.ca_file)
        return CollectorConnection(
            self._config.collector_host,
            self._config.collector_port,
            self._ssl_ctx,
            timeout=self._config.connect_timeout,
            send_buffer_size=self._config.send_buffer_size,
        )
