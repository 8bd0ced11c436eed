"""Entry point for the player telemetry shipper, driven by a simulated player."""

import logging
import signal
import threading

from player_telemetry.config import load_shipper_config
from player_telemetry.player_info import PlayerInfoTracker
from player_telemetry.shipper import MetricShipper
from player_telemetry.simulation import run_player_simulation


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    config = load_shipper_config()
    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    shipper = MetricShipper(config, shutdown_event)
    tracker = PlayerInfoTracker(shipper)
    logger.info(
        "Starting shipper: peer=%s, collector=%s:%d, flush_interval=%.1fs",
        config.peer_id,
        config.collector_host or "<unset>",
        config.collector_port,
        config.flush_interval,
    )

    shipper.start()
    try:
        run_player_simulation(tracker, shutdown_event)
        # Give the shipper one more interval to deliver what is left.
        shutdown_event.wait(config.flush_interval + 1.0)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        shipper.stop()
        undelivered = shipper.discard_pending()
        if undelivered:
            logger.warning("Exiting with %d undelivered metric line(s)", len(undelivered))
        logger.info("Shipper metrics: %s", shipper.metrics.snapshot())


if __name__ == "__main__":
    main()
