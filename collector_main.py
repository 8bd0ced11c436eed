"""Entry point for the local TLS line collector."""

import logging
import signal
import threading

from player_telemetry.collector import LineCollector
from player_telemetry.config import load_collector_config


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    config = load_collector_config()
    shutdown_event = threading.Event()
    collector = LineCollector(config, shutdown_event)

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        collector.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info("Starting collector on %s:%d (cert=%s)", config.host, config.port, config.cert_file)
    try:
        collector.start()
    except KeyboardInterrupt:
        collector.stop()


if __name__ == "__main__":
    main()
