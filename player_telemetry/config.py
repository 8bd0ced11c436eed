"""Configuration module: frozen dataclasses loaded from environment variables."""

import argparse
import os
import platform
import uuid
from dataclasses import dataclass

from player_telemetry.environments import DEFAULT_COLLECTOR_PORT, load_environments


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def default_peer_id() -> str:
    """Host name plus hardware address, stable across restarts."""
    return f"{platform.node() or 'player'}-{uuid.getnode():012x}"


@dataclass(frozen=True)
class ShipperConfig:
    collector_host: str = ""
    collector_port: int = DEFAULT_COLLECTOR_PORT
    peer_id: str = ""
    flush_interval: float = 10.0
    connect_timeout: float = 5.0
    write_delay: float = 0.05
    send_buffer_size: int = 65536
    ca_file: str = ""
    max_queue_size: int = 0
    metrics_interval: float = 0.0
    environments_file: str = ""
    environment: str = ""


@dataclass(frozen=True)
class CollectorConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_COLLECTOR_PORT
    cert_file: str = "./certs/server.crt"
    key_file: str = "./certs/server.key"
    echo: bool = True


def load_shipper_config(argv=None) -> ShipperConfig:
    """Build ShipperConfig from environment variables, then override with CLI args.

    When no collector host is given but an environment is selected, the host
    and port come from the environments file.
    """
    parser = argparse.ArgumentParser(description="Player telemetry shipper")
    parser.add_argument("--collector-host", type=str, default=None)
    parser.add_argument("--collector-port", type=int, default=None)
    parser.add_argument("--peer-id", type=str, default=None)
    parser.add_argument("--flush-interval", type=float, default=None)
    parser.add_argument("--environment", type=str, default=None)
    parser.add_argument("--environments-file", type=str, default=None)
    parser.add_argument("--ca-file", type=str, default=None)
    parser.add_argument("--max-queue-size", type=int, default=None)
    parser.add_argument("--metrics-interval", type=float, default=None)
    args = parser.parse_args(argv)

    def pick(cli_value, env_name, default):
        if cli_value is not None:
            return cli_value
        return os.environ.get(env_name, default)

    host = pick(args.collector_host, "COLLECTOR_HOST", ShipperConfig.collector_host)
    port = int(pick(args.collector_port, "COLLECTOR_PORT", ShipperConfig.collector_port))
    port_explicit = args.collector_port is not None or "COLLECTOR_PORT" in os.environ
    environment = pick(args.environment, "TELEMETRY_ENV", ShipperConfig.environment)
    environments_file = pick(
        args.environments_file, "ENVIRONMENTS_FILE", ShipperConfig.environments_file
    )

    if not host and environment and environments_file:
        selected = load_environments(environments_file).get(environment)
        if selected is not None:
            host = selected.collector_host
            if not port_explicit:
                port = selected.collector_port

    return ShipperConfig(
        collector_host=host,
        collector_port=port,
        peer_id=pick(args.peer_id, "PEER_ID", "") or default_peer_id(),
        flush_interval=float(pick(args.flush_interval, "FLUSH_INTERVAL", ShipperConfig.flush_interval)),
        connect_timeout=float(os.environ.get("CONNECT_TIMEOUT", ShipperConfig.connect_timeout)),
        write_delay=float(os.environ.get("WRITE_DELAY", ShipperConfig.write_delay)),
        send_buffer_size=int(os.environ.get("SEND_BUFFER_SIZE", ShipperConfig.send_buffer_size)),
        ca_file=pick(args.ca_file, "CA_FILE", ShipperConfig.ca_file),
        max_queue_size=int(pick(args.max_queue_size, "MAX_QUEUE_SIZE", ShipperConfig.max_queue_size)),
        metrics_interval=float(
            pick(args.metrics_interval, "METRICS_INTERVAL", ShipperConfig.metrics_interval)
        ),
        environments_file=environments_file,
        environment=environment,
    )


def load_collector_config() -> CollectorConfig:
    """Build CollectorConfig from environment variables with sensible defaults."""
    return CollectorConfig(
        host=os.environ.get("COLLECTOR_BIND_HOST", CollectorConfig.host),
        port=int(os.environ.get("COLLECTOR_PORT", CollectorConfig.port)),
        cert_file=os.environ.get("CERT_FILE", CollectorConfig.cert_file),
        key_file=os.environ.get("KEY_FILE", CollectorConfig.key_file),
        echo=_parse_bool(os.environ.get("COLLECTOR_ECHO", "true")),
    )
