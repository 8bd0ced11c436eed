"""TLS line collector: accepts shipper connections and stores metric lines.

A minimal stand-in for the real metrics collector, used for local runs and
integration tests. Lines that do not parse are kept in ``rejected``.
"""

import logging
import socket
import ssl
import threading

from player_telemetry.config import CollectorConfig
from player_telemetry.line_protocol import LineProtocolError, ParsedLine, parse_line
from player_telemetry.tls_context import create_server_context

logger = logging.getLogger(__name__)


class LineCollector:
    """Multi-threaded TLS server that reads newline-delimited metric lines."""

    def __init__(self, config: CollectorConfig, shutdown_event: threading.Event):
        self._config = config
        self._shutdown = shutdown_event
        self._ssl_ctx = create_server_context(config.cert_file, config.key_file)
        self._sock = None
        self._server_address = None
        self._lock = threading.Lock()
        self._received: list[ParsedLine] = []
        self._raw_lines: list[bytes] = []
        self._rejected: list[bytes] = []
        self._connections = 0

    @property
    def server_address(self):
        return self._server_address

    @property
    def received(self) -> list[ParsedLine]:
        with self._lock:
            return list(self._received)

    @property
    def raw_lines(self) -> list[bytes]:
        with self._lock:
            return list(self._raw_lines)

    @property
    def rejected(self) -> list[bytes]:
        with self._lock:
            return list(self._rejected)

    @property
    def connections(self) -> int:
        with self._lock:
            return self._connections

    def start(self):
        """Listen and hand each TLS connection to its own reader thread until shutdown."""
        self._sock = socket.create_server((self._config.host, self._config.port), backlog=5)
        self._sock.settimeout(1.0)
        self._server_address = self._sock.getsockname()
        logger.info("Collector listening on %s:%d", *self._server_address)

        while not self._shutdown.is_set():
            try:
                conn, addr = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                # listen socket closed by stop()
                break
            self._accept(conn, addr)

    def _accept(self, conn: socket.socket, addr):
        try:
            tls_conn = self._ssl_ctx.wrap_socket(conn, server_side=True)
        except (ssl.SSLError, OSError) as e:
            logger.warning("TLS handshake failed from %s: %s", addr, e)
            conn.close()
            return
        with self._lock:
            self._connections += 1
        threading.Thread(
            target=self._handle_client, args=(tls_conn, addr), name=f"collector-{addr[1]}", daemon=True
        ).start()

    def stop(self):
        """Signal shutdown and close the listen socket."""
        self._shutdown.set()
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass

    def _handle_client(self, conn, addr):
        client_id = f"{addr[0]}:{addr[1]}"
        buffer = b""
        count = 0
        try:
            conn.settimeout(1.0)
            while not self._shutdown.is_set():
                try:
                    chunk = conn.recv(4096)
                except socket.timeout:
                    continue
                if not chunk:
                    break
                buffer += chunk
                while b"\n" in buffer:
                    raw, buffer = buffer.split(b"\n", 1)
                    self._store(raw)
                    count += 1
        except OSError as e:
            logger.error("Error handling shipper %s: %s", client_id, e)
        finally:
            conn.close()
            logger.info("Shipper %s disconnected (%d lines received)", client_id, count)

    def _store(self, raw: bytes):
        try:
            parsed = parse_line(raw.decode("utf-8"))
        except (UnicodeDecodeError, LineProtocolError) as e:
            logger.warning("Rejected line: %s", e)
            with self._lock:
                self._rejected.append(raw)
            return

        with self._lock:
            self._raw_lines.append(raw)
            self._received.append(parsed)
        if self._config.echo:
            print(
                f"[COLLECTOR] peer={parsed.peer_id} resolution={parsed.resolution} "
                f"state={parsed.state} ts={parsed.timestamp_ns}"
            )
