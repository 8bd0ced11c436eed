"""Single-use TLS connection to the metrics collector."""

import logging
import socket
import ssl

logger = logging.getLogger(__name__)


class CollectorConnection:
    """One TLS socket, opened for a single drain cycle and then closed.

    Lines are written as UTF-8 followed by a single ``\\n``. Nothing is
    read back from the collector.
    """

    def __init__(
        self,
        host: str,
        port: int,
        ssl_context: ssl.SSLContext,
        timeout: float = 5.0,
        send_buffer_size: int = 65536,
    ):
        self._host = host
        self._port = port
        self._ssl_ctx = ssl_context
        self._timeout = timeout
        self._send_buffer_size = send_buffer_size
        self._sock: ssl.SSLSocket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def open(self):
        """Connect and complete the TLS handshake.

        Raises OSError (including ssl.SSLError and socket.timeout) on failure,
        or ValueError when the hostname cannot be IDNA-encoded.
        """
        if not self._host:
            raise ConnectionError("No collector host configured")

        raw_sock = socket.create_connection((self._host, self._port), timeout=self._timeout)
        try:
            if self._send_buffer_size > 0:
                raw_sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, self._send_buffer_size)
            self._sock = self._ssl_ctx.wrap_socket(raw_sock, server_hostname=self._host)
        except BaseException:
            raw_sock.close()
            raise
        logger.debug(
            "TLS connection to %s:%d established (%s)",
            self._host, self._port, self._sock.version(),
        )

    def write_line(self, line: str):
        """Write one line plus the newline terminator and push it out."""
        if self._sock is None:
            raise ConnectionError("Connection is not open")
        self._sock.sendall(line.encode("utf-8") + b"\n")

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        sock.close()
