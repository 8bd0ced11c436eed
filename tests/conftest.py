"""Shared pytest fixtures and fake collector connections."""

import itertools

import pytest

from player_telemetry.config import ShipperConfig


class FakeConnection:
    """In-memory stand-in for CollectorConnection.

    ``fail_on_write`` is the 1-based index of the write that should fail.
    """

    def __init__(
        self,
        fail_open: Exception | None = None,
        report_connected: bool = True,
        fail_on_write: int | None = None,
        close_error: Exception | None = None,
        on_write=None,
    ):
        self.fail_open = fail_open
        self.report_connected = report_connected
        self.fail_on_write = fail_on_write
        self.close_error = close_error
        self.on_write = on_write
        self.opened = False
        self.closed = False
        self.close_calls = 0
        self.write_attempts = 0
        self.written: list[str] = []

    @property
    def connected(self) -> bool:
        return self.opened and self.report_connected and not self.closed

    def open(self):
        if self.fail_open is not None:
            raise self.fail_open
        self.opened = True

    def write_line(self, line: str):
        self.write_attempts += 1
        if self.fail_on_write is not None and self.write_attempts == self.fail_on_write:
            raise ConnectionResetError("connection reset by peer")
        self.written.append(line)
        if self.on_write is not None:
            self.on_write(line)

    @property
    def wire_bytes(self) -> bytes:
        return b"".join(line.encode("utf-8") + b"\n" for line in self.written)

    def close(self):
        self.close_calls += 1
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeConnectionFactory:
    """Hands out prepared connections in order, then healthy ones."""

    def __init__(self, *connections: FakeConnection):
        self._pending = list(connections)
        self.created: list[FakeConnection] = []

    def __call__(self) -> FakeConnection:
        conn = self._pending.pop(0) if self._pending else FakeConnection()
        self.created.append(conn)
        return conn

    @property
    def sent_lines(self) -> list[str]:
        return [line for conn in self.created for line in conn.written]


def make_config(**overrides) -> ShipperConfig:
    """Build a ShipperConfig with fast-test defaults."""
    defaults = dict(
        collector_host="collector.test",
        collector_port=8094,
        peer_id="peerX",
        flush_interval=0.05,
        write_delay=0.0,
    )
    defaults.update(overrides)
    return ShipperConfig(**defaults)


@pytest.fixture
def config() -> ShipperConfig:
    return make_config()


@pytest.fixture
def clock():
    """Deterministic nanosecond clock: 1000, 1001, 1002, ..."""
    counter = itertools.count(1000)
    return lambda: next(counter)
