"""Line-protocol encoding for player metrics.

One metric per line::

    player,peerId=<peerId> resolution="<WxH>",state=<int> <timestampNanos>

``peerId`` and ``resolution`` are written verbatim. Neither may contain
spaces, commas or quotes.
"""

import re
from dataclasses import dataclass

from player_telemetry.models import Sample

MEASUREMENT = "player"

_LINE_RE = re.compile(
    r'^(?P<measurement>[^,\s]+),peerId=(?P<peer_id>[^\s]*) '
    r'resolution="(?P<resolution>[^"]*)",state=(?P<state>-?\d+) '
    r'(?P<timestamp>\d+)$'
)


class LineProtocolError(ValueError):
    """Raised when a line does not match the player metric format."""


@dataclass(frozen=True)
class ParsedLine:
    measurement: str
    peer_id: str
    resolution: str
    state: int
    timestamp_ns: int


def is_sentinel(sample: Sample) -> bool:
    """True when the sample carries no information yet."""
    return not sample.is_known


def encode_sample(sample: Sample, peer_id: str, timestamp_ns: int) -> str:
    """Render a sample as a metric line (without the newline terminator)."""
    return (
        f'{MEASUREMENT},peerId={peer_id} '
        f'resolution="{sample.resolution}",state={int(sample.state)} '
        f'{timestamp_ns}'
    )


def parse_line(line: str) -> ParsedLine:
    """Parse a metric line back into its fields."""
    match = _LINE_RE.match(line.rstrip("\r\n"))
    if match is None:
        raise LineProtocolError(f"Malformed metric line: {line[:200]!r}")
    return ParsedLine(
        measurement=match.group("measurement"),
        peer_id=match.group("peer_id"),
        resolution=match.group("resolution"),
        state=int(match.group("state")),
        timestamp_ns=int(match.group("timestamp")),
    )
