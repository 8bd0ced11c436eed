"""Player sample model."""

from dataclasses import dataclass

UNKNOWN_RESOLUTION = "0x0"
UNKNOWN_STATE = -1


@dataclass(frozen=True)
class Sample:
    """A single observed player state-and-resolution reading."""

    resolution: str = UNKNOWN_RESOLUTION
    state: int = UNKNOWN_STATE

    @property
    def is_known(self) -> bool:
        return self.resolution != UNKNOWN_RESOLUTION and self.state != UNKNOWN_STATE


def format_resolution(width: int, height: int) -> str:
    """Render a video size as ``WxH``."""
    return f"{width}x{height}"
