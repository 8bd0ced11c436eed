"""Tracks the current player resolution and state and reports changes."""

import threading

from player_telemetry.models import Sample, UNKNOWN_RESOLUTION, UNKNOWN_STATE, format_resolution


class PlayerInfoTracker:
    """Merges resolution and playback-state updates into full samples.

    The player reports the two fields through separate callbacks. Each update
    records the merged sample, so nothing is shipped until both are known.
    """

    def __init__(self, recorder):
        self._recorder = recorder
        self._lock = threading.Lock()
        self._current = Sample(UNKNOWN_RESOLUTION, UNKNOWN_STATE)

    @property
    def current(self) -> Sample:
        with self._lock:
            return self._current

    def update_resolution(self, resolution: str):
        with self._lock:
            self._current = Sample(resolution=resolution, state=self._current.state)
            sample = self._current
        self._recorder.record_sample(sample.resolution, sample.state)

    def update_video_size(self, width: int, height: int):
        self.update_resolution(format_resolution(width, height))

    def update_state(self, state: int):
        with self._lock:
            self._current = Sample(resolution=self._current.resolution, state=state)
            sample = self._current
        self._recorder.record_sample(sample.resolution, sample.state)
