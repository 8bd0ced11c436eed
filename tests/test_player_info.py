"""Tests for the player info tracker."""

from conftest import FakeConnectionFactory, make_config
from player_telemetry.models import Sample, format_resolution
from player_telemetry.player_info import PlayerInfoTracker
from player_telemetry.shipper import MetricShipper


class RecordingSink:
    def __init__(self):
        self.calls = []

    def record_sample(self, resolution, state):
        self.calls.append((resolution, state))


class TestPlayerInfoTracker:
    def test_starts_unknown(self):
        tracker = PlayerInfoTracker(RecordingSink())
        assert tracker.current == Sample("0x0", -1)
        assert tracker.current.is_known is False

    def test_updates_merge_fields(self):
        sink = RecordingSink()
        tracker = PlayerInfoTracker(sink)
        tracker.update_state(2)
        tracker.update_video_size(1920, 1080)
        tracker.update_state(3)
        assert sink.calls == [("0x0", 2), ("1920x1080", 2), ("1920x1080", 3)]
        assert tracker.current == Sample("1920x1080", 3)

    def test_only_complete_samples_reach_queue(self):
        factory = FakeConnectionFactory()
        shipper = MetricShipper(make_config(), connection_factory=factory)
        tracker = PlayerInfoTracker(shipper)

        tracker.update_resolution("1280x720")
        assert len(shipper.queue) == 0

        tracker.update_state(3)
        assert len(shipper.queue) == 1
        assert 'resolution="1280x720",state=3' in shipper.queue.snapshot()[0]


class TestFormatResolution:
    def test_format(self):
        assert format_resolution(1280, 720) == "1280x720"
        assert format_resolution(0, 0) == "0x0"
