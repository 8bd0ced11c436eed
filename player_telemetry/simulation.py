"""Simulated player that emits resolution and playback-state changes."""

import logging
import random
import threading

from player_telemetry.player_info import PlayerInfoTracker

logger = logging.getLogger(__name__)

# Playback state codes as reported by the media player.
STATE_IDLE = 1
STATE_BUFFERING = 2
STATE_READY = 3
STATE_ENDED = 4

VIDEO_SIZES = [(640, 360), (854, 480), (1280, 720), (1920, 1080)]


def run_player_simulation(
    tracker: PlayerInfoTracker,
    shutdown_event: threading.Event,
    events: int = 20,
    interval: float = 1.0,
) -> int:
    """Feed the tracker a plausible sequence of player events.

    Starts buffering, then alternates between quality switches and
    rebuffering until ``events`` updates have been made or shutdown is
    requested. Returns the number of updates made.
    """
    tracker.update_state(STATE_BUFFERING)
    made = 1
    width, height = random.choice(VIDEO_SIZES)
    tracker.update_video_size(width, height)
    made += 1
    tracker.update_state(STATE_READY)
    made += 1

    while made < events and not shutdown_event.is_set():
        shutdown_event.wait(interval)
        if shutdown_event.is_set():
            break
        if random.random() < 0.2:
            tracker.update_state(STATE_BUFFERING)
            tracker.update_state(STATE_READY)
            made += 2
        else:
            width, height = random.choice(VIDEO_SIZES)
            tracker.update_video_size(width, height)
            made += 1

    if not shutdown_event.is_set():
        tracker.update_state(STATE_ENDED)
        made += 1
    logger.info("Player simulation finished after %d update(s)", made)
    return made
