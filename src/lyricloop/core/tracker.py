# core/tracker.py
from __future__ import annotations

import logging
import math
from typing import Optional

from .config import TrackerConfig
from .interpolator import circular_delta
from .layout import MediaSource
from .models import InteractionLock, PendingSeek, PlaybackState
from .timeline import loop_time
from .timers import SEEK_SETTLE_TIMER, TimerRegistry

logger = logging.getLogger(__name__)

def _valid_time(value) -> bool:
    return value is not None and math.isfinite(value) and value >= 0

class PlaybackTimeTracker:
    """
    Turns raw media clock samples (display time, looping in [0, duration))
    into PlaybackState with a loop counter and an absolute time.

    Two loop signals feed the counter:
      - the wrap heuristic: a sample more than half a duration behind the
        previous one means the track restarted;
      - the media "ended" notification.
    Both may report the same wrap, so each one checks whether the other
    already counted it.
    """

    def __init__(
        self,
        media: Optional[MediaSource],
        timers: TimerRegistry,
        config: TrackerConfig | None = None,
        duration: float | None = None,
    ):
        self.media = media
        self.timers = timers
        self.config = config or TrackerConfig()

        self.state = PlaybackState()
        self.duration: float = float(duration) if _valid_time(duration) and duration > 0 else self.config.placeholder_duration
        self.duration_known: bool = False
        self.is_ready: bool = False
        self.pending_seek: PendingSeek | None = None

        # active while a seek settles; samples near the target are ignored
        self.seek_lock = InteractionLock()

        self._just_ended: bool = False
        self._wrap_counted: bool = False

    # ----------------------------
    # Read side
    # ----------------------------

    @property
    def display_time(self) -> float:
        return self.state.display_time

    @property
    def absolute_time(self) -> float:
        return self.state.absolute_time

    @property
    def loop_count(self) -> int:
        return self.state.loop_count

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    def safe_duration(self) -> float:
        return max(1.0, self.duration)

    # ----------------------------
    # Media notifications
    # ----------------------------

    def on_time_update(self, raw_time: float) -> bool:
        """Apply one media clock sample. Returns False if it was discarded."""
        if raw_time is None or not math.isfinite(raw_time):
            logger.debug("Discarding non-finite time sample: %r", raw_time)
            return False

        d = self.safe_duration()
        t = loop_time(max(0.0, float(raw_time)), d)
        prev = self.state.display_time

        wrapped = prev - t > d / 2
        if self.seek_lock.active:
            target = self.seek_lock.last_seek_target_display_time
            if target is not None and abs(circular_delta(target, t, d)) <= self.config.seek_tolerance:
                return False
            # A stale pre-seek position is not a wrap: only a short step
            # forward across the end of the track counts.
            window = self.config.seek_settle_playing + self.config.seek_tolerance
            wrapped = wrapped and circular_delta(prev, t, d) <= window

        if self._just_ended:
            if self.config.ended_clear_threshold <= t < d / 2:
                self._just_ended = False
        elif wrapped:
            self.state.loop_count += 1
            self._wrap_counted = True
            logger.debug("Loop wrap detected (%.2f -> %.2f), loop=%d", prev, t, self.state.loop_count)

        if t >= d / 2:
            self._wrap_counted = False

        self._set_display(t)
        return True

    def on_ended(self) -> None:
        if self._wrap_counted:
            logger.debug("Ended after wrap was already counted, loop=%d", self.state.loop_count)
            return

        self.state.loop_count += 1
        self._just_ended = True
        self._set_display(0.0)
        logger.debug("Media ended, loop=%d", self.state.loop_count)

    def on_loaded_metadata(self, duration: float | None) -> bool:
        if not _valid_time(duration) or duration <= 0:
            logger.warning("Ignoring invalid media duration: %r", duration)
            return False

        first = not self.duration_known
        self.duration = float(duration)
        self.duration_known = True
        logger.info("Media duration resolved: %.2fs", self.duration)

        if self.pending_seek is not None:
            self._apply_pending_seek()
            return True

        if first and self.config.initial_loop > 0 and self.state.loop_count == 0:
            self.state.loop_count = self.config.initial_loop

        self._set_display(loop_time(self.state.display_time, self.safe_duration()))
        return True

    def on_can_play(self) -> None:
        self.is_ready = True
        if not self.duration_known and self.media is not None:
            # metadata can arrive before anyone listens for it
            duration = self.media.get_duration()
            if _valid_time(duration) and duration > 0:
                self.on_loaded_metadata(duration)
        if self.pending_seek is not None:
            self._apply_pending_seek()

    def set_playing(self, playing: bool) -> None:
        self.state.is_playing = bool(playing)

    # ----------------------------
    # Seeking
    # ----------------------------

    def seek(self, absolute_time: float, now: float = 0.0) -> bool:
        if not _valid_time(absolute_time):
            logger.warning("Ignoring invalid seek target: %r", absolute_time)
            return False

        absolute_time = float(absolute_time)
        d = self.safe_duration()
        display = loop_time(absolute_time, d)

        self.state.loop_count = int(absolute_time // d)
        self._set_display(display)
        self._just_ended = False
        self._wrap_counted = False

        settle = self.config.seek_settle_playing if self.state.is_playing else self.config.seek_settle_paused
        self.seek_lock.active = True
        self.seek_lock.expires_at = now + settle
        self.seek_lock.last_seek_target_display_time = display
        self.timers.arm(SEEK_SETTLE_TIMER, now + settle)

        if self.is_ready:
            self.pending_seek = None
            self._write_media_time(display)
        else:
            self.pending_seek = PendingSeek(absolute_time)
            logger.debug("Media not ready, seek to %.2f deferred", absolute_time)
        return True

    def end_seek_settle(self) -> None:
        self.seek_lock.clear()
        self.timers.cancel(SEEK_SETTLE_TIMER)

    def reset(self) -> None:
        self.pending_seek = None
        self.end_seek_settle()
        self._just_ended = False
        self._wrap_counted = False

    # ----------------------------
    # Helpers
    # ----------------------------

    def _set_display(self, display: float) -> None:
        self.state.display_time = display
        self.state.absolute_time = self.state.loop_count * self.safe_duration() + display

    def _apply_pending_seek(self) -> None:
        pending = self.pending_seek
        self.pending_seek = None
        if pending is None:
            return

        d = self.safe_duration()
        display = loop_time(pending.absolute_time, d)
        self._write_media_time(display)

        self.state.loop_count = int(pending.absolute_time // d)
        self._set_display(display)
        if self.seek_lock.active:
            self.seek_lock.last_seek_target_display_time = display
        logger.debug("Applied pending seek to %.2f (display %.2f)", pending.absolute_time, display)

    def _write_media_time(self, display: float) -> bool:
        if self.media is None:
            return False
        try:
            self.media.set_current_time(display)
            return True
        except Exception:
            logger.exception("Failed to set media position to %.2fs", display)
            return False
