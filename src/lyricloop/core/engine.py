# core/engine.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from .animator import ScrollAnimator
from .arbitrator import InteractionArbitrator
from .config import DESKTOP, EngineConfig
from .events import EngineEvent, EngineEventType, EventQueue
from .interpolator import TimeInterpolator
from .layout import MediaSource, ScrollSurface
from .models import EngineSnapshot, Line, Timeline
from .timeline import absolute_index, anchor_glyph, resolve_line_index
from .timers import RELEASE_TIMER, SEEK_SETTLE_TIMER, TimerRegistry
from .tracker import PlaybackTimeTracker

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[EngineSnapshot], None]

class Engine:
    """
    Owns every piece of mutable sync state.

    Outside code only posts events (media clock, gestures, seek requests)
    and calls frame() once per display refresh. A frame runs, in order:
      1. clear last frame's programmatic-scroll flag
      2. turn due timers into TIMER_FIRED events
      3. drain the event queue (FIFO)
      4. interpolate the display time
      5. resolve the line and place the scroll offset
    so everything inside one frame sees the same snapshot.
    """

    def __init__(
        self,
        lines: Sequence[Line],
        media: Optional[MediaSource] = None,
        surface: Optional[ScrollSurface] = None,
        config: EngineConfig | None = None,
        *,
        duration: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or DESKTOP
        self.lines: tuple[Line, ...] = tuple(lines)
        self.surface = surface
        self.clock = clock

        self.timers = TimerRegistry()
        self.events = EventQueue()
        self.tracker = PlaybackTimeTracker(media, self.timers, self.config.tracker, duration)
        self.interpolator = TimeInterpolator(self.config.interpolator, self.tracker.duration)
        self.arbitrator = InteractionArbitrator(self.timers, self.config.arbitrator)
        self.animator = ScrollAnimator(self.config.scroll)

        self._listeners: list[SnapshotListener] = []
        self._last_snapshot: EngineSnapshot | None = None
        self._disposed = False

    # ----------------------------
    # Exposed state
    # ----------------------------

    @property
    def display_time(self) -> float:
        return self.tracker.display_time

    @property
    def absolute_scroll_time(self) -> float:
        return self.tracker.absolute_time

    @property
    def duration(self) -> float:
        return self.tracker.duration

    @property
    def timeline(self) -> Timeline:
        return Timeline(self.lines, self.tracker.duration)

    @property
    def loop_count(self) -> int:
        return self.tracker.loop_count

    @property
    def is_playing(self) -> bool:
        return self.tracker.is_playing

    @property
    def is_locked(self) -> bool:
        return self.arbitrator.is_locked

    @property
    def interpolated_time(self) -> float:
        return self.interpolator.interpolated_time

    @property
    def current_line_index(self) -> int:
        return resolve_line_index(self.lines, self.tracker.display_time, self.tracker.duration)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> EngineSnapshot:
        index = self.current_line_index
        abs_index = absolute_index(self.loop_count, index, len(self.lines)) if index >= 0 else -1
        return EngineSnapshot(
            display_time=self.display_time,
            absolute_scroll_time=self.absolute_scroll_time,
            duration=self.duration,
            loop_count=self.loop_count,
            is_playing=self.is_playing,
            current_line_index=index,
            current_absolute_index=abs_index,
            anchor_glyph=anchor_glyph(self.lines, index, self.config.fallback_glyph),
            locked=self.is_locked,
        )

    def subscribe(self, callback: SnapshotListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: SnapshotListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def attach_surface(self, surface: ScrollSurface) -> None:
        self.surface = surface
        self.animator.sync(surface.scroll_offset())

    # ----------------------------
    # Inbound notifications (queued)
    # ----------------------------

    def post(self, event_type: EngineEventType, **data) -> None:
        if self._disposed:
            return
        self.events.post(EngineEvent(event_type, data or None, self.clock()))

    def on_time_update(self, seconds: float) -> None:
        self.post(EngineEventType.TIME_SAMPLE, time=seconds)

    def on_ended(self) -> None:
        self.post(EngineEventType.MEDIA_ENDED)

    def on_loaded_metadata(self, duration: float | None) -> None:
        self.post(EngineEventType.METADATA_LOADED, duration=duration)

    def on_can_play(self) -> None:
        self.post(EngineEventType.CAN_PLAY)

    def on_play_state(self, playing: bool) -> None:
        self.post(EngineEventType.PLAY_STATE, playing=bool(playing))

    def on_error(self, message: str) -> None:
        self.post(EngineEventType.MEDIA_ERROR, message=message)

    def on_gesture(self, kind: str = "press") -> None:
        # The offset before the gesture moves the view; release compares against it.
        offset = self.surface.scroll_offset() if self.surface is not None else 0.0
        self.post(EngineEventType.GESTURE, kind=kind, offset=offset)

    def on_scroll(self, offset: float) -> None:
        # The flag is read now: by the time the queue drains it is cleared.
        self.post(EngineEventType.SCROLL, offset=float(offset), programmatic=self.arbitrator.is_programmatic(offset))

    def request_seek(self, absolute_time: float) -> None:
        self.post(EngineEventType.SEEK_REQUEST, absolute_time=absolute_time)

    # ----------------------------
    # Frame
    # ----------------------------

    def frame(self, now: float | None = None) -> Optional[float]:
        """Run one frame. Returns the scroll offset written, if any."""
        if self._disposed:
            return None
        if now is None:
            now = self.clock()

        self.arbitrator.end_programmatic_write()

        for name in self.timers.due(now):
            self.events.post(EngineEvent(EngineEventType.TIMER_FIRED, {"name": name}, now))

        for event in self.events.drain():
            self._dispatch(event, now)

        interpolated = self.interpolator.step(now, self.is_playing)

        written = None
        if self.surface is not None:
            offset = self.animator.frame(
                self.surface,
                self.lines,
                self.tracker.safe_duration(),
                interpolated,
                self._loop_for(interpolated),
                is_playing=self.is_playing,
                locked=self.is_locked,
            )
            if offset is not None and self._write_scroll(offset):
                written = offset

        self._publish()
        return written

    def teardown(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.events.clear()
        self.arbitrator.cancel()
        self.tracker.reset()
        self.timers.clear()
        self._listeners.clear()
        logger.debug("Engine torn down")

    # ----------------------------
    # Dispatch
    # ----------------------------

    def _dispatch(self, event: EngineEvent, now: float) -> None:
        kind = event.event_type
        at = event.timestamp if event.timestamp is not None else now

        if kind is EngineEventType.TIME_SAMPLE:
            if self.tracker.on_time_update(event.get("time")):
                self.interpolator.sample(self.tracker.display_time, at)

        elif kind is EngineEventType.MEDIA_ENDED:
            self.tracker.on_ended()
            self.interpolator.sample(self.tracker.display_time, at)

        elif kind is EngineEventType.METADATA_LOADED:
            if self.tracker.on_loaded_metadata(event.get("duration")):
                self.interpolator.set_duration(self.tracker.duration)
                self.interpolator.reset(self.tracker.display_time, at)

        elif kind is EngineEventType.CAN_PLAY:
            had_pending = self.tracker.pending_seek is not None
            had_duration = self.tracker.duration_known
            self.tracker.on_can_play()
            # the media may have reported its duration only here
            late_duration = self.tracker.duration_known and not had_duration
            if late_duration:
                self.interpolator.set_duration(self.tracker.duration)
            if had_pending or late_duration:
                self.interpolator.reset(self.tracker.display_time, at)

        elif kind is EngineEventType.PLAY_STATE:
            playing = bool(event.get("playing"))
            self.tracker.set_playing(playing)
            if playing and self.surface is not None:
                self.animator.sync(self.surface.scroll_offset())

        elif kind is EngineEventType.MEDIA_ERROR:
            logger.error("Media error: %s", event.get("message"))

        elif kind is EngineEventType.GESTURE:
            self.arbitrator.on_gesture(event.get("offset", 0.0), at, self.is_playing)

        elif kind is EngineEventType.SCROLL:
            self.arbitrator.on_scroll(event.get("offset", 0.0), at, self.is_playing, event.get("programmatic", False))

        elif kind is EngineEventType.SEEK_REQUEST:
            self._seek(event.get("absolute_time"), now)

        elif kind is EngineEventType.TIMER_FIRED:
            name = event.get("name")
            if name == RELEASE_TIMER:
                self._release(now)
            elif name == SEEK_SETTLE_TIMER:
                self.tracker.end_seek_settle()

    def _seek(self, absolute_time: float, now: float) -> None:
        if self.tracker.seek(absolute_time, now):
            self.interpolator.reset(self.tracker.display_time, now)
            logger.debug("Seek to %.2f (loop %d)", self.absolute_scroll_time, self.loop_count)

    def _release(self, now: float) -> None:
        if self.surface is None:
            self.arbitrator.cancel()
            return

        result = self.arbitrator.release(
            self.surface,
            self.lines,
            self.tracker.safe_duration(),
            self.tracker.absolute_time,
            self.tracker.loop_count,
        )
        if result.snap_offset is not None and self._write_scroll(result.snap_offset):
            self.animator.sync(result.snap_offset)
        else:
            self.animator.sync(self.surface.scroll_offset())

        if result.seek_target is not None:
            self._seek(result.seek_target, now)

    def _loop_for(self, interpolated: float) -> int:
        # The estimate may still sit before a wrap the tracker already counted
        # (or run just past one it has not counted yet).
        half = self.tracker.safe_duration() / 2
        loop = self.tracker.loop_count
        if interpolated - self.tracker.display_time > half:
            loop -= 1
        elif self.tracker.display_time - interpolated > half:
            loop += 1
        return max(0, loop)

    def _write_scroll(self, offset: float) -> bool:
        self.arbitrator.begin_programmatic_write(offset)
        try:
            self.surface.set_scroll_offset(offset)
            return True
        except Exception:
            logger.exception("Failed to write scroll offset %.1f", offset)
            return False

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        if snap == self._last_snapshot:
            return
        self._last_snapshot = snap
        for callback in list(self._listeners):
            try:
                callback(snap)
            except Exception:
                logger.exception("Snapshot listener failed")
