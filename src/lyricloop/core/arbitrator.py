# core/arbitrator.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence

from .config import ArbitratorConfig
from .layout import ScrollSurface
from .models import InteractionLock, Line
from .timeline import absolute_index, split_absolute_index
from .timers import RELEASE_TIMER, TimerRegistry

logger = logging.getLogger(__name__)

class ArbitratorState(Enum):
    AUTO = auto()       # automatic sync drives the scroll position
    LOCKED = auto()     # the user is scrolling; automatic sync is suspended

@dataclass(frozen=True)
class ReleaseResult:
    seek_target: Optional[float] = None     # absolute seconds
    snap_offset: Optional[float] = None     # scroll offset to settle on
    absolute_index: Optional[int] = None    # rendered line picked

class InteractionArbitrator:
    """
    Decides who owns the scroll position.

    Gestures and scroll changes that were not written by the engine lock
    automatic sync out. The lock expires through RELEASE_TIMER; every new
    input restarts it. On release the view snaps to the nearest line with
    text and that line's absolute time becomes a seek request.
    """

    def __init__(self, timers: TimerRegistry, config: ArbitratorConfig | None = None):
        self.timers = timers
        self.config = config or ArbitratorConfig()
        self.lock = InteractionLock()
        self.programmatic: bool = False
        self._written_offset: float = 0.0

    @property
    def state(self) -> ArbitratorState:
        return ArbitratorState.LOCKED if self.lock.active else ArbitratorState.AUTO

    @property
    def is_locked(self) -> bool:
        return self.lock.active

    # ----------------------------
    # Programmatic writes
    # ----------------------------

    def begin_programmatic_write(self, offset: float) -> None:
        self.programmatic = True
        self._written_offset = float(offset)

    def end_programmatic_write(self) -> None:
        self.programmatic = False

    def is_programmatic(self, offset: float) -> bool:
        # Views report whole pixels; anything further off came from the user.
        return self.programmatic and abs(offset - self._written_offset) <= 1.0

    # ----------------------------
    # Input
    # ----------------------------

    def on_gesture(self, offset: float, now: float, is_playing: bool) -> None:
        if not self.lock.active:
            self.lock.active = True
            self.lock.lock_offset = float(offset)
            logger.debug("Interaction lock taken at offset %.1f", offset)

        self.lock.expires_at = now + self.config.release_delay(is_playing)
        self.timers.arm(RELEASE_TIMER, self.lock.expires_at)

    def on_scroll(self, offset: float, now: float, is_playing: bool, programmatic: bool = False) -> bool:
        if programmatic:
            return False
        self.on_gesture(offset, now, is_playing)
        return True

    def cancel(self) -> None:
        self.lock.clear()
        self.timers.cancel(RELEASE_TIMER)

    # ----------------------------
    # Release procedure
    # ----------------------------

    def release(
        self,
        surface: ScrollSurface,
        lines: Sequence[Line],
        duration: float,
        current_absolute: float,
        current_loop: int,
    ) -> ReleaseResult:
        try:
            return self._pick_release_target(surface, lines, duration, current_absolute, current_loop)
        finally:
            self.cancel()
            logger.debug("Interaction lock released")

    def _pick_release_target(self, surface, lines, duration, current_absolute, current_loop) -> ReleaseResult:
        n = len(lines)
        if n == 0 or duration <= 0:
            return ReleaseResult()

        offset = surface.scroll_offset()
        direction = 1 if offset >= self.lock.lock_offset else -1
        count = surface.rendered_count()

        closest = self._closest_rendered(surface, offset, count)
        if closest is None:
            return ReleaseResult()

        candidate = self._nearest_with_text(surface, lines, closest, direction, count)
        if candidate is None:
            logger.debug("No line with text near offset %.1f, skipping seek", offset)
            return ReleaseResult()

        loop, index = split_absolute_index(candidate, n)
        line_time = lines[index].time
        target = loop * duration + line_time

        if not math.isfinite(target) or target < 0:
            logger.warning("Discarding invalid seek target %r", target)
            return ReleaseResult()

        max_jump = self.config.max_jump_loops * duration
        if abs(target - current_absolute) > max_jump:
            fallback = current_loop * duration + line_time
            if direction > 0 and fallback < current_absolute:
                fallback += duration
            logger.warning(
                "Seek target %.2f is more than %.0f loops from %.2f, using %.2f",
                target, self.config.max_jump_loops, current_absolute, fallback,
            )
            target = fallback

        snap_index = absolute_index(int(target // duration), index, n)
        snap_offset = surface.scroll_offset_for(snap_index)
        if snap_offset is None:
            snap_index = candidate
            snap_offset = surface.scroll_offset_for(candidate)

        return ReleaseResult(seek_target=target, snap_offset=snap_offset, absolute_index=snap_index)

    @staticmethod
    def _closest_rendered(surface: ScrollSurface, offset: float, count: int) -> Optional[int]:
        best: Optional[int] = None
        best_dist = math.inf
        for i in range(count):
            line_offset = surface.scroll_offset_for(i)
            if line_offset is None:
                continue
            dist = abs(line_offset - offset)
            if dist < best_dist:
                best, best_dist = i, dist
            elif line_offset > offset:
                break
        return best

    @staticmethod
    def _nearest_with_text(surface, lines, start: int, direction: int, count: int) -> Optional[int]:
        n = len(lines)
        for k in range(count):
            if start + k >= count and start - k < 0:
                break
            for i in dict.fromkeys((start + direction * k, start - direction * k)):
                if 0 <= i < count and not lines[i % n].is_rest and surface.scroll_offset_for(i) is not None:
                    return i
        return None
