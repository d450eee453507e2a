# core/animator.py
from __future__ import annotations

from typing import Optional, Sequence

from .config import ScrollConfig, pick_fraction
from .layout import ScrollSurface
from .models import Line, ScrollAnimationState
from .timeline import absolute_index, loop_time, resolve_line_index

def ease_out_cubic(p: float) -> float:
    p = min(1.0, max(0.0, p))
    return 1.0 - (1.0 - p) ** 3

class ScrollAnimator:
    """
    Moves the scroll offset toward the line implied by the current time.

    The target sits between the current line and the next one in proportion
    to elapsed time, so the text glides instead of jumping line by line. On
    the last line the target heads for the first line of the next loop with
    an ease-out curve. The visible offset then closes a share of the
    remaining distance each frame.
    """

    def __init__(self, config: ScrollConfig | None = None):
        self.config = config or ScrollConfig()
        self.state = ScrollAnimationState()

    def sync(self, offset: float) -> None:
        self.state.current_offset = offset
        self.state.target_offset = offset

    def target_offset(
        self,
        surface: ScrollSurface,
        lines: Sequence[Line],
        duration: float,
        display_time: float,
        loop: int,
    ) -> Optional[float]:
        n = len(lines)
        t = loop_time(display_time, duration)
        index = resolve_line_index(lines, t, duration)
        if index < 0:
            return None

        current = surface.scroll_offset_for(absolute_index(loop, index, n))
        if current is None:
            return None

        line_time = lines[index].time
        if index + 1 < n:
            following = surface.scroll_offset_for(absolute_index(loop, index + 1, n))
            span = lines[index + 1].time - line_time
            eased = False
        else:
            following = surface.scroll_offset_for(absolute_index(loop + 1, 0, n))
            span = max(1.0, duration) - line_time
            eased = True

        if following is None or span <= self.config.min_interval:
            return current

        progress = min(1.0, max(0.0, (t - line_time) / span))
        if eased:
            progress = ease_out_cubic(progress)
        return current + (following - current) * progress

    def advance(self, target: float) -> float:
        """One easing step toward target; returns the new visible offset."""
        self.state.target_offset = target
        distance = target - self.state.current_offset

        if abs(distance) < self.config.epsilon:
            self.state.current_offset = target
            return target

        fraction = pick_fraction(self.config.bands, abs(distance))
        step = distance * fraction
        if abs(step) > self.config.max_step:
            step = self.config.max_step if step > 0 else -self.config.max_step
        self.state.current_offset += step
        return self.state.current_offset

    def frame(
        self,
        surface: ScrollSurface,
        lines: Sequence[Line],
        duration: float,
        display_time: float,
        loop: int,
        *,
        is_playing: bool,
        locked: bool,
    ) -> Optional[float]:
        """Returns the offset to write this frame, or None to stay idle."""
        if not is_playing or len(lines) < 2 or locked:
            return None

        target = self.target_offset(surface, lines, duration, display_time, loop)
        if target is None:
            return None
        return self.advance(target)
