# core/interpolator.py
from __future__ import annotations

import math

from .config import InterpolatorConfig, pick_fraction
from .timeline import loop_time

def circular_delta(source: float, target: float, size: float) -> float:
    """
    Signed shortest step from source to target on a circle of `size` seconds.
    """
    if size <= 0:
        return target - source
    delta = math.fmod(target - source, size)
    if delta > size / 2:
        delta -= size
    elif delta < -size / 2:
        delta += size
    return delta

class TimeInterpolator:
    """
    Smooths sparse media clock samples into a per-frame display time.

    The estimate chases the latest sample (extrapolated by the wall-clock
    time since it arrived while playing). Far gaps are treated as seeks and
    snapped, mid-size gaps are closed quickly, small ones gently.
    """

    def __init__(self, config: InterpolatorConfig | None = None, duration: float = 1.0):
        self.config = config or InterpolatorConfig()
        self.duration = max(1.0, duration)
        self.interpolated_time: float = 0.0
        self.target_time: float = 0.0
        self._sample_at: float | None = None

    def set_duration(self, duration: float) -> None:
        self.duration = max(1.0, duration)
        self.interpolated_time = loop_time(self.interpolated_time, self.duration)
        self.target_time = loop_time(self.target_time, self.duration)

    def sample(self, display_time: float, now: float) -> None:
        self.target_time = display_time
        self._sample_at = now

    def reset(self, display_time: float, now: float | None = None) -> None:
        """Hard resync, e.g. after a seek."""
        self.interpolated_time = display_time
        self.target_time = display_time
        self._sample_at = now

    def current_target(self, now: float, is_playing: bool) -> float:
        if not is_playing or self._sample_at is None:
            return self.target_time
        elapsed = min(max(0.0, now - self._sample_at), self.config.max_extrapolation)
        return loop_time(self.target_time + elapsed, self.duration)

    def step(self, now: float, is_playing: bool) -> float:
        if not is_playing:
            self.interpolated_time = self.target_time
            return self.interpolated_time

        target = self.current_target(now, is_playing)
        gap = circular_delta(self.interpolated_time, target, self.duration)

        if abs(gap) > self.config.snap_threshold:
            self.interpolated_time = target
        else:
            fraction = pick_fraction(self.config.bands, abs(gap))
            self.interpolated_time = loop_time(self.interpolated_time + gap * fraction, self.duration)
        return self.interpolated_time
