# core/config.py
"""
Tuning tables for the sync engine.

Every distance-adaptive constant lives here as data. A band table is a tuple
of EasingBand rows sorted by descending threshold: the first row whose
threshold is <= the measured distance wins.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

PROFILE_ENV = "LYRICLOOP_PROFILE"

@dataclass(frozen=True)
class EasingBand:
    threshold: float    # minimum distance for this row (seconds or pixels)
    fraction: float     # share of the remaining distance covered per frame

def pick_fraction(bands: tuple[EasingBand, ...], distance: float) -> float:
    for band in bands:
        if distance >= band.threshold:
            return band.fraction
    return bands[-1].fraction if bands else 1.0

@dataclass(frozen=True)
class TrackerConfig:
    placeholder_duration: float = 364.0
    # seconds a sample must reach before the "just ended" flag is dropped
    ended_clear_threshold: float = 0.5
    seek_settle_playing: float = 1.0
    seek_settle_paused: float = 0.5
    seek_tolerance: float = 0.5
    initial_loop: int = 0

@dataclass(frozen=True)
class InterpolatorConfig:
    snap_threshold: float = 1.0
    max_extrapolation: float = 0.5
    bands: tuple[EasingBand, ...] = (
        EasingBand(0.5, 0.25),
        EasingBand(0.1, 0.12),
        EasingBand(0.0, 0.06),
    )

@dataclass(frozen=True)
class ScrollConfig:
    epsilon: float = 0.5
    max_step: float = 40.0
    min_interval: float = 0.01
    bands: tuple[EasingBand, ...] = (
        EasingBand(400.0, 0.2),
        EasingBand(100.0, 0.12),
        EasingBand(0.0, 0.08),
    )

@dataclass(frozen=True)
class ArbitratorConfig:
    release_delay_playing: float = 0.6
    release_delay_paused: float = 0.35
    max_jump_loops: float = 2.0

    def release_delay(self, is_playing: bool) -> float:
        return self.release_delay_playing if is_playing else self.release_delay_paused

@dataclass(frozen=True)
class EngineConfig:
    name: str = "desktop"
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    interpolator: InterpolatorConfig = field(default_factory=InterpolatorConfig)
    scroll: ScrollConfig = field(default_factory=ScrollConfig)
    arbitrator: ArbitratorConfig = field(default_factory=ArbitratorConfig)
    fallback_glyph: str = "心"
    repeat_count: int = 50
    frame_interval_ms: int = 16

DESKTOP = EngineConfig()

# Touch scrolling keeps coasting after the finger lifts, so the lock waits
# longer and the easing is softer.
MOBILE = replace(
    DESKTOP,
    name="mobile",
    interpolator=InterpolatorConfig(
        bands=(
            EasingBand(0.5, 0.2),
            EasingBand(0.1, 0.1),
            EasingBand(0.0, 0.05),
        ),
    ),
    scroll=ScrollConfig(
        max_step=30.0,
        bands=(
            EasingBand(400.0, 0.15),
            EasingBand(100.0, 0.1),
            EasingBand(0.0, 0.06),
        ),
    ),
    arbitrator=ArbitratorConfig(release_delay_playing=1.0, release_delay_paused=0.5),
    repeat_count=20,
)

PROFILES: dict[str, EngineConfig] = {
    DESKTOP.name: DESKTOP,
    MOBILE.name: MOBILE,
}

def get_profile(name: str | None = None) -> EngineConfig:
    """
    Resolve a profile by name; falls back to $LYRICLOOP_PROFILE, then desktop.
    """
    key = (name or os.getenv(PROFILE_ENV) or DESKTOP.name).strip().lower()
    try:
        return PROFILES[key]
    except KeyError:
        raise ValueError(f"Unknown profile {key!r} (expected one of: {', '.join(PROFILES)})") from None
