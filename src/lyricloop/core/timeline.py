# core/timeline.py
from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence

from .models import Line

def loop_time(time: float, duration: float) -> float:
    base = max(1.0, duration)
    t = math.fmod(time, base)
    if t < 0:
        t += base
    return t

def resolve_line_index(lines: Sequence[Line], time: float, duration: float) -> int:
    """
    Index of the last line whose time is <= the loop-relative time, or -1.

    Equal timestamps resolve to the later line.
    """
    if not lines or not math.isfinite(time):
        return -1
    return bisect_right(lines, loop_time(time, duration), key=lambda line: line.time) - 1

def anchor_line_index(lines: Sequence[Line], index: int) -> Optional[int]:
    """
    Nearest non-rest line at or before `index`, else the first non-rest line.
    """
    if not lines:
        return None

    for i in range(min(index, len(lines) - 1), -1, -1):
        if not lines[i].is_rest:
            return i

    for i, line in enumerate(lines):
        if not line.is_rest:
            return i
    return None

def anchor_glyph(lines: Sequence[Line], index: int, fallback: str) -> str:
    i = anchor_line_index(lines, index)
    if i is None:
        return fallback
    return lines[i].text.strip()[0]

# --- repeated rendering: the view shows the lines back to back N times ---

def absolute_index(loop: int, index: int, line_count: int) -> int:
    return loop * line_count + index

def split_absolute_index(abs_index: int, line_count: int) -> tuple[int, int]:
    """Returns (loop, index within loop)."""
    if line_count <= 0:
        return 0, -1
    return divmod(abs_index, line_count)

# --- interval analysis ---

@dataclass(frozen=True)
class Gap:
    from_index: int
    to_index: int
    from_time: float
    to_time: float

    @property
    def interval(self) -> float:
        return self.to_time - self.from_time

@dataclass(frozen=True)
class GapReport:
    largest: tuple[Gap, ...]
    over_threshold: tuple[Gap, ...]
    average: float
    minimum: float
    maximum: float

def gap_report(lines: Sequence[Line], limit: int = 10, threshold: float = 5.0) -> GapReport:
    gaps = [
        Gap(i - 1, i, lines[i - 1].time, lines[i].time)
        for i in range(1, len(lines))
    ]
    positive = [g.interval for g in gaps if g.interval > 0]

    largest = tuple(sorted(gaps, key=lambda g: g.interval, reverse=True)[:limit])
    over = tuple(g for g in gaps if g.interval > threshold)

    if not positive:
        return GapReport(largest, over, 0.0, 0.0, 0.0)
    return GapReport(
        largest=largest,
        over_threshold=over,
        average=sum(positive) / len(positive),
        minimum=min(positive),
        maximum=max(positive),
    )
