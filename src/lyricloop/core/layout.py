# core/layout.py
from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .models import Line

class ScrollSurface(Protocol):
    """What the engine needs from the scrolling view."""

    def scroll_offset(self) -> float: ...

    def set_scroll_offset(self, value: float) -> None: ...

    def rendered_count(self) -> int: ...

    def scroll_offset_for(self, absolute_index: int) -> Optional[float]:
        """Scroll offset that centers the rendered line, None if not measured yet."""
        ...

class MediaSource(Protocol):
    """What the engine needs from the media element."""

    def get_current_time(self) -> float: ...

    def get_duration(self) -> Optional[float]: ...

    def set_current_time(self, seconds: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

class VirtualScrollSurface:
    """
    Geometry-only scroll view: rows stacked top to bottom with a padding of
    half a viewport above and below, the same box model the Qt view uses.
    Useful headless and in tests.
    """

    def __init__(
        self,
        lines: Sequence[Line],
        *,
        repeat_count: int = 3,
        line_height: float = 60.0,
        rest_height: float = 80.0,
        viewport_height: float = 600.0,
    ):
        self.viewport_height = float(viewport_height)
        self._offset = 0.0
        self._tops: list[float] = []
        self._heights: list[float] = []
        self.writes: list[float] = []
        self.measured = True

        y = self.viewport_height / 2
        for _ in range(max(0, repeat_count)):
            for line in lines:
                h = rest_height if line.is_rest else line_height
                self._tops.append(y)
                self._heights.append(h)
                y += h
        self.content_height = y + self.viewport_height / 2

    def scroll_offset(self) -> float:
        return self._offset

    def set_scroll_offset(self, value: float) -> None:
        max_offset = max(0.0, self.content_height - self.viewport_height)
        self._offset = min(max(0.0, float(value)), max_offset)
        self.writes.append(self._offset)

    def rendered_count(self) -> int:
        return len(self._tops)

    def scroll_offset_for(self, absolute_index: int) -> Optional[float]:
        if not self.measured or not 0 <= absolute_index < len(self._tops):
            return None
        center = self._tops[absolute_index] + self._heights[absolute_index] / 2
        return center - self.viewport_height / 2

    def user_scroll(self, value: float) -> None:
        """Move the view as a user would (not recorded as a write)."""
        self._offset = float(value)
