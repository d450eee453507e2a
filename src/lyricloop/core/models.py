# core/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class Line:
    time: float         # seconds from the start of the loop
    text: str = ""      # empty text is a rest

    @property
    def is_rest(self) -> bool:
        return not self.text.strip()

@dataclass(frozen=True)
class Timeline:
    lines: tuple[Line, ...]
    duration: float

    def __len__(self) -> int:
        return len(self.lines)

@dataclass
class PlaybackState:
    display_time: float = 0.0
    absolute_time: float = 0.0
    loop_count: int = 0
    is_playing: bool = False

@dataclass(frozen=True)
class PendingSeek:
    absolute_time: float

@dataclass
class InteractionLock:
    active: bool = False
    expires_at: float = 0.0
    lock_offset: float = 0.0
    last_seek_target_display_time: Optional[float] = None

    def clear(self) -> None:
        self.active = False
        self.expires_at = 0.0
        self.last_seek_target_display_time = None

@dataclass
class ScrollAnimationState:
    current_offset: float = 0.0
    target_offset: float = 0.0

@dataclass(frozen=True)
class EngineSnapshot:
    display_time: float
    absolute_scroll_time: float
    duration: float
    loop_count: int
    is_playing: bool
    current_line_index: int
    current_absolute_index: int
    anchor_glyph: str
    locked: bool = False
