# core/events.py
"""
Engine event queue.

Media callbacks, gestures and timers never touch engine state directly: they
post an EngineEvent and the engine drains the queue in FIFO order at the start
of the next frame. This keeps the ordering deterministic and lets tests replay
a sequence of events without a real media element or timer.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

class EngineEventType(Enum):
    # media clock
    TIME_SAMPLE = auto()        # data: {"time": seconds}
    MEDIA_ENDED = auto()
    METADATA_LOADED = auto()    # data: {"duration": seconds}
    CAN_PLAY = auto()
    PLAY_STATE = auto()         # data: {"playing": bool}
    MEDIA_ERROR = auto()        # data: {"message": str}

    # user input
    GESTURE = auto()            # data: {"kind": "press" | "drag" | "wheel" | "touch"}
    SCROLL = auto()             # data: {"offset": px, "programmatic": bool}
    SEEK_REQUEST = auto()       # data: {"absolute_time": seconds}

    TIMER_FIRED = auto()        # data: {"name": timer name}

@dataclass
class EngineEvent:
    event_type: EngineEventType
    data: Optional[dict[str, Any]] = None
    timestamp: Optional[float] = None

    def get(self, key: str, default: Any = None) -> Any:
        return (self.data or {}).get(key, default)

    def __str__(self) -> str:
        if self.data:
            data_str = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"EngineEvent({self.event_type.name}, {data_str})"
        return f"EngineEvent({self.event_type.name})"

class EventQueue:
    def __init__(self):
        self._fifo: deque[EngineEvent] = deque()

    def post(self, event: EngineEvent) -> None:
        self._fifo.append(event)

    def poll(self) -> EngineEvent | None:
        """Return next queued event or None (non-blocking)."""
        if not self._fifo:
            return None
        return self._fifo.popleft()

    def drain(self):
        # Events posted while draining run in the same pass, after the others.
        while self._fifo:
            yield self._fifo.popleft()

    def clear(self) -> None:
        self._fifo.clear()

    def __len__(self) -> int:
        return len(self._fifo)
