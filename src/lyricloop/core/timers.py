# core/timers.py
from __future__ import annotations

RELEASE_TIMER = "interaction-release"
SEEK_SETTLE_TIMER = "seek-settle"

class TimerRegistry:
    """
    Named one-shot deadlines. Nothing runs on its own: the engine asks for
    due timers once per frame and turns them into TIMER_FIRED events.
    Arming an armed timer restarts it.
    """

    def __init__(self):
        self._deadlines: dict[str, float] = {}

    def arm(self, name: str, deadline: float) -> None:
        self._deadlines[name] = float(deadline)

    def cancel(self, name: str) -> None:
        self._deadlines.pop(name, None)

    def is_armed(self, name: str) -> bool:
        return name in self._deadlines

    def deadline(self, name: str) -> float | None:
        return self._deadlines.get(name)

    def due(self, now: float) -> list[str]:
        fired = sorted(
            (deadline, name) for name, deadline in self._deadlines.items() if deadline <= now
        )
        for _, name in fired:
            del self._deadlines[name]
        return [name for _, name in fired]

    def clear(self) -> None:
        self._deadlines.clear()

    def __len__(self) -> int:
        return len(self._deadlines)
