"""pytest configuration file."""

import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from lyricloop.core.models import Line


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class FakeMedia:
    """Media source that records position writes; can be told to fail."""

    def __init__(self, duration=None):
        self.current_time = 0.0
        self.duration = duration
        self.writes: list[float] = []
        self.fail_writes = False
        self.playing = False

    def get_current_time(self) -> float:
        return self.current_time

    def get_duration(self):
        return self.duration

    def set_current_time(self, seconds: float) -> None:
        if self.fail_writes:
            raise RuntimeError("media rejected position")
        self.writes.append(seconds)
        self.current_time = seconds

    def play(self) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False


@pytest.fixture(autouse=True, scope="session")
def _debug_logs():
    logging.getLogger("lyricloop").setLevel(logging.DEBUG)
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def abc_lines():
    """Three lines, ten seconds apart."""
    return [Line(0.0, "A"), Line(10.0, "B"), Line(20.0, "C")]


@pytest.fixture
def rest_lines():
    return [Line(0.0, ""), Line(5.0, "观自在"), Line(10.0, ""), Line(15.0, "照见")]
