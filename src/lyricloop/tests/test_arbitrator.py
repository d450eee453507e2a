"""Interaction lock, programmatic scroll detection and the release procedure."""

import pytest

from lyricloop.core.arbitrator import ArbitratorState, InteractionArbitrator
from lyricloop.core.config import ArbitratorConfig
from lyricloop.core.layout import VirtualScrollSurface
from lyricloop.core.models import Line
from lyricloop.core.timers import RELEASE_TIMER, TimerRegistry


@pytest.fixture
def arbitrator():
    return InteractionArbitrator(TimerRegistry(), ArbitratorConfig())


def grab(arbitrator, surface, offset, now=0.0):
    surface.user_scroll(offset)
    arbitrator.on_gesture(offset, now, True)


def test_gesture_takes_lock_and_arms_release(arbitrator):
    assert arbitrator.state is ArbitratorState.AUTO

    arbitrator.on_gesture(120.0, now=1.0, is_playing=True)
    assert arbitrator.state is ArbitratorState.LOCKED
    assert arbitrator.lock.lock_offset == 120.0
    assert arbitrator.timers.deadline(RELEASE_TIMER) == pytest.approx(1.6)


def test_release_delay_shorter_when_paused(arbitrator):
    arbitrator.on_gesture(0.0, now=1.0, is_playing=False)
    assert arbitrator.timers.deadline(RELEASE_TIMER) == pytest.approx(1.35)


def test_new_input_restarts_release_but_keeps_lock_offset(arbitrator):
    arbitrator.on_gesture(100.0, now=0.0, is_playing=True)
    arbitrator.on_scroll(180.0, now=0.5, is_playing=True)
    assert arbitrator.lock.lock_offset == 100.0
    assert arbitrator.timers.deadline(RELEASE_TIMER) == pytest.approx(1.1)


def test_programmatic_scroll_is_not_a_gesture(arbitrator):
    arbitrator.begin_programmatic_write(250.0)
    assert arbitrator.is_programmatic(250.4)
    assert not arbitrator.is_programmatic(260.0)

    assert arbitrator.on_scroll(250.0, now=0.0, is_playing=True, programmatic=True) is False
    assert not arbitrator.is_locked

    arbitrator.end_programmatic_write()
    assert not arbitrator.is_programmatic(250.0)


def test_release_seeks_to_line_under_viewport_center(arbitrator, abc_lines):
    surface = VirtualScrollSurface(abc_lines, repeat_count=3)
    arbitrator.on_gesture(0.0, 0.0, True)
    # loop 2, line 1
    surface.user_scroll(surface.scroll_offset_for(7))

    result = arbitrator.release(surface, abc_lines, 30.0, current_absolute=65.0, current_loop=2)

    assert result.seek_target == pytest.approx(70.0)
    assert result.absolute_index == 7
    assert result.snap_offset == surface.scroll_offset_for(7)
    assert not arbitrator.is_locked
    assert not arbitrator.timers.is_armed(RELEASE_TIMER)


def test_release_between_lines_picks_closest(arbitrator, abc_lines):
    surface = VirtualScrollSurface(abc_lines, repeat_count=3)
    grab(arbitrator, surface, 0.0)
    surface.user_scroll(surface.scroll_offset_for(4) + 20)

    result = arbitrator.release(surface, abc_lines, 30.0, current_absolute=35.0, current_loop=1)

    assert result.absolute_index == 4
    assert result.seek_target == pytest.approx(40.0)


def test_release_caps_far_jump_to_current_loop(arbitrator, abc_lines):
    surface = VirtualScrollSurface(abc_lines, repeat_count=3)
    grab(arbitrator, surface, 0.0)
    surface.user_scroll(surface.scroll_offset_for(7))

    result = arbitrator.release(surface, abc_lines, 30.0, current_absolute=5.0, current_loop=0)

    assert result.seek_target == pytest.approx(10.0)
    assert result.absolute_index == 1
    assert result.snap_offset == surface.scroll_offset_for(1)


def test_capped_forward_jump_never_goes_backward(arbitrator, abc_lines):
    surface = VirtualScrollSurface(abc_lines, repeat_count=5)
    grab(arbitrator, surface, 0.0)
    surface.user_scroll(surface.scroll_offset_for(13))

    result = arbitrator.release(surface, abc_lines, 30.0, current_absolute=25.0, current_loop=0)

    assert result.seek_target == pytest.approx(40.0)
    assert result.absolute_index == 4


def test_release_on_rest_prefers_scroll_direction(arbitrator, rest_lines):
    surface = VirtualScrollSurface(rest_lines, repeat_count=2)

    grab(arbitrator, surface, 0.0)
    surface.user_scroll(surface.scroll_offset_for(2))
    forward = arbitrator.release(surface, rest_lines, 20.0, current_absolute=10.0, current_loop=0)
    assert forward.absolute_index == 3
    assert forward.seek_target == pytest.approx(15.0)

    grab(arbitrator, surface, surface.scroll_offset_for(6))
    surface.user_scroll(surface.scroll_offset_for(2))
    backward = arbitrator.release(surface, rest_lines, 20.0, current_absolute=10.0, current_loop=0)
    assert backward.absolute_index == 1
    assert backward.seek_target == pytest.approx(5.0)


def test_release_without_text_lines_does_not_seek(arbitrator):
    lines = [Line(0.0, ""), Line(5.0, "")]
    surface = VirtualScrollSurface(lines, repeat_count=2)
    grab(arbitrator, surface, 40.0)

    result = arbitrator.release(surface, lines, 10.0, current_absolute=2.0, current_loop=0)

    assert result.seek_target is None
    assert not arbitrator.is_locked


def test_release_on_unmeasured_surface_does_not_seek(arbitrator, abc_lines):
    surface = VirtualScrollSurface(abc_lines)
    surface.measured = False
    grab(arbitrator, surface, 90.0)

    result = arbitrator.release(surface, abc_lines, 30.0, current_absolute=2.0, current_loop=0)

    assert result.seek_target is None
    assert result.snap_offset is None
    assert not arbitrator.is_locked
