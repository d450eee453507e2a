import pytest

from lyricloop.core.config import InterpolatorConfig
from lyricloop.core.interpolator import TimeInterpolator, circular_delta


def test_circular_delta_takes_the_short_way_round():
    assert circular_delta(29.0, 1.0, 30.0) == pytest.approx(2.0)
    assert circular_delta(1.0, 29.0, 30.0) == pytest.approx(-2.0)
    assert circular_delta(5.0, 8.0, 30.0) == pytest.approx(3.0)


def test_paused_step_pins_to_sample():
    interp = TimeInterpolator(duration=30.0)
    interp.reset(4.0, now=0.0)
    interp.sample(4.2, now=0.0)
    assert interp.step(now=5.0, is_playing=False) == pytest.approx(4.2)


def test_large_gap_snaps():
    interp = TimeInterpolator(duration=30.0)
    interp.reset(0.0, now=0.0)
    interp.sample(10.0, now=0.0)
    assert interp.step(now=0.0, is_playing=True) == pytest.approx(10.0)


def test_small_gap_blends_by_band():
    interp = TimeInterpolator(duration=30.0)
    interp.reset(10.0, now=0.0)
    interp.sample(10.3, now=0.0)
    # 0.3s sits in the 0.1 band
    assert interp.step(now=0.0, is_playing=True) == pytest.approx(10.036)


def test_converges_without_overshoot():
    interp = TimeInterpolator(duration=30.0)
    interp.reset(10.0, now=0.0)
    interp.sample(10.8, now=0.0)
    previous = 10.0
    for _ in range(200):
        value = interp.step(now=0.0, is_playing=True)
        assert previous <= value <= 10.8
        previous = value
    assert previous == pytest.approx(10.8, abs=1e-3)


def test_extrapolation_is_capped():
    interp = TimeInterpolator(InterpolatorConfig(max_extrapolation=0.5), duration=30.0)
    interp.sample(10.0, now=0.0)
    assert interp.current_target(now=0.2, is_playing=True) == pytest.approx(10.2)
    assert interp.current_target(now=3.0, is_playing=True) == pytest.approx(10.5)
    assert interp.current_target(now=3.0, is_playing=False) == pytest.approx(10.0)


def test_blend_across_loop_boundary_moves_forward():
    interp = TimeInterpolator(duration=30.0)
    interp.reset(29.9, now=0.0)
    interp.sample(0.1, now=0.0)
    value = interp.step(now=0.0, is_playing=True)
    assert value == pytest.approx(29.924)


def test_set_duration_rewraps_estimate():
    interp = TimeInterpolator(duration=364.0)
    interp.reset(40.0, now=0.0)
    interp.set_duration(30.0)
    assert interp.interpolated_time == pytest.approx(10.0)
    assert interp.target_time == pytest.approx(10.0)
