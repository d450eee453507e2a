"""Qt glue: signal wiring into the engine, lyric view and player bar."""

import logging
from unittest import mock

import pytest
from PySide6.QtCore import QEvent, QObject, Signal

from lyricloop.core.engine import Engine
from lyricloop.core.models import EngineSnapshot
from lyricloop.core.state import AppState, Notify
from lyricloop.ui.lyrics_view import LyricsScroller
from lyricloop.ui.main_window import MainWindow
from lyricloop.ui.player_bar import PlayerBar, _fmt
from lyricloop.ui.sync_driver import SyncDriver


class FakePlayer(QObject):
    """Emits the same signals as player.Player without a media backend."""
    playingChanged = Signal(bool)
    timeUpdate = Signal(float)
    loadedMetadata = Signal(float)
    canPlay = Signal()
    ended = Signal()
    errorOccurred = Signal(str)

    def __init__(self):
        super().__init__()
        self.writes = []
        self.toggles = 0

    def get_current_time(self):
        return 0.0

    def get_duration(self):
        return None

    def set_current_time(self, seconds):
        self.writes.append(seconds)

    def play(self):
        pass

    def pause(self):
        pass

    def stop(self):
        pass

    def toggle_play_pause(self):
        self.toggles += 1


def make_snapshot(**overrides):
    values = dict(
        display_time=12.3,
        absolute_scroll_time=72.3,
        duration=30.0,
        loop_count=2,
        is_playing=True,
        current_line_index=1,
        current_absolute_index=7,
        anchor_glyph="B",
    )
    values.update(overrides)
    return EngineSnapshot(**values)


@pytest.fixture
def player(qtbot):
    return FakePlayer()


@pytest.fixture
def driver(qtbot, player, abc_lines):
    engine = Engine(abc_lines, player, duration=30.0)
    drv = SyncDriver(engine, player=player)
    yield drv
    drv.stop()


def test_driver_forwards_player_signals(driver, player, qtbot):
    player.canPlay.emit()
    player.playingChanged.emit(True)
    player.timeUpdate.emit(11.0)

    with qtbot.waitSignal(driver.snapshotChanged, timeout=1000) as blocker:
        driver._tick()

    snap = blocker.args[0]
    assert snap.display_time == pytest.approx(11.0)
    assert snap.current_line_index == 1
    assert snap.is_playing


def test_driver_loop_signals(driver, player):
    player.timeUpdate.emit(29.9)
    driver._tick()
    player.ended.emit()
    player.timeUpdate.emit(0.1)
    driver._tick()
    assert driver.engine.loop_count == 1


def test_seek_display_time_stays_in_current_loop(driver, player):
    player.canPlay.emit()
    driver.request_seek(65.0)
    driver._tick()

    driver.seek_display_time(12.0)
    driver._tick()

    assert driver.engine.absolute_scroll_time == pytest.approx(72.0)
    assert player.writes[-1] == pytest.approx(12.0)


def test_driver_start_stop(driver, caplog):
    with caplog.at_level(logging.DEBUG, logger="lyricloop"):
        driver.start()
        assert driver.is_running()
        driver.stop()
    assert not driver.is_running()
    assert driver.engine.disposed
    assert "Frame timer started" in caplog.text
    assert "Frame timer stopped" in caplog.text


def test_lyrics_view_renders_repeated_lines(qtbot, abc_lines):
    view = LyricsScroller(abc_lines, repeat_count=3)
    qtbot.addWidget(view)

    assert view.rendered_count() == 9
    assert view.scroll_offset_for(99) is None
    # not shown yet, so nothing is measured
    assert view.scroll_offset_for(0) is None


def test_lyrics_view_highlight(qtbot, abc_lines):
    view = LyricsScroller(abc_lines, repeat_count=2)
    qtbot.addWidget(view)

    view.set_current_line(4)
    assert view.current_line() == 4
    view.set_current_line(-1)
    assert view.current_line() == -1


def test_lyrics_view_reports_gestures(qtbot, abc_lines):
    view = LyricsScroller(abc_lines, repeat_count=1)
    qtbot.addWidget(view)

    with qtbot.waitSignal(view.gestureStarted, timeout=1000) as blocker:
        view.eventFilter(view.viewport(), QEvent(QEvent.Type.Wheel))
    assert blocker.args == ["wheel"]


@pytest.mark.parametrize(
    "event_type, expected",
    [
        (QEvent.Type.Wheel, "wheel"),
        (QEvent.Type.MouseButtonPress, "press"),
        (QEvent.Type.TouchBegin, "touch"),
        (QEvent.Type.Resize, None),
    ],
)
def test_gesture_kind(event_type, expected):
    event = mock.Mock()
    event.type.return_value = event_type
    assert LyricsScroller._gesture_kind(event) == expected


def test_lyrics_view_scroll_offset_round_trip(qtbot, abc_lines):
    view = LyricsScroller(abc_lines, repeat_count=3)
    qtbot.addWidget(view)
    view.verticalScrollBar().setRange(0, 1000)

    with qtbot.waitSignal(view.scrolled, timeout=1000) as blocker:
        view.set_scroll_offset(120.4)
    assert blocker.args == [120.0]
    assert view.scroll_offset() == 120.0


def test_player_bar_follows_snapshots(qtbot):
    bar = PlayerBar()
    qtbot.addWidget(bar)

    bar.on_snapshot(make_snapshot())
    assert bar.lbl_time.text() == "0:12"
    assert bar.lbl_dur.text() == "0:30"
    assert bar.lbl_loop.text() == "Loop 3"
    assert bar.slider.maximum() == 30000
    assert bar.slider.value() == 12300
    assert bar.is_playing()


def test_player_bar_seeks_on_release(qtbot):
    bar = PlayerBar()
    qtbot.addWidget(bar)
    bar.on_snapshot(make_snapshot())

    bar.slider.sliderPressed.emit()
    bar.slider.setValue(20000)
    bar.on_snapshot(make_snapshot(display_time=13.0))
    # dragging: snapshots do not move the handle
    assert bar.slider.value() == 20000

    with qtbot.waitSignal(bar.seekRequested, timeout=1000) as blocker:
        bar.slider.sliderReleased.emit()
    assert blocker.args == [20.0]


def test_fmt():
    assert _fmt(0) == "0:00"
    assert _fmt(65.9) == "1:05"
    assert _fmt(-3) == "0:00"


def test_main_window_shows_notifications_and_glyph(qtbot, player, abc_lines):
    app_state = AppState()
    app_state.player = player
    app_state.lines = abc_lines
    app_state.engine = Engine(abc_lines, player, duration=30.0)
    app_state.queued_notifications.append(Notify("queued", "warn"))

    window = MainWindow(app_state)
    qtbot.addWidget(window)
    assert window.status_label.text() == "queued"
    assert app_state.queued_notifications == []

    player.errorOccurred.emit("decoder failed")
    assert window.status_label.text() == "decoder failed"

    window._on_snapshot(make_snapshot(current_absolute_index=4, anchor_glyph="B"))
    assert window.glyph.text() == "B"
    assert window.view.current_line() == 4

    window.player_bar.playPauseClicked.emit()
    assert player.toggles == 1

    window.close()
    assert not window.driver.is_running()
    assert app_state.engine.disposed
