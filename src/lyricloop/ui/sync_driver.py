# ui/sync_driver.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from lyricloop.core.engine import Engine

logger = logging.getLogger(__name__)

class SyncDriver(QObject):
    """
    Qt glue for the engine: forwards player and view signals into the event
    queue and runs Engine.frame() from a precise QTimer.
    """
    snapshotChanged = Signal(object)    # EngineSnapshot

    def __init__(self, engine: Engine, player=None, view=None, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.player = player
        self.view = view

        if view is not None:
            engine.attach_surface(view)
            view.gestureStarted.connect(engine.on_gesture)
            view.scrolled.connect(engine.on_scroll)

        if player is not None:
            player.timeUpdate.connect(engine.on_time_update)
            player.loadedMetadata.connect(engine.on_loaded_metadata)
            player.canPlay.connect(engine.on_can_play)
            player.ended.connect(engine.on_ended)
            player.errorOccurred.connect(engine.on_error)
            player.playingChanged.connect(engine.on_play_state)

        engine.subscribe(self.snapshotChanged.emit)

        self._frame_timer = QTimer(self)
        self._frame_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._frame_timer.setInterval(engine.config.frame_interval_ms)
        self._frame_timer.timeout.connect(self._tick)

    def start(self) -> None:
        self._frame_timer.start()
        logger.debug("Frame timer started (%d ms)", self._frame_timer.interval())

    def stop(self) -> None:
        self._frame_timer.stop()
        self.engine.teardown()
        logger.debug("Frame timer stopped")

    def is_running(self) -> bool:
        return self._frame_timer.isActive()

    def request_seek(self, absolute_time: float) -> None:
        self.engine.request_seek(absolute_time)

    def seek_display_time(self, display_time: float) -> None:
        """Seek within the current loop (progress bar)."""
        self.engine.request_seek(self.engine.loop_count * self.engine.tracker.safe_duration() + display_time)

    def _tick(self) -> None:
        self.engine.frame()
