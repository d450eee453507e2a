# player/player.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal, QUrl
from PySide6.QtMultimedia import QMediaPlayer, QAudioOutput

logger = logging.getLogger(__name__)

class Player(QObject):
    """
    Looping audio source over QMediaPlayer.

    Speaks in seconds and mirrors the media element events the sync engine
    listens to: timeUpdate, loadedMetadata, canPlay, ended, errorOccurred.
    At end of media it emits `ended` and restarts from 0 when looping.
    """
    playingChanged = Signal(bool)
    timeUpdate = Signal(float)          # seconds
    loadedMetadata = Signal(float)      # duration, seconds
    canPlay = Signal()
    ended = Signal()
    errorOccurred = Signal(str)

    def __init__(self, parent=None, *, loop: bool = True):
        super().__init__(parent)

        self.playing = False
        self.loop = loop
        self.path: Optional[str] = None
        self._ready = False

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self.audio.setVolume(0.7)

        self.media.positionChanged.connect(self._on_qt_position)
        self.media.durationChanged.connect(self._on_qt_duration)
        self.media.playbackStateChanged.connect(self._on_qt_state_changed)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

    # ----------------------------
    # Qt backend handlers
    # ----------------------------

    def _on_qt_position(self, ms: int) -> None:
        self.timeUpdate.emit(ms / 1000.0)

    def _on_qt_duration(self, ms: int) -> None:
        if ms > 0:
            self.loadedMetadata.emit(ms / 1000.0)

    def _on_qt_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        playing = state == QMediaPlayer.PlaybackState.PlayingState
        if playing != self.playing:
            self.playing = playing
            self.playingChanged.emit(playing)

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status in (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia):
            if not self._ready:
                self._ready = True
                self.canPlay.emit()
            return

        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.ended.emit()
            if self.loop:
                self.media.setPosition(0)
                self.media.play()
            return

        if status == QMediaPlayer.MediaStatus.InvalidMedia:
            self._ready = False

    def _on_qt_error(self, error, error_string: str) -> None:
        message = error_string or str(error)
        logger.error("Playback error for %s: %s", self.path, message)
        self.errorOccurred.emit(message)

    # ----------------------------
    # Media source API
    # ----------------------------

    def load(self, path: str) -> None:
        self.path = path
        self._ready = False
        self.media.setSource(QUrl.fromLocalFile(path))

    def get_current_time(self) -> float:
        return self.media.position() / 1000.0

    def get_duration(self) -> Optional[float]:
        ms = self.media.duration()
        return ms / 1000.0 if ms > 0 else None

    def set_current_time(self, seconds: float) -> None:
        if self.media.source().isEmpty():
            raise RuntimeError("No media loaded")
        self.media.setPosition(max(0, int(seconds * 1000)))

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def stop(self) -> None:
        self.media.stop()

    def toggle_play_pause(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()
