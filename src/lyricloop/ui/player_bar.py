# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import Qt, QSize, Signal, QByteArray
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel, QToolButton, QSlider
from PySide6.QtSvg import QSvgRenderer

ICON_SIZE = 22

# 24x24 viewBox paths
GLYPH_PLAY = "M8 5v14l11-7z"
GLYPH_PAUSE = "M6 5h4v14H6zm8 0h4v14h-4z"

PALETTE = {
    "bg": "#020617",
    "edge": "#111827",
    "button": "#111827",
    "button_edge": "#1f2937",
    "groove": "#0f172a",
    "accent": "#38bdf8",
    "text": "#e5e7eb",
    "muted": "#9ca3af",
}

def _fmt(seconds: float) -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m}:{s:02d}"

def _render_icon(path_d: str, color: str) -> QIcon:
    """Rasterize a single-path SVG glyph into a transparent pixmap icon."""
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{ICON_SIZE}" height="{ICON_SIZE}" '
        f'viewBox="0 0 24 24"><path d="{path_d}" fill="{color}"/></svg>'
    )
    pixmap = QPixmap(ICON_SIZE, ICON_SIZE)
    pixmap.fill(Qt.GlobalColor.transparent)

    painter = QPainter(pixmap)
    QSvgRenderer(QByteArray(svg.encode("utf-8"))).render(painter)
    painter.end()
    return QIcon(pixmap)

def _stylesheet(p: dict) -> str:
    return f"""
    QWidget#PlayerBar {{ background-color: {p["bg"]}; border-top: 1px solid {p["edge"]}; }}
    QToolButton#BtnPlay {{
        background: {p["button"]}; border: 1px solid {p["button_edge"]};
        border-radius: 17px; padding: 6px;
    }}
    QToolButton#BtnPlay:hover {{ border-color: {p["accent"]}; }}
    QSlider::groove:horizontal {{ height: 4px; background: {p["groove"]}; border-radius: 2px; }}
    QSlider::sub-page:horizontal {{ background: {p["accent"]}; border-radius: 2px; }}
    QSlider::handle:horizontal {{ width: 12px; margin: -4px 0; border-radius: 6px; background: {p["accent"]}; }}
    QLabel {{ color: {p["muted"]}; font-size: 11px; }}
    QLabel#LoopLabel {{ color: {p["text"]}; font-size: 12px; font-weight: 600; }}
    """

class PlayerBar(QWidget):
    """
    Play/pause, loop counter and a progress slider over one loop.

    Driven by engine snapshots rather than by the player, so the slider
    shows the display time the engine settled on, including seeks the
    media has not applied yet.
    """
    playPauseClicked = Signal()
    seekRequested = Signal(float)       # display time, seconds

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("PlayerBar")

        self._dragging = False
        self._duration = 0.0
        self._playing = False
        self._icon_play = _render_icon(GLYPH_PLAY, PALETTE["text"])
        self._icon_pause = _render_icon(GLYPH_PAUSE, PALETTE["text"])

        self.btn_play = QToolButton(objectName="BtnPlay")
        self.btn_play.setIcon(self._icon_play)
        self.btn_play.setIconSize(QSize(ICON_SIZE, ICON_SIZE))
        self.btn_play.setToolTip("Play")
        self.btn_play.clicked.connect(lambda: self.playPauseClicked.emit())

        self.lbl_loop = QLabel("Loop 1", objectName="LoopLabel")
        self.lbl_time = QLabel(_fmt(0))
        self.lbl_dur = QLabel(_fmt(0))

        # milliseconds of display time
        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setPageStep(5000)
        self.slider.sliderPressed.connect(self._begin_drag)
        self.slider.sliderMoved.connect(lambda ms: self.lbl_time.setText(_fmt(ms / 1000)))
        self.slider.sliderReleased.connect(self._end_drag)

        row = QHBoxLayout(self)
        row.setContentsMargins(10, 6, 10, 6)
        row.setSpacing(10)
        for w in (self.btn_play, self.lbl_loop, self.lbl_time):
            row.addWidget(w)
        row.addWidget(self.slider, 1)
        row.addWidget(self.lbl_dur)

        self.setStyleSheet(_stylesheet(PALETTE))

    def _begin_drag(self):
        self._dragging = True

    def _end_drag(self):
        self._dragging = False
        self.seekRequested.emit(self.slider.value() / 1000.0)

    def on_snapshot(self, snap):
        self.set_playing(snap.is_playing)
        self.lbl_loop.setText(f"Loop {snap.loop_count + 1}")

        if snap.duration != self._duration:
            self._duration = snap.duration
            self.slider.setRange(0, max(0, int(snap.duration * 1000)))
            self.lbl_dur.setText(_fmt(snap.duration))

        if not self._dragging:
            self.lbl_time.setText(_fmt(snap.display_time))
            self.slider.setValue(int(snap.display_time * 1000))

    def set_playing(self, playing: bool):
        playing = bool(playing)
        if playing == self._playing:
            return
        self._playing = playing
        self.btn_play.setIcon(self._icon_pause if playing else self._icon_play)
        self.btn_play.setToolTip("Pause" if playing else "Play")

    def is_playing(self) -> bool:
        return self._playing
