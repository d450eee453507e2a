# ui/lyrics_view.py
from __future__ import annotations

from typing import List, Optional, Sequence

from PySide6.QtCore import Qt, Signal, QEvent
from PySide6.QtWidgets import QScrollArea, QScroller, QWidget, QVBoxLayout, QLabel, QFrame

from lyricloop.core.models import Line

REST_HEIGHT = 80

_LINE_STYLE = "font-size: 24px; font-weight: 600; padding: 18px 48px; color: {color};"
_COLOR_CURRENT = "#e2e8f0"
_COLOR_OTHER = "#64748b"


class LyricsScroller(QScrollArea):
    """
    The lyric lines rendered `repeat_count` times back to back, with half a
    viewport of padding above and below so any line can sit in the middle.

    Implements the engine's scroll surface (offsets in pixels of the
    vertical scroll bar) and reports user input:
      - gestureStarted: wheel / press / drag / touch on the viewport
      - scrolled: every scroll bar change, programmatic or not
    """
    gestureStarted = Signal(str)
    scrolled = Signal(float)

    def __init__(self, lines: Sequence[Line], repeat_count: int = 50, parent=None):
        super().__init__(parent)

        self.lines = list(lines)
        self._labels: List[QLabel] = []
        self._current: int = -1

        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setStyleSheet("QScrollArea, QWidget#LyricsContainer { background: transparent; }")
        self.viewport().setAutoFillBackground(False)

        container = QWidget()
        container.setObjectName("LyricsContainer")
        root = QVBoxLayout(container)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        self._pad_top = QWidget()
        self._pad_bottom = QWidget()
        root.addWidget(self._pad_top)

        for _ in range(max(0, repeat_count)):
            for line in self.lines:
                root.addWidget(self._make_label(line, len(self._labels)))

        root.addWidget(self._pad_bottom)
        self.setWidget(container)

        # kinetic drag; our filter goes in after it so it sees presses first
        QScroller.grabGesture(self.viewport(), QScroller.ScrollerGestureType.LeftMouseButtonGesture)
        self.viewport().installEventFilter(self)
        self.verticalScrollBar().valueChanged.connect(lambda v: self.scrolled.emit(float(v)))

    def _make_label(self, line: Line, abs_index: int) -> QLabel:
        lbl = QLabel(line.text or " ")  # keep blank rows laid out
        lbl.setWordWrap(True)
        align = Qt.AlignmentFlag.AlignLeft if abs_index % 2 == 0 else Qt.AlignmentFlag.AlignRight
        lbl.setAlignment(align | Qt.AlignmentFlag.AlignVCenter)
        if line.is_rest:
            lbl.setFixedHeight(REST_HEIGHT)
            lbl.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        lbl.setStyleSheet(_LINE_STYLE.format(color=_COLOR_OTHER))
        self._labels.append(lbl)
        return lbl

    # --- scroll surface ---
    def scroll_offset(self) -> float:
        return float(self.verticalScrollBar().value())

    def set_scroll_offset(self, value: float) -> None:
        self.verticalScrollBar().setValue(int(round(value)))

    def rendered_count(self) -> int:
        return len(self._labels)

    def scroll_offset_for(self, absolute_index: int) -> Optional[float]:
        if not 0 <= absolute_index < len(self._labels) or not self.isVisible():
            return None
        lbl = self._labels[absolute_index]
        if lbl.height() <= 0:
            return None
        center = lbl.y() + lbl.height() / 2
        return center - self.viewport().height() / 2

    # --- highlight ---
    def set_current_line(self, absolute_index: int) -> None:
        if absolute_index == self._current:
            return
        if 0 <= self._current < len(self._labels):
            self._labels[self._current].setStyleSheet(_LINE_STYLE.format(color=_COLOR_OTHER))
        self._current = absolute_index
        if 0 <= absolute_index < len(self._labels):
            self._labels[absolute_index].setStyleSheet(_LINE_STYLE.format(color=_COLOR_CURRENT))

    def current_line(self) -> int:
        return self._current

    # --- Qt overrides ---
    def resizeEvent(self, event):
        half = max(0, self.viewport().height() // 2)
        self._pad_top.setFixedHeight(half)
        self._pad_bottom.setFixedHeight(half)
        super().resizeEvent(event)

    def eventFilter(self, obj, event):
        if obj is self.viewport():
            kind = self._gesture_kind(event)
            if kind:
                self.gestureStarted.emit(kind)
        return super().eventFilter(obj, event)

    @staticmethod
    def _gesture_kind(event) -> Optional[str]:
        t = event.type()
        if t == QEvent.Type.Wheel:
            return "wheel"
        if t == QEvent.Type.MouseButtonPress:
            return "press"
        if t == QEvent.Type.MouseMove and event.buttons() != Qt.MouseButton.NoButton:
            return "drag"
        if t in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate):
            return "touch"
        return None
