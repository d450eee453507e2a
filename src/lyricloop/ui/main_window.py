from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QLabel, QStackedLayout
from PySide6.QtCore import Qt
from PySide6.QtGui import QShortcut, QKeySequence

from lyricloop.core.state import AppState
from lyricloop.ui.lyrics_view import LyricsScroller
from lyricloop.ui.player_bar import PlayerBar
from lyricloop.ui.sync_driver import SyncDriver

_STATUS_COLORS = {
    "info": "#9ca3af",
    "warn": "#f59e0b",
    "error": "#ef4444",
}


class MainWindow(QMainWindow):
    def __init__(self, app_state: AppState):
        super().__init__()
        self.setWindowTitle("LyricLoop")
        self.resize(720, 900)
        self.app_state = app_state

        engine = app_state.engine
        player = app_state.player

        self.central_widget = QWidget()
        self.central_widget.setObjectName("Central")
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        # --- Lyrics over the anchor glyph ---
        stage = QWidget()
        stack = QStackedLayout(stage)
        stack.setStackingMode(QStackedLayout.StackingMode.StackAll)

        self.view = LyricsScroller(engine.lines, repeat_count=engine.config.repeat_count)

        self.glyph = QLabel(engine.config.fallback_glyph)
        self.glyph.setObjectName("AnchorGlyph")
        self.glyph.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.glyph.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)

        stack.addWidget(self.view)
        stack.addWidget(self.glyph)
        stack.setCurrentWidget(self.view)
        self.glyph.lower()

        self.layout.addWidget(stage, 1)

        # --- Status line + player bar ---
        self.status_label = QLabel("")
        self.status_label.setObjectName("StatusLine")
        self.status_label.setVisible(False)
        self.layout.addWidget(self.status_label)

        self.player_bar = PlayerBar()
        self.layout.addWidget(self.player_bar)

        # --- Sync ---
        self.driver = SyncDriver(engine, player=player, view=self.view, parent=self)
        self.driver.snapshotChanged.connect(self._on_snapshot)
        self.player_bar.seekRequested.connect(self.driver.seek_display_time)
        if player is not None:
            self.player_bar.playPauseClicked.connect(player.toggle_play_pause)
            player.errorOccurred.connect(self.app_state.notify_error)
            QShortcut(QKeySequence("Space"), self, activated=player.toggle_play_pause)
        else:
            self.player_bar.btn_play.setEnabled(False)

        self.app_state.notification.connect(self._on_notify)

        self._apply_styles()
        self.show_queued_notifications()
        self.driver.start()

    def _on_snapshot(self, snap):
        self.view.set_current_line(snap.current_absolute_index)
        self.glyph.setText(snap.anchor_glyph)
        self.player_bar.on_snapshot(snap)

    # ------------------ notifications ------------------
    def _on_notify(self, n):
        # n is core.state.Notify
        msg = getattr(n, "message", "") or ""
        if not msg:
            return
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        color = _STATUS_COLORS.get(kind, _STATUS_COLORS["info"])
        self.status_label.setStyleSheet(f"color: {color}; padding: 4px 12px; font-size: 11px;")
        self.status_label.setText(msg)
        self.status_label.setVisible(True)

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#Central {
            background-color: #020617;
        }
        QLabel#AnchorGlyph {
            color: rgba(56, 189, 248, 0.12);
            font-size: 320px;
            font-weight: 700;
        }
        QLabel#StatusLine {
            background-color: #020617;
        }
        """)

    def closeEvent(self, event):
        self.driver.stop()
        if self.app_state.player is not None:
            self.app_state.player.stop()
        super().closeEvent(event)
