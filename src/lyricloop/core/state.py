from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from .config import DESKTOP, EngineConfig
from .models import Line

@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/warn/error

class AppState(QObject):
    notification = Signal(object)   # emits Notify

    def __init__(self):
        super().__init__()
        self.player = None
        self.engine = None
        self.lines: list[Line] = []
        self.config: EngineConfig = DESKTOP
        self.audio_path: Optional[Path] = None
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))

    @Slot(str)
    def notify_error(self, message: str):
        self.notify(message, "error")
