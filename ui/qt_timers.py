"""Qt-backed timer port for running coordinators inside the GUI event loop."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Qt, QTimer

from domain.timers import TimerCallback

logger = logging.getLogger(__name__)


class QtTimerScheduler:
    """Single-shot ``QTimer`` per scheduled callback.

    Must be used from the thread that owns the Qt event loop.
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent
        self._timers: set[QTimer] = set()

    def schedule(self, delay_ms: float, callback: TimerCallback) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)

        def _fire() -> None:
            self._timers.discard(timer)
            timer.deleteLater()
            callback()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(round(delay_ms))))
        return timer

    def cancel(self, timer: QTimer) -> None:
        if timer not in self._timers:
            return
        self._timers.discard(timer)
        timer.stop()
        timer.deleteLater()

    def cancel_all(self) -> None:
        for timer in list(self._timers):
            self.cancel(timer)
        logger.debug("All Qt timers cancelled.")

    @property
    def pending(self) -> int:
        return len(self._timers)
