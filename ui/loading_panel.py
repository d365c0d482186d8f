"""Section widget that renders a coordinator's snapshots.

Swaps between skeleton, content and error pages. Page swaps only happen on
stable snapshots so the intermediate commits of one loading episode never
flash on screen. Screen-reader announcements are made here, not in the
coordinator.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QLabel,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from domain.coordinator import LoadingCoordinator
from domain.models import LoadingSnapshot

logger = logging.getLogger(__name__)

_PAGE_SKELETON = 0
_PAGE_CONTENT = 1
_PAGE_ERROR = 2


class LoadingPanel(QWidget):
    """Wraps a content widget and shows a skeleton / error in its place."""

    retry_requested = Signal()
    announcement = Signal(str)
    _snapshot_ready = Signal(object)

    def __init__(
        self,
        title: str,
        coordinator: LoadingCoordinator,
        content: QWidget,
        skeleton: QWidget,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._coordinator = coordinator
        self._skeleton = skeleton
        self._last_announced: Optional[str] = None
        self._was_loading = False

        # ── Build UI ──────────────────────────────────────────────────
        heading = QLabel(title)
        heading.setStyleSheet("font-size: 16px; font-weight: bold; color: #e8e8ff;")

        self._message = QLabel("")
        self._message.setStyleSheet("color: #8888aa; font-size: 11px;")

        self._progress = QProgressBar()
        self._progress.setRange(0, 100)
        self._progress.setFixedHeight(6)
        self._progress.setTextVisible(False)
        self._progress.hide()

        self._error_label = QLabel("")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #dd4444; font-size: 13px;")
        retry_btn = QPushButton("Thử lại")
        retry_btn.clicked.connect(self.retry_requested)

        error_page = QWidget()
        el = QVBoxLayout(error_page)
        el.setAlignment(Qt.AlignmentFlag.AlignCenter)
        el.addWidget(self._error_label)
        el.addWidget(retry_btn, 0, Qt.AlignmentFlag.AlignHCenter)

        self._pages = QStackedWidget()
        self._pages.addWidget(skeleton)     # 0
        self._pages.addWidget(content)      # 1
        self._pages.addWidget(error_page)   # 2
        self._pages.setCurrentIndex(_PAGE_CONTENT)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(6)
        layout.addWidget(heading)
        layout.addWidget(self._message)
        layout.addWidget(self._progress)
        layout.addWidget(self._pages, 1)

        # ── Wiring ────────────────────────────────────────────────────
        # Snapshots are re-emitted through a queued signal so rendering
        # always runs on the GUI thread.
        self._snapshot_ready.connect(self.render, Qt.ConnectionType.QueuedConnection)
        unsubscribe = coordinator.subscribe(self._snapshot_ready.emit)
        self._unsubscribe = unsubscribe
        self.destroyed.connect(lambda *_: unsubscribe())

        self.render(coordinator.snapshot())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, snapshot: LoadingSnapshot) -> None:
        state = snapshot.state

        self._progress.setVisible(state.is_loading)
        self._progress.setValue(state.progress)
        self._message.setText((state.message or "") if state.is_loading else "")

        if state.error is not None:
            self._show_page(_PAGE_ERROR)
            self._error_label.setText(state.error)
            self._announce(state.error)
        elif snapshot.should_show_skeleton:
            self._show_page(_PAGE_SKELETON)
            if state.message:
                self._announce(state.message)
        elif not state.is_loading and state.is_stable:
            self._show_page(_PAGE_CONTENT)
            if self._was_loading:
                self._announce("Đã tải xong")
        # Unstable intermediate snapshots keep the current page.

        self._was_loading = state.is_loading

    def _show_page(self, index: int) -> None:
        if self._pages.currentIndex() == index:
            return
        self._pages.setCurrentIndex(index)
        animate = getattr(self._skeleton, "start_animation" if index == _PAGE_SKELETON else "stop_animation", None)
        if animate is not None:
            animate()

    def _announce(self, text: str) -> None:
        if text == self._last_announced:
            return
        self._last_announced = text
        self.setAccessibleDescription(text)
        self.announcement.emit(text)
        logger.debug("Announce: %s", text)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def closeEvent(self, event: Any) -> None:  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)
