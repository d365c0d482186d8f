"""Main application window – clinic content sections with loading states."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from app.config import Config
from app.controller import Controller, FetchResult
from domain.skeleton_registry import SkeletonRegistry
from ui.loading_panel import LoadingPanel

logger = logging.getLogger(__name__)

# (key, title, skeleton name, message context)
SECTIONS = [
    ("doctors", "Bác sĩ", "doctor-list", "doctor"),
    ("services", "Dịch vụ y tế", "service-list", "service"),
    ("posts", "Tin tức", "post-list", "general"),
]

Fetcher = Callable[[str], Any]


class LoadingSettingsDialog(QDialog):
    """Operator settings panel for tuning loading timings."""

    def __init__(self, config: Config, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Loading Settings")
        self.setMinimumWidth(320)
        self._config = config

        form = QFormLayout()

        self._min = QDoubleSpinBox()
        self._min.setRange(0, 5000)
        self._min.setSingleStep(50)
        self._min.setSuffix(" ms")
        self._min.setValue(config.min_loading_time_ms)
        form.addRow("Minimum display:", self._min)

        self._max = QDoubleSpinBox()
        self._max.setRange(500, 120000)
        self._max.setSingleStep(500)
        self._max.setSuffix(" ms")
        self._max.setValue(config.max_loading_time_ms)
        form.addRow("Timeout after:", self._max)

        self._debounce = QDoubleSpinBox()
        self._debounce.setRange(0, 1000)
        self._debounce.setSingleStep(10)
        self._debounce.setSuffix(" ms")
        self._debounce.setValue(config.debounce_ms)
        form.addRow("Debounce:", self._debounce)

        self._burst = QSpinBox()
        self._burst.setRange(1, 100)
        self._burst.setValue(config.burst_threshold)
        form.addRow("Burst threshold:", self._burst)

        self._skeleton = QCheckBox("Show skeleton placeholders")
        self._skeleton.setChecked(config.enable_skeleton_fallback)
        form.addRow("", self._skeleton)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._apply)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

    def _apply(self) -> None:
        self._config.min_loading_time_ms = self._min.value()
        self._config.max_loading_time_ms = max(self._max.value(), self._min.value())
        self._config.debounce_ms = self._debounce.value()
        self._config.burst_threshold = self._burst.value()
        self._config.enable_skeleton_fallback = self._skeleton.isChecked()
        self._config.save()
        self.accept()


class MainWindow(QMainWindow):
    """Root application window: one :class:`LoadingPanel` per CMS section."""

    def __init__(
        self,
        config: Config,
        controller: Controller,
        skeletons: SkeletonRegistry,
        fetcher: Fetcher,
    ) -> None:
        super().__init__()
        self._config = config
        self._controller = controller
        self._skeletons = skeletons
        self._fetcher = fetcher

        self.setWindowTitle("Phòng khám – Nội dung")
        self.resize(config.window_width, config.window_height)

        self._lists: dict[str, QListWidget] = {}
        self._panels: dict[str, LoadingPanel] = {}

        self._status = QLabel("")
        self._status.setStyleSheet("color: #8888aa; font-size: 11px;")

        central = QWidget()
        root = QVBoxLayout(central)
        root.addLayout(self._build_toolbar())

        row = QHBoxLayout()
        row.setSpacing(12)
        for key, title, skeleton_name, _context in SECTIONS:
            row.addWidget(self._build_section(key, title, skeleton_name), 1)
        root.addLayout(row, 1)

        root.addWidget(self._status)
        self.setCentralWidget(central)

        # ── Timers ────────────────────────────────────────────────────
        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(16)  # ~60 Hz
        self._poll_timer.timeout.connect(self._controller.poll_results)
        self._poll_timer.start()

        self._controller.on_result = self._on_result

        self._apply_dark_theme()
        self.reload_all()

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _build_toolbar(self) -> QHBoxLayout:
        bar = QHBoxLayout()

        btn_reload = QPushButton("⟳  Tải lại tất cả")
        btn_reload.clicked.connect(self.reload_all)

        btn_settings = QPushButton("⚙ Settings")
        btn_settings.setStyleSheet("color: #aaaacc; border: none; font-size: 11px;")
        btn_settings.clicked.connect(self._open_settings)

        bar.addWidget(btn_reload)
        bar.addStretch()
        bar.addWidget(btn_settings)
        return bar

    def _build_section(self, key: str, title: str, skeleton_name: str) -> LoadingPanel:
        context = next(c for k, _, _, c in SECTIONS if k == key)
        coordinator = self._controller.coordinator(key, context)

        content = QListWidget()
        self._lists[key] = content

        panel = LoadingPanel(
            title,
            coordinator,
            content=content,
            skeleton=self._skeletons.create(skeleton_name),
        )
        panel.retry_requested.connect(lambda k=key: self.reload(k))
        panel.announcement.connect(self._status.setText)
        self._panels[key] = panel
        return panel

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self, key: str) -> None:
        self._controller.request_content(key, lambda k=key: self._fetcher(k))

    def reload_all(self) -> None:
        for key, *_ in SECTIONS:
            self.reload(key)

    def _on_result(self, result: FetchResult) -> None:
        if not result.ok:
            return
        widget = self._lists.get(result.key)
        if widget is None:
            return
        widget.clear()
        for item in result.payload or []:
            widget.addItem(str(item.get("title", item)) if isinstance(item, dict) else str(item))
        logger.info("Section '%s' loaded in %.2fs", result.key, result.elapsed_s)

    def _open_settings(self) -> None:
        dlg = LoadingSettingsDialog(self._config, self)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            self._status.setText("Cài đặt sẽ áp dụng khi khởi động lại.")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._poll_timer.stop()
        self._controller.shutdown()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    def _apply_dark_theme(self) -> None:
        self.setStyleSheet(
            """
            QMainWindow, QWidget {
                background: #0e0e1e;
                color: #d0d0f0;
                font-family: 'Segoe UI', sans-serif;
            }
            QPushButton {
                background: #1e2240;
                color: #d0d0f0;
                border: 1px solid #334466;
                border-radius: 4px;
                padding: 6px 14px;
                font-size: 12px;
            }
            QPushButton:hover { background: #2a3060; }
            QPushButton:pressed { background: #151530; }
            QListWidget {
                background: #141428;
                border: 1px solid #262a4a;
                border-radius: 6px;
            }
            QProgressBar {
                background: #1e2240;
                border: none;
                border-radius: 3px;
            }
            QProgressBar::chunk { background: #4455cc; border-radius: 3px; }
            QLabel { color: #d0d0f0; }
            QDoubleSpinBox, QSpinBox {
                background: #1e2240;
                color: #d0d0f0;
                border: 1px solid #334466;
                border-radius: 4px;
                padding: 2px 6px;
            }
            """
        )
