"""Skeleton placeholders with an animated shimmer, shown while content loads."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QLinearGradient, QPainter
from PySide6.QtWidgets import QSizePolicy, QVBoxLayout, QWidget

from domain.skeleton_registry import SkeletonRegistry

_BASE = QColor(30, 34, 64)
_HIGHLIGHT = QColor(52, 58, 98)


class SkeletonLoader(QWidget):
    """Placeholder made of rounded bars; a highlight band sweeps across it.

    *lines* gives the relative width (0-1) of each bar. An *avatar* adds a
    circle on the left, as used by doctor cards.
    """

    def __init__(
        self,
        lines: tuple[float, ...] = (0.9, 0.7, 0.5),
        avatar: bool = False,
        line_height: int = 12,
        interval_ms: int = 50,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._lines = lines
        self._avatar = avatar
        self._line_h = line_height
        self._shimmer_pos = 0.0

        self.setAccessibleName("Đang tải nội dung")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.setFixedHeight(max(len(lines) * (line_height + 10) + 16, 64 if avatar else 0))

        self._anim_timer = QTimer(self)
        self._anim_timer.setInterval(interval_ms)
        self._anim_timer.timeout.connect(self._tick_shimmer)

    def start_animation(self) -> None:
        if not self._anim_timer.isActive():
            self._anim_timer.start()

    def stop_animation(self) -> None:
        self._anim_timer.stop()

    def _tick_shimmer(self) -> None:
        self._shimmer_pos = (self._shimmer_pos + 0.05) % 1.0
        self.update()

    def paintEvent(self, _event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(Qt.PenStyle.NoPen)

        w = self.width()
        band_x = self._shimmer_pos * w
        grad = QLinearGradient(band_x - w * 0.3, 0, band_x + w * 0.3, 0)
        grad.setColorAt(0.0, _BASE)
        grad.setColorAt(0.5, _HIGHLIGHT)
        grad.setColorAt(1.0, _BASE)
        painter.setBrush(grad)

        x0 = 8
        if self._avatar:
            painter.drawEllipse(QRectF(8, 8, 48, 48))
            x0 = 68

        avail = w - x0 - 8
        y = 8
        for frac in self._lines:
            painter.drawRoundedRect(QRectF(x0, y, avail * frac, self._line_h), 4, 4)
            y += self._line_h + 10


class SkeletonList(QWidget):
    """Vertical stack of *rows* identical skeleton rows."""

    def __init__(
        self,
        rows: int = 4,
        avatar: bool = False,
        interval_ms: int = 50,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)
        self._rows = [
            SkeletonLoader(lines=(0.6, 0.9), avatar=avatar, interval_ms=interval_ms)
            for _ in range(rows)
        ]
        for row in self._rows:
            layout.addWidget(row)
        layout.addStretch()

    def start_animation(self) -> None:
        for row in self._rows:
            row.start_animation()

    def stop_animation(self) -> None:
        for row in self._rows:
            row.stop_animation()


def register_default_skeletons(registry: SkeletonRegistry, interval_ms: int = 50) -> None:
    """Populate *registry* with the placeholders used by the clinic screens."""
    registry.register("doctor-list", lambda: SkeletonList(rows=4, avatar=True, interval_ms=interval_ms))
    registry.register("service-list", lambda: SkeletonList(rows=5, interval_ms=interval_ms))
    registry.register("post-list", lambda: SkeletonList(rows=3, interval_ms=interval_ms))
    registry.register("card", lambda: SkeletonLoader(interval_ms=interval_ms))
