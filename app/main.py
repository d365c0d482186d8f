"""Application entry point and composition root."""

from __future__ import annotations

import logging
import random
import sys
import time
from pathlib import Path
from typing import Any

# Ensure project root is on the path when running as `python app/main.py`
_ROOT = Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from PySide6.QtWidgets import QApplication

from app.config import Config
from app.controller import Controller
from domain.skeleton_registry import SkeletonRegistry
from ui.main_window import MainWindow
from ui.qt_timers import QtTimerScheduler
from ui.skeleton import register_default_skeletons

# Stand-in for the CMS client: section key -> sample items.
_SAMPLE_CONTENT: dict[str, list[dict[str, Any]]] = {
    "doctors": [
        {"title": "BS. Nguyễn Văn An – Nội tổng quát"},
        {"title": "BS. Trần Thị Bình – Nhi khoa"},
        {"title": "BS. Lê Minh Châu – Tim mạch"},
    ],
    "services": [
        {"title": "Khám sức khỏe tổng quát"},
        {"title": "Xét nghiệm máu"},
        {"title": "Siêu âm"},
        {"title": "Tiêm chủng"},
    ],
    "posts": [
        {"title": "Lịch làm việc dịp lễ"},
        {"title": "Phòng ngừa sốt xuất huyết"},
    ],
}


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def sample_fetch(key: str) -> list[dict[str, Any]]:
    """Simulated CMS round-trip with variable latency. Runs on a worker thread."""
    time.sleep(random.uniform(0.05, 1.5))
    return list(_SAMPLE_CONTENT.get(key, []))


def main() -> None:
    _configure_logging()
    logger = logging.getLogger(__name__)
    logger.info("Clinic content viewer – starting up.")

    app = QApplication(sys.argv)
    app.setApplicationName("ClinicContent")

    config = Config.load()

    skeletons = SkeletonRegistry()
    register_default_skeletons(skeletons, interval_ms=config.shimmer_interval_ms)

    scheduler = QtTimerScheduler(app)
    controller = Controller(config, scheduler)

    window = MainWindow(config, controller, skeletons, fetcher=sample_fetch)
    window.show()

    ret = app.exec()

    scheduler.cancel_all()
    skeletons.clear()
    logger.info("Exiting with code %d.", ret)
    sys.exit(ret)


if __name__ == "__main__":
    main()
