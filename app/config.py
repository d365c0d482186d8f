"""Application-wide configuration with typed fields and sane defaults."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from domain.models import LoadingConfig, MessageContext, Priority

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path("config.json")


@dataclass
class Config:
    # Loading coordinator
    min_loading_time_ms: float = 300.0   # never dismiss a loader faster than this
    max_loading_time_ms: float = 10000.0  # force a timeout error after this
    debounce_ms: float = 50.0
    burst_threshold: int = 10           # requests per debounce window before throttling
    stability_ms: float = 100.0         # settle window after each committed change
    enable_skeleton_fallback: bool = True
    priority: str = Priority.NORMAL.value

    # Content
    locale: str = "vi"
    message_context: str = MessageContext.GENERAL.value
    fetch_workers: int = 2

    # UI
    window_width: int = 1100
    window_height: int = 760
    shimmer_interval_ms: int = 50

    def loading_config(self, message_context: Optional[str] = None) -> LoadingConfig:
        return LoadingConfig(
            min_loading_time=self.min_loading_time_ms,
            max_loading_time=self.max_loading_time_ms,
            enable_skeleton_fallback=self.enable_skeleton_fallback,
            priority=Priority(self.priority),
            debounce_ms=self.debounce_ms,
            message_context=MessageContext(message_context or self.message_context),
            locale=self.locale,
            burst_threshold=self.burst_threshold,
            stability_ms=self.stability_ms,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Optional[Path] = None) -> None:
        path = path or _CONFIG_PATH
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(asdict(self), fh, indent=2)
        logger.debug("Config saved to %s", path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        path = path or _CONFIG_PATH
        if not path.exists():
            return cls()
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
            cfg = cls()
            for k, v in data.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
            logger.debug("Config loaded from %s", path)
            return cfg
        except (OSError, json.JSONDecodeError, AttributeError) as exc:
            logger.warning("Could not load config (%s); using defaults.", exc)
            return cls()
