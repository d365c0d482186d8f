"""Multi-stage loading on top of a :class:`LoadingCoordinator`."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from domain.coordinator import LoadingCoordinator
from domain.models import LoadingType
from domain.timers import TimerScheduler

logger = logging.getLogger(__name__)


class ProgressiveLoader:
    """Walks a coordinator through named stages and maps stage progress to
    overall progress (each stage owns an equal share of 0-100)."""

    def __init__(
        self,
        coordinator: LoadingCoordinator,
        scheduler: TimerScheduler,
        stages: Sequence[str],
        completion_delay_ms: float = 300.0,
    ) -> None:
        if not stages:
            raise ValueError("ProgressiveLoader needs at least one stage")
        self.stages = list(stages)
        self.completion_delay_ms = completion_delay_ms
        self.current_index = 0
        self.stage_progress: dict[str, float] = {}

        self._coordinator = coordinator
        self._scheduler = scheduler
        self._completion: Optional[Any] = None

    @property
    def total_stages(self) -> int:
        return len(self.stages)

    @property
    def current_stage_name(self) -> str:
        return self.stages[self.current_index]

    def start(self) -> None:
        self._cancel_completion()
        self.current_index = 0
        self.stage_progress = {}
        self._coordinator.start(loading_type=LoadingType.PROGRESSIVE, stage=self.stages[0])

    def next_stage(self) -> bool:
        if self.current_index >= len(self.stages) - 1:
            return False
        self.current_index += 1
        self._coordinator.set_stage(self.current_stage_name)
        self._coordinator.set_progress((self.current_index + 1) / len(self.stages) * 100)
        return True

    def set_stage_progress(self, stage: str, progress: float) -> None:
        self.stage_progress[stage] = progress
        if stage != self.current_stage_name:
            return
        base = self.current_index / len(self.stages) * 100
        self._coordinator.set_progress(base + progress / len(self.stages))

    def complete(self) -> None:
        """Jump to 100 % and stop the episode after a short delay."""
        self._coordinator.set_progress(100)
        self._cancel_completion()
        self._completion = self._scheduler.schedule(self.completion_delay_ms, self._finish)

    def _finish(self) -> None:
        self._completion = None
        if not self._coordinator.is_active:
            return
        logger.debug("Progressive loading complete after %d stage(s)", self.current_index + 1)
        self._coordinator.stop()

    def _cancel_completion(self) -> None:
        if self._completion is not None:
            self._scheduler.cancel(self._completion)
            self._completion = None
