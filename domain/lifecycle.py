"""Teardown guard shared between a consumer and the coordinator it owns."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class LifecycleGuard:
    """Tracks whether the owning consumer is still alive.

    :meth:`dispose` flips the flag synchronously and runs the registered
    dispose callbacks exactly once; later calls are no-ops.
    """

    def __init__(self, name: str = "consumer") -> None:
        self.name = name
        self._active = True
        self._on_dispose: list[Callable[[], None]] = []

    def is_active(self) -> bool:
        return self._active

    def on_dispose(self, callback: Callable[[], None]) -> None:
        if not self._active:
            callback()
            return
        self._on_dispose.append(callback)

    def dispose(self) -> bool:
        """Return True if this call performed the teardown."""
        if not self._active:
            return False
        self._active = False
        callbacks, self._on_dispose = self._on_dispose, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Dispose callback failed for %s", self.name)
        logger.debug("Lifecycle guard '%s' disposed.", self.name)
        return True
