"""Content controller – runs CMS fetches on worker threads and drives the
loading coordinators on the UI thread."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.config import Config
from domain.coordinator import LoadingCoordinator
from domain.diagnostics import DiagnosticSink
from domain.lifecycle import LifecycleGuard
from domain.models import LoadingType
from domain.timers import Clock, TimerScheduler

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one fetch, handed from a worker thread to the UI thread."""

    key: str
    generation: int
    payload: Any = None
    error: Optional[str] = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class Controller:
    """Owns one :class:`LoadingCoordinator` per content section.

    Fetch callables run in background threads; results are pushed into a
    thread-safe queue that the UI drains with :meth:`poll_results` from a Qt
    timer, so coordinators are only ever touched from one thread.
    """

    # Set by the UI
    on_result: Optional[Callable[[FetchResult], None]] = None

    def __init__(
        self,
        config: Config,
        scheduler: TimerScheduler,
        clock: Optional[Clock] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self.config = config
        self._scheduler = scheduler
        self._clock = clock
        self._diagnostics = diagnostics

        self._coordinators: dict[str, LoadingCoordinator] = {}
        self._guards: dict[str, LifecycleGuard] = {}
        # Kept across release() so results of a released section stay stale.
        self._generations: dict[str, int] = {}
        self._payloads: dict[str, Any] = {}

        # Worker threads
        self._result_queue: queue.Queue[FetchResult] = queue.Queue()
        self._workers: list[threading.Thread] = []
        self._slots = threading.Semaphore(max(1, config.fetch_workers))

    # ------------------------------------------------------------------
    # Coordinators
    # ------------------------------------------------------------------

    def coordinator(self, key: str, message_context: Optional[str] = None) -> LoadingCoordinator:
        coord = self._coordinators.get(key)
        if coord is None:
            guard = LifecycleGuard(name=key)
            coord = LoadingCoordinator(
                self._scheduler,
                clock=self._clock,
                config=self.config.loading_config(message_context),
                guard=guard,
                diagnostics=self._diagnostics,
            )
            self._coordinators[key] = coord
            self._guards[key] = guard
            logger.debug("Coordinator created for section '%s'", key)
        return coord

    def release(self, key: str) -> None:
        """Tear down the coordinator of a section that left the screen."""
        guard = self._guards.pop(key, None)
        self._coordinators.pop(key, None)
        self._payloads.pop(key, None)
        if guard is not None:
            guard.dispose()
            logger.debug("Section '%s' released", key)

    def payload(self, key: str) -> Any:
        return self._payloads.get(key)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def request_content(
        self,
        key: str,
        fetch: Callable[[], Any],
        loading_type: LoadingType = LoadingType.CONTENT,
        message_context: Optional[str] = None,
    ) -> int:
        """Start loading *key* and run *fetch* off the UI thread; returns the request generation."""
        coord = self.coordinator(key, message_context)
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        coord.start(loading_type=loading_type)

        worker = threading.Thread(
            target=self._worker_loop,
            args=(key, generation, fetch),
            daemon=True,
            name=f"Fetch-{key}",
        )
        self._workers = [w for w in self._workers if w.is_alive()]
        self._workers.append(worker)
        worker.start()
        logger.info("Fetch requested: %s (generation %d)", key, generation)
        return generation

    def poll_results(self) -> int:
        """Apply every finished fetch to its coordinator. Call from the UI thread."""
        applied = 0
        while True:
            try:
                result = self._result_queue.get_nowait()
            except queue.Empty:
                break
            if self._generations.get(result.key) != result.generation:
                logger.debug("Dropping stale result for '%s'", result.key)
                continue
            coord = self._coordinators.get(result.key)
            if coord is None or not coord.is_active:
                continue

            if result.ok:
                self._payloads[result.key] = result.payload
                coord.stop()
            else:
                coord.set_error(result.error)
            applied += 1
            if self.on_result:
                self.on_result(result)
        return applied

    def wait_idle(self, timeout: float = 2.0) -> None:
        for worker in list(self._workers):
            worker.join(timeout=timeout)

    def shutdown(self) -> None:
        self.wait_idle()
        self._workers = []
        for key in list(self._coordinators):
            self.release(key)
        logger.info("Controller shut down.")

    def _worker_loop(self, key: str, generation: int, fetch: Callable[[], Any]) -> None:
        with self._slots:
            t0 = time.monotonic()
            try:
                payload = fetch()
                result = FetchResult(key, generation, payload=payload)
            except Exception as exc:
                logger.warning("Fetch for '%s' failed: %s", key, exc)
                result = FetchResult(key, generation, error=str(exc) or type(exc).__name__)
            result.elapsed_s = time.monotonic() - t0
        self._result_queue.put(result)
