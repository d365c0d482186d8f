"""Clock and timer ports, plus the per-coordinator timer slots.

All durations and timestamps are milliseconds. The coordinator never touches
``time`` or an event loop directly; it is handed a :class:`Clock` and a
:class:`TimerScheduler`. :class:`VirtualTimeline` implements both against a
manually advanced clock for deterministic tests and headless replays.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class Clock(Protocol):
    def now(self) -> float: ...


class TimerScheduler(Protocol):
    def schedule(self, delay_ms: float, callback: TimerCallback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class MonotonicClock:
    """Wall-independent clock backed by ``time.monotonic``."""

    def now(self) -> float:
        return time.monotonic() * 1000.0


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay_ms: float, callback: TimerCallback) -> asyncio.TimerHandle:
        return self._get_loop().call_later(max(0.0, delay_ms) / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class VirtualTimeline:
    """Deterministic clock + scheduler. Time only moves through :meth:`advance`."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._queue: list[tuple[float, int]] = []
        self._callbacks: dict[int, TimerCallback] = {}
        self._ids = itertools.count(1)

    def now(self) -> float:
        return self._now

    def schedule(self, delay_ms: float, callback: TimerCallback) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        heapq.heappush(self._queue, (self._now + max(0.0, delay_ms), handle))
        return handle

    def cancel(self, handle: int) -> None:
        self._callbacks.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def advance(self, delta_ms: float) -> None:
        """Move the clock forward, firing every timer due on the way (inclusive)."""
        self.advance_to(self._now + delta_ms)

    def advance_to(self, target_ms: float) -> None:
        if target_ms < self._now:
            raise ValueError(f"Cannot move time backwards ({target_ms} < {self._now})")
        while self._queue and self._queue[0][0] <= target_ms:
            due, handle = heapq.heappop(self._queue)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue  # cancelled
            self._now = due
            callback()
        self._now = target_ms


class TimerKind(str, Enum):
    DEBOUNCE = "debounce"
    STABILITY = "stability"
    MIN_DURATION = "min_duration"
    MAX_DURATION = "max_duration"


class TimerSet:
    """At most one outstanding timer per :class:`TimerKind`.

    Scheduling a kind cancels the previous timer of that kind. Callbacks only
    run while *is_active* returns True and the slot still belongs to them.
    """

    def __init__(self, scheduler: TimerScheduler, is_active: Callable[[], bool]) -> None:
        self._scheduler = scheduler
        self._is_active = is_active
        self._handles: dict[TimerKind, Any] = {}
        self._tokens: dict[TimerKind, object] = {}

    def schedule(self, kind: TimerKind, delay_ms: float, callback: TimerCallback) -> None:
        self.cancel(kind)
        token = object()

        def _fire() -> None:
            if self._tokens.get(kind) is not token:
                return
            del self._tokens[kind]
            self._handles.pop(kind, None)
            if not self._is_active():
                logger.debug("Dropping %s timer callback after teardown", kind.value)
                return
            callback()

        self._tokens[kind] = token
        self._handles[kind] = self._scheduler.schedule(delay_ms, _fire)

    def cancel(self, kind: TimerKind) -> bool:
        self._tokens.pop(kind, None)
        if kind not in self._handles:
            return False
        self._scheduler.cancel(self._handles.pop(kind))
        return True

    def cancel_all(self) -> int:
        cancelled = 0
        for kind in list(self._handles):
            if self.cancel(kind):
                cancelled += 1
        return cancelled

    def is_pending(self, kind: TimerKind) -> bool:
        return kind in self._handles

    def pending_kinds(self) -> set[TimerKind]:
        return set(self._handles)
