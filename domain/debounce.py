"""Debounce / burst-throttle gate in front of the loading state record."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from domain.diagnostics import DiagnosticSink, LoggingDiagnostics
from domain.models import Transition
from domain.timers import Clock, TimerKind, TimerSet

logger = logging.getLogger(__name__)

# Upper bound on how long a deferred transition may wait after the last request.
SETTLE_CAP_MS = 20.0


class DebounceGate:
    """Applies a transition at once after a quiet period; otherwise parks it.

    Parked transitions live in slots (see :attr:`Transition.slot`); a newer
    request for the same slot overwrites the older one. The slots are flushed
    together ``min(debounce_ms, 20)`` ms after the last accepted request.
    More than *burst_threshold* requests before a flush are dropped and
    reported once per burst.
    """

    def __init__(
        self,
        clock: Clock,
        timers: TimerSet,
        apply: Callable[[Transition], None],
        debounce_ms: float = 50.0,
        burst_threshold: int = 10,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self.debounce_ms = debounce_ms
        self.burst_threshold = burst_threshold

        self._clock = clock
        self._timers = timers
        self._apply = apply
        self._diag = diagnostics or LoggingDiagnostics(logger)

        self._last_applied: Optional[float] = None
        self._pending: dict[str, Transition] = {}
        self._burst = 0
        self._throttled = False
        self._epoch = 0
        self.dropped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def settle_ms(self) -> float:
        return min(self.debounce_ms, SETTLE_CAP_MS)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def pending(self) -> list[Transition]:
        return list(self._pending.values())

    def request(self, transition: Transition) -> bool:
        """Feed a transition; return False if it was dropped by the throttle."""
        now = self._clock.now()
        quiet = self._last_applied is None or now - self._last_applied >= self.debounce_ms

        if quiet and not self._pending:
            self._burst = 0
            self._throttled = False
            self._last_applied = now
            self._apply(transition)
            return True

        self._burst += 1
        if self._burst > self.burst_threshold:
            self.dropped += 1
            if not self._throttled:
                self._throttled = True
                self._diag.warn(
                    f"Rapid loading state changes detected ({self._burst} within "
                    f"{self.debounce_ms:.0f} ms), throttling..."
                )
            return False

        # Re-insert so the slot order follows the latest request.
        self._pending.pop(transition.slot, None)
        self._pending[transition.slot] = transition
        self._timers.schedule(TimerKind.DEBOUNCE, self.settle_ms, self._flush)
        return True

    def discard(self, slot: str) -> Optional[Transition]:
        dropped = self._pending.pop(slot, None)
        if not self._pending:
            self._timers.cancel(TimerKind.DEBOUNCE)
        return dropped

    def reset(self) -> None:
        self._epoch += 1
        self._pending.clear()
        self._timers.cancel(TimerKind.DEBOUNCE)
        self._last_applied = None
        self._burst = 0
        self._throttled = False

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _flush(self) -> None:
        batch = list(self._pending.values())
        self._pending.clear()
        self._burst = 0
        self._throttled = False
        self._last_applied = self._clock.now()
        epoch = self._epoch
        logger.debug("Flushing %d debounced transition(s)", len(batch))
        for transition in batch:
            # A reset() from inside apply (fault fallback, clear) drops the rest.
            if self._epoch != epoch:
                logger.debug("Gate reset during flush; dropping %s", transition.kind.value)
                continue
            self._apply(transition)
