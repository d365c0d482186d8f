"""Safe loading-state coordinator.

Tracks whether something is loading and turns raw start/stop calls into a
flicker-free sequence of :class:`~domain.models.LoadingState` snapshots:

* requests pass through a :class:`~domain.debounce.DebounceGate`;
* an episode is shown for at least ``min_loading_time`` and is forced into a
  timeout error after ``max_loading_time``;
* every semantic commit opens a short stability window (``is_stable=False``);
* once the owning :class:`~domain.lifecycle.LifecycleGuard` is disposed, all
  timers are cancelled and late callbacks are inert.

The coordinator never raises to its caller. Faults are reported to the
diagnostic sink and replaced by an idle snapshot carrying a system error.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from domain.debounce import DebounceGate
from domain.diagnostics import DiagnosticSink, LoggingDiagnostics
from domain.lifecycle import LifecycleGuard
from domain.messages import default_message, stage_message, system_error_message, timeout_message
from domain.models import (
    LoadingConfig,
    LoadingSnapshot,
    LoadingState,
    LoadingType,
    Transition,
    TransitionKind,
    clamp_progress,
    new_render_key,
)
from domain.skeleton_gate import derive_snapshot
from domain.timers import Clock, MonotonicClock, TimerKind, TimerScheduler, TimerSet

logger = logging.getLogger(__name__)

Subscriber = Callable[[LoadingSnapshot], None]


class LoadingCoordinator:
    def __init__(
        self,
        scheduler: TimerScheduler,
        clock: Optional[Clock] = None,
        config: Optional[LoadingConfig] = None,
        guard: Optional[LifecycleGuard] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self.config = config or LoadingConfig()
        self._clock = clock or MonotonicClock()
        self._guard = guard or LifecycleGuard()
        self._diag = diagnostics or LoggingDiagnostics(logger)

        self._timers = TimerSet(scheduler, self._guard.is_active)
        self._gate = DebounceGate(
            self._clock,
            self._timers,
            apply=lambda t: self._guarded(self._apply, t),
            debounce_ms=self.config.debounce_ms,
            burst_threshold=self.config.burst_threshold,
            diagnostics=self._diag,
        )

        self._state = LoadingState.idle()
        self._subscribers: list[Subscriber] = []
        self._episode_start: Optional[float] = None

        self._guard.on_dispose(self._teardown)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoadingState:
        return self._state

    def snapshot(self) -> LoadingSnapshot:
        return derive_snapshot(self._state, self.config.enable_skeleton_fallback)

    @property
    def is_active(self) -> bool:
        return self._guard.is_active()

    @property
    def loading_duration_ms(self) -> float:
        """Time since the current episode started, 0 when idle."""
        if self._episode_start is None or not self._state.is_loading:
            return 0.0
        return self._clock.now() - self._episode_start

    def pending_timers(self) -> set[TimerKind]:
        return self._timers.pending_kinds()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback* for every new snapshot; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def start(
        self,
        loading_type: Optional[LoadingType] = None,
        progress: Optional[float] = None,
        message: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> bool:
        return self._request(
            TransitionKind.START,
            loading_type=loading_type,
            progress=progress,
            message=message,
            stage=stage,
        )

    def stop(self) -> bool:
        return self._request(TransitionKind.STOP)

    def set_progress(self, progress: float) -> bool:
        return self._request(TransitionKind.SET_PROGRESS, progress=progress)

    def set_stage(self, stage: str) -> bool:
        return self._request(TransitionKind.SET_STAGE, stage=stage)

    def set_error(self, error: Optional[str]) -> bool:
        if not self._guard.is_active():
            return False
        if error is None:
            return self._request(TransitionKind.CLEAR_ERROR)
        # Errors end the episode right away; they never wait in the gate.
        self._guarded(self._apply_error, str(error))
        return True

    def clear(self) -> None:
        if self._guard.is_active():
            self._guarded(self._reset)

    def force_refresh(self) -> None:
        if self._guard.is_active():
            self._guarded(self._commit, self._state, settle=False)

    def dispose(self) -> None:
        self._guard.dispose()

    # ------------------------------------------------------------------
    # Transition handlers
    # ------------------------------------------------------------------

    def _request(self, kind: TransitionKind, **payload: Any) -> bool:
        if not self._guard.is_active():
            logger.debug("Ignoring %s on a disposed coordinator", kind.value)
            return False
        result = self._guarded(self._gate.request, Transition(kind, self._clock.now(), payload))
        return bool(result)

    def _apply(self, transition: Transition) -> None:
        handler = {
            TransitionKind.START: self._apply_start,
            TransitionKind.STOP: self._apply_stop,
            TransitionKind.SET_PROGRESS: self._apply_progress,
            TransitionKind.SET_STAGE: self._apply_stage,
            TransitionKind.CLEAR_ERROR: self._apply_clear_error,
        }[transition.kind]
        handler(transition.payload)

    def _apply_start(self, payload: dict) -> None:
        self._timers.cancel(TimerKind.MIN_DURATION)
        continuing = self._state.is_loading and self._timers.is_pending(TimerKind.MAX_DURATION)

        if not continuing:
            self._episode_start = self._clock.now()
            self._timers.schedule(
                TimerKind.MAX_DURATION,
                self.config.max_loading_time,
                lambda: self._guarded(self._on_timeout),
            )
            logger.debug("Loading episode started (priority=%s)", self.config.priority.value)

        base = self._state
        loading_type = payload.get("loading_type")
        progress = payload.get("progress")
        stage = payload.get("stage")
        if continuing:
            loading_type = base.loading_type if loading_type is None else LoadingType(loading_type)
            progress = base.progress if progress is None else progress
            message = payload.get("message") or base.message
            stage = base.stage if stage is None else stage
        else:
            loading_type = LoadingType(loading_type or LoadingType.CONTENT)
            progress = 0 if progress is None else progress
            message = payload.get("message") or default_message(
                self.config.message_context, self.config.locale
            )
        if loading_type is LoadingType.IDLE:
            loading_type = LoadingType.CONTENT

        merged = base.replace(
            is_loading=True,
            loading_type=loading_type,
            progress=clamp_progress(progress),
            message=message,
            stage=stage,
            error=None,
        )
        if continuing and merged.same_content(base):
            logger.debug("start() changed nothing in the running episode")
            return
        self._commit(merged)

    def _apply_stop(self, _payload: dict) -> None:
        if not self._state.is_loading:
            logger.debug("stop() ignored: nothing is loading")
            return
        if self._timers.is_pending(TimerKind.MIN_DURATION):
            return

        self._timers.cancel(TimerKind.MAX_DURATION)
        started = self._episode_start if self._episode_start is not None else self._clock.now()
        remaining = self.config.min_loading_time - (self._clock.now() - started)
        if remaining > 0:
            logger.debug("Holding loading state for another %.0f ms", remaining)
            self._timers.schedule(
                TimerKind.MIN_DURATION, remaining, lambda: self._guarded(self._finish_episode)
            )
        else:
            self._finish_episode()

    def _apply_progress(self, payload: dict) -> None:
        self._commit(self._state.replace(progress=payload["progress"]))

    def _apply_stage(self, payload: dict) -> None:
        stage = payload["stage"]
        self._commit(
            self._state.replace(
                stage=stage,
                message=stage_message(stage, self.config.message_context, self.config.locale),
            )
        )

    def _apply_clear_error(self, _payload: dict) -> None:
        if self._state.error is None:
            return
        self._commit(self._state.replace(error=None))

    def _apply_error(self, error: str) -> None:
        self._gate.discard("loading")
        self._timers.cancel(TimerKind.MIN_DURATION)
        self._timers.cancel(TimerKind.MAX_DURATION)
        self._episode_start = None
        self._commit(
            self._state.replace(
                error=error, is_loading=False, loading_type=LoadingType.IDLE, progress=0
            )
        )

    def _finish_episode(self) -> None:
        self._episode_start = None
        self._commit(
            self._state.replace(is_loading=False, loading_type=LoadingType.IDLE, progress=100)
        )

    def _on_timeout(self) -> None:
        self._timers.cancel(TimerKind.MIN_DURATION)
        self._episode_start = None
        self._diag.warn(
            f"Loading exceeded {self.config.max_loading_time:.0f} ms without stop(); forcing timeout"
        )
        self._commit(
            self._state.replace(
                is_loading=False,
                loading_type=LoadingType.IDLE,
                progress=0,
                error=timeout_message(self.config.locale),
            )
        )

    def _settle(self) -> None:
        self._commit(self._state.replace(is_stable=True), settle=False)

    def _reset(self) -> None:
        self._gate.reset()
        self._timers.cancel_all()
        self._episode_start = None
        self._commit(LoadingState.idle(), settle=False)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def _commit(self, state: LoadingState, settle: bool = True) -> None:
        changes: dict[str, Any] = {
            "progress": clamp_progress(state.progress),
            "render_key": new_render_key(),
        }
        if settle:
            changes["is_stable"] = False
        if state.error is not None:
            changes["is_loading"] = False
            changes["loading_type"] = LoadingType.IDLE
        self._state = state.replace(**changes)

        if settle:
            self._timers.schedule(
                TimerKind.STABILITY, self.config.stability_ms, lambda: self._guarded(self._settle)
            )
        logger.debug(
            "Commit: loading=%s type=%s progress=%d stable=%s error=%s",
            self._state.is_loading,
            self._state.loading_type.value,
            self._state.progress,
            self._state.is_stable,
            self._state.error,
        )
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as exc:
                self._diag.error("Loading subscriber failed", exc)

    def _guarded(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            self._fail(getattr(fn, "__name__", "commit"), exc)
            return None

    def _fail(self, where: str, exc: Exception) -> None:
        self._diag.error(f"Error in {where}", exc)
        try:
            self._gate.reset()
            self._timers.cancel_all()
        except Exception:
            logger.exception("Could not cancel timers while recovering")
        self._episode_start = None
        self._state = LoadingState.idle().replace(error=system_error_message(self.config.locale))
        self._notify()

    def _teardown(self) -> None:
        cancelled = self._timers.cancel_all()
        self._gate.reset()
        self._subscribers.clear()
        logger.debug("Coordinator disposed; %d timer(s) cancelled", cancelled)
