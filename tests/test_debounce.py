"""Tests for the debounce / burst-throttle gate."""

import pytest

from domain.debounce import DebounceGate
from domain.models import Transition, TransitionKind
from domain.timers import TimerKind, TimerSet


@pytest.fixture
def applied():
    return []


@pytest.fixture
def timers(timeline):
    return TimerSet(timeline, lambda: True)


@pytest.fixture
def make_gate(timeline, timers, applied, diagnostics):
    def _make(debounce_ms=50.0, burst_threshold=10):
        return DebounceGate(
            timeline,
            timers,
            apply=applied.append,
            debounce_ms=debounce_ms,
            burst_threshold=burst_threshold,
            diagnostics=diagnostics,
        )

    return _make


def _t(kind, timeline, **payload):
    return Transition(kind, timeline.now(), payload)


def test_quiet_request_applies_immediately(make_gate, timeline, applied):
    gate = make_gate()
    assert gate.request(_t(TransitionKind.START, timeline)) is True
    assert [t.kind for t in applied] == [TransitionKind.START]
    assert gate.has_pending is False


def test_request_inside_window_is_deferred(make_gate, timeline, timers, applied):
    gate = make_gate()
    gate.request(_t(TransitionKind.START, timeline))
    timeline.advance_to(10)
    gate.request(_t(TransitionKind.SET_PROGRESS, timeline, progress=40))

    assert len(applied) == 1
    assert timers.is_pending(TimerKind.DEBOUNCE)

    timeline.advance_to(29)
    assert len(applied) == 1
    timeline.advance_to(30)
    assert applied[-1].kind is TransitionKind.SET_PROGRESS


def test_same_slot_last_write_wins(make_gate, timeline, applied):
    gate = make_gate()
    gate.request(_t(TransitionKind.SET_PROGRESS, timeline, progress=1))
    timeline.advance_to(5)
    gate.request(_t(TransitionKind.START, timeline))
    timeline.advance_to(6)
    gate.request(_t(TransitionKind.SET_PROGRESS, timeline, progress=20))
    timeline.advance_to(8)
    gate.request(_t(TransitionKind.STOP, timeline))

    assert [t.slot for t in gate.pending()] == ["set_progress", "loading"]

    timeline.advance_to(50)
    kinds = [t.kind for t in applied]
    assert kinds == [TransitionKind.SET_PROGRESS, TransitionKind.SET_PROGRESS, TransitionKind.STOP]
    assert applied[1].payload["progress"] == 20


def test_burst_drops_and_warns_once(make_gate, timeline, applied, diagnostics):
    gate = make_gate(burst_threshold=3)
    results = []
    for i in range(8):
        timeline.advance_to(i)
        results.append(gate.request(_t(TransitionKind.START, timeline, n=i)))

    assert results == [True, True, True, True, False, False, False, False]
    assert gate.dropped == 4
    assert len(diagnostics.warnings) == 1

    timeline.advance_to(100)
    assert len(applied) == 2
    assert applied[-1].payload["n"] == 3


def test_flush_resets_burst_counter(make_gate, timeline, applied, diagnostics):
    gate = make_gate(burst_threshold=2)
    gate.request(_t(TransitionKind.START, timeline))
    timeline.advance_to(1)
    gate.request(_t(TransitionKind.SET_STAGE, timeline, stage="a"))
    timeline.advance_to(2)
    gate.request(_t(TransitionKind.SET_STAGE, timeline, stage="b"))
    timeline.advance_to(30)  # flush

    timeline.advance_to(31)
    assert gate.request(_t(TransitionKind.SET_STAGE, timeline, stage="c")) is True
    assert diagnostics.warnings == []


@pytest.mark.parametrize("debounce_ms, expected", [(200.0, 20.0), (10.0, 10.0), (50.0, 20.0)])
def test_settle_delay_is_capped(make_gate, debounce_ms, expected):
    assert make_gate(debounce_ms=debounce_ms).settle_ms == expected


def test_discard_and_reset(make_gate, timeline, timers, applied):
    gate = make_gate()
    gate.request(_t(TransitionKind.SET_PROGRESS, timeline, progress=1))
    timeline.advance_to(5)
    gate.request(_t(TransitionKind.START, timeline))

    dropped = gate.discard("loading")
    assert dropped is not None and dropped.kind is TransitionKind.START
    assert not timers.is_pending(TimerKind.DEBOUNCE)

    gate.request(_t(TransitionKind.SET_STAGE, timeline, stage="x"))
    gate.reset()
    timeline.advance_to(100)
    assert len(applied) == 1


def test_reset_during_flush_drops_remaining(timeline, timers, diagnostics):
    applied = []

    def _apply(transition):
        applied.append(transition)
        if transition.kind is TransitionKind.SET_PROGRESS:
            gate.reset()

    gate = DebounceGate(timeline, timers, apply=_apply, diagnostics=diagnostics)
    gate.request(_t(TransitionKind.START, timeline))
    timeline.advance_to(1)
    gate.request(_t(TransitionKind.SET_PROGRESS, timeline, progress=10))
    gate.request(_t(TransitionKind.STOP, timeline))

    timeline.advance_to(100)
    kinds = [t.kind for t in applied]
    assert kinds == [TransitionKind.START, TransitionKind.SET_PROGRESS]
    assert not gate.has_pending
