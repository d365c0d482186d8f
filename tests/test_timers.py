"""Tests for the virtual timeline and per-kind timer slots."""

import pytest

from domain.timers import TimerKind, TimerSet, VirtualTimeline


def test_timeline_fires_in_due_order():
    tl = VirtualTimeline()
    fired = []
    tl.schedule(30, lambda: fired.append(("b", tl.now())))
    tl.schedule(10, lambda: fired.append(("a", tl.now())))
    tl.schedule(30, lambda: fired.append(("c", tl.now())))

    tl.advance(30)
    assert fired == [("a", 10), ("b", 30), ("c", 30)]
    assert tl.now() == 30
    assert tl.pending == 0


def test_timeline_cancel_and_nested_schedule():
    tl = VirtualTimeline()
    fired = []
    handle = tl.schedule(5, lambda: fired.append("cancelled"))
    tl.cancel(handle)
    tl.schedule(5, lambda: tl.schedule(5, lambda: fired.append("nested")))

    tl.advance(9)
    assert fired == []
    tl.advance(1)
    assert fired == ["nested"]


def test_timeline_refuses_to_go_backwards():
    tl = VirtualTimeline(start_ms=100)
    with pytest.raises(ValueError):
        tl.advance_to(50)


def test_timer_set_replaces_same_kind(timeline):
    timers = TimerSet(timeline, lambda: True)
    fired = []
    timers.schedule(TimerKind.STABILITY, 100, lambda: fired.append("old"))
    timers.schedule(TimerKind.STABILITY, 100, lambda: fired.append("new"))

    assert timeline.pending == 1
    timeline.advance(200)
    assert fired == ["new"]
    assert not timers.is_pending(TimerKind.STABILITY)


def test_timer_set_kinds_are_independent(timeline):
    timers = TimerSet(timeline, lambda: True)
    for kind in TimerKind:
        timers.schedule(kind, 10, lambda: None)
    assert timers.pending_kinds() == set(TimerKind)

    assert timers.cancel(TimerKind.DEBOUNCE) is True
    assert timers.cancel(TimerKind.DEBOUNCE) is False
    assert timers.cancel_all() == 3
    assert timeline.pending == 0


def test_timer_set_callbacks_inert_when_inactive(timeline):
    active = {"value": True}
    timers = TimerSet(timeline, lambda: active["value"])
    fired = []
    timers.schedule(TimerKind.MAX_DURATION, 10, lambda: fired.append(1))

    active["value"] = False
    timeline.advance(10)
    assert fired == []
    assert timers.pending_kinds() == set()
