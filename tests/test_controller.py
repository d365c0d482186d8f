"""Tests for the content controller's worker-thread hand-off."""

import threading

import pytest

from app.config import Config
from app.controller import Controller
from domain.models import LoadingType


@pytest.fixture
def controller(timeline, diagnostics):
    ctrl = Controller(Config(), timeline, clock=timeline, diagnostics=diagnostics)
    yield ctrl
    ctrl.shutdown()


def test_successful_fetch_stops_loading(controller, timeline):
    results = []
    controller.on_result = results.append

    controller.request_content("doctors", lambda: [{"title": "BS. An"}], message_context="doctor")
    coord = controller.coordinator("doctors")
    assert coord.state.is_loading is True
    assert coord.state.message == "Đang tải thông tin bác sĩ..."

    controller.wait_idle()
    assert controller.poll_results() == 1
    assert controller.payload("doctors") == [{"title": "BS. An"}]
    assert results[0].ok

    timeline.advance_to(300)
    assert coord.state.is_loading is False


def test_failed_fetch_sets_error(controller):
    def _fail():
        raise ConnectionError("CMS unreachable")

    controller.request_content("posts", _fail)
    controller.wait_idle()
    controller.poll_results()

    state = controller.coordinator("posts").state
    assert state.is_loading is False
    assert state.error == "CMS unreachable"


def test_stale_results_are_dropped(controller):
    release = threading.Event()

    def _slow():
        release.wait(timeout=2.0)
        return ["old"]

    controller.request_content("services", _slow)
    controller.request_content("services", lambda: ["new"], loading_type=LoadingType.PROGRESSIVE)
    release.set()
    controller.wait_idle()

    assert controller.poll_results() == 1
    assert controller.payload("services") == ["new"]


def test_release_disposes_coordinator(controller, timeline):
    controller.request_content("doctors", lambda: [])
    coord = controller.coordinator("doctors")
    controller.release("doctors")

    assert coord.is_active is False
    assert coord.pending_timers() == set()
    controller.wait_idle()
    assert controller.poll_results() == 0


def test_result_from_released_section_is_not_applied_to_new_one(controller):
    release = threading.Event()

    def _slow_failure():
        release.wait(timeout=2.0)
        raise ConnectionError("old section failed")

    first = controller.request_content("doctors", _slow_failure)
    controller.release("doctors")
    second = controller.request_content("doctors", lambda: ["fresh"])
    assert second > first

    release.set()
    controller.wait_idle()
    assert controller.poll_results() == 1

    state = controller.coordinator("doctors").state
    assert state.error is None
    assert controller.payload("doctors") == ["fresh"]
