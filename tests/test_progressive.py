"""Tests for multi-stage progressive loading."""

import pytest

from domain.models import LoadingType
from domain.progressive import ProgressiveLoader

STAGES = ["Lịch khám", "Bác sĩ", "Dịch vụ"]


@pytest.fixture
def loader(coordinator, timeline):
    return ProgressiveLoader(coordinator, timeline, STAGES)


def test_requires_stages(coordinator, timeline):
    with pytest.raises(ValueError):
        ProgressiveLoader(coordinator, timeline, [])


def test_start_enters_first_stage(loader, coordinator):
    loader.start()
    assert coordinator.state.is_loading is True
    assert coordinator.state.loading_type is LoadingType.PROGRESSIVE
    assert coordinator.state.stage == STAGES[0]
    assert loader.current_stage_name == STAGES[0]
    assert loader.total_stages == 3


def test_walk_through_stages_and_complete(loader, coordinator, timeline):
    loader.start()
    timeline.advance_to(60)
    assert loader.next_stage() is True
    timeline.advance_to(100)
    assert coordinator.state.stage == STAGES[1]
    assert coordinator.state.progress == 67

    timeline.advance_to(160)
    loader.set_stage_progress(STAGES[1], 50)
    assert coordinator.state.progress == 50

    timeline.advance_to(300)
    loader.complete()
    assert coordinator.state.progress == 100
    assert coordinator.state.is_loading is True

    timeline.advance_to(600)
    assert coordinator.state.is_loading is False
    assert coordinator.state.progress == 100


def test_progress_for_other_stage_is_only_recorded(loader, coordinator, timeline):
    loader.start()
    timeline.advance_to(60)
    loader.set_stage_progress(STAGES[2], 80)
    assert loader.stage_progress == {STAGES[2]: 80}
    assert coordinator.state.progress == 0


def test_next_stage_stops_at_last(loader):
    loader.start()
    assert loader.next_stage() is True
    assert loader.next_stage() is True
    assert loader.next_stage() is False
    assert loader.current_stage_name == STAGES[-1]


def test_completion_skipped_after_dispose(loader, coordinator, timeline):
    loader.start()
    timeline.advance_to(400)
    loader.complete()
    coordinator.dispose()
    timeline.advance_to(1000)
    assert coordinator.state.is_loading is True
