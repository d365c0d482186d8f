"""Shared fixtures: a virtual timeline and a recording diagnostic sink."""

from typing import Optional

import pytest

from domain.coordinator import LoadingCoordinator
from domain.lifecycle import LifecycleGuard
from domain.models import LoadingConfig
from domain.timers import VirtualTimeline


class RecordingDiagnostics:
    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[tuple[str, Optional[BaseException]]] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.errors.append((message, cause))


@pytest.fixture
def timeline():
    return VirtualTimeline()


@pytest.fixture
def diagnostics():
    return RecordingDiagnostics()


@pytest.fixture
def guard():
    return LifecycleGuard(name="test")


@pytest.fixture
def make_coordinator(timeline, diagnostics, guard):
    def _make(**config_overrides) -> LoadingCoordinator:
        return LoadingCoordinator(
            timeline,
            clock=timeline,
            config=LoadingConfig(**config_overrides),
            guard=guard,
            diagnostics=diagnostics,
        )

    return _make


@pytest.fixture
def coordinator(make_coordinator):
    return make_coordinator()
