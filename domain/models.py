"""Core data models for the clinic loading coordinator."""

from __future__ import annotations

import dataclasses
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class LoadingType(str, Enum):
    ROUTE = "route"
    CONTENT = "content"
    SKELETON = "skeleton"
    PROGRESSIVE = "progressive"
    IDLE = "idle"


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    EMERGENCY = "emergency"


class MessageContext(str, Enum):
    APPOINTMENT = "appointment"
    DOCTOR = "doctor"
    SERVICE = "service"
    DEPARTMENT = "department"
    GENERAL = "general"


class TransitionKind(str, Enum):
    START = "start"
    STOP = "stop"
    SET_PROGRESS = "set_progress"
    SET_STAGE = "set_stage"
    CLEAR_ERROR = "clear_error"


def new_render_key() -> str:
    return uuid.uuid4().hex


def clamp_progress(value: Any) -> int:
    """Clamp into [0, 100] and round to an int; NaN counts as 0.
    Raises on non-numeric input."""
    v = float(value)
    if math.isnan(v):
        return 0
    return int(round(max(0.0, min(100.0, v))))


@dataclass(frozen=True)
class LoadingState:
    """Immutable snapshot of one coordinator's loading status."""

    is_loading: bool = False
    loading_type: LoadingType = LoadingType.IDLE
    progress: int = 0
    message: Optional[str] = None
    stage: Optional[str] = None
    error: Optional[str] = None
    is_stable: bool = True
    render_key: str = field(default_factory=new_render_key)

    @classmethod
    def idle(cls) -> "LoadingState":
        return cls()

    def replace(self, **changes: Any) -> "LoadingState":
        return dataclasses.replace(self, **changes)

    def same_content(self, other: "LoadingState") -> bool:
        """True when every field except ``render_key`` matches."""
        return dataclasses.replace(self, render_key="") == dataclasses.replace(
            other, render_key=""
        )

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        data["loading_type"] = self.loading_type.value
        return data


@dataclass(frozen=True)
class LoadingSnapshot:
    """What the rendering layer reads: the state plus derived display flags."""

    state: LoadingState
    should_show_skeleton: bool
    is_stable_loading: bool
    is_content_loading: bool

    @property
    def render_key(self) -> str:
        return self.state.render_key


@dataclass(frozen=True)
class Transition:
    """A requested change waiting to pass through the debounce gate."""

    kind: TransitionKind
    requested_at: float  # clock ms
    payload: dict = field(default_factory=dict)

    @property
    def slot(self) -> str:
        # start and stop compete for the same slot so the later one wins
        if self.kind in (TransitionKind.START, TransitionKind.STOP):
            return "loading"
        return self.kind.value


@dataclass
class LoadingConfig:
    """Per-coordinator options. Durations are milliseconds."""

    min_loading_time: float = 300.0
    max_loading_time: float = 10000.0
    enable_skeleton_fallback: bool = True
    priority: Priority = Priority.NORMAL
    debounce_ms: float = 50.0
    message_context: MessageContext = MessageContext.GENERAL
    locale: str = "vi"
    burst_threshold: int = 10
    stability_ms: float = 100.0

    def __post_init__(self) -> None:
        self.priority = Priority(self.priority)
        self.message_context = MessageContext(self.message_context)
        for name in ("min_loading_time", "max_loading_time", "debounce_ms", "stability_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)!r}")
        if self.max_loading_time < self.min_loading_time:
            raise ValueError("max_loading_time must not be shorter than min_loading_time")
        if self.burst_threshold < 1:
            raise ValueError("burst_threshold must be >= 1")
