"""Pure derivations the rendering layer uses to decide what to draw."""

from __future__ import annotations

from domain.models import LoadingSnapshot, LoadingState, LoadingType

_CONTENT_TYPES = (LoadingType.CONTENT, LoadingType.PROGRESSIVE)


def should_show_skeleton(state: LoadingState, enable_skeleton_fallback: bool = True) -> bool:
    return (
        enable_skeleton_fallback
        and state.error is None
        and state.is_loading
        and state.is_stable
    )


def is_stable_loading(state: LoadingState) -> bool:
    return state.is_loading and state.is_stable


def is_content_loading(state: LoadingState) -> bool:
    return state.is_loading and state.loading_type in _CONTENT_TYPES


def derive_snapshot(state: LoadingState, enable_skeleton_fallback: bool = True) -> LoadingSnapshot:
    return LoadingSnapshot(
        state=state,
        should_show_skeleton=should_show_skeleton(state, enable_skeleton_fallback),
        is_stable_loading=is_stable_loading(state),
        is_content_loading=is_content_loading(state),
    )
