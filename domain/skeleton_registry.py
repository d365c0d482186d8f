"""Named skeleton placeholder factories, owned by the composition root."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

SkeletonFactory = Callable[..., Any]


class SkeletonRegistry:
    """Maps a skeleton name (``"doctor-card"``, ``"post-list"``...) to a factory.

    One instance is created by whoever builds the app and handed to the
    widgets that need placeholders; there is no module-level registry.
    """

    def __init__(self) -> None:
        self._factories: dict[str, SkeletonFactory] = {}

    def register(self, name: str, factory: SkeletonFactory, replace: bool = False) -> None:
        if not name:
            raise ValueError("Skeleton name must be non-empty")
        if name in self._factories and not replace:
            raise ValueError(f"Duplicate skeleton: {name}")
        self._factories[name] = factory
        logger.debug("Skeleton registered: %s", name)

    def lookup(self, name: str) -> SkeletonFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise KeyError(f"Unknown skeleton: {name}") from None

    def get(self, name: str) -> Optional[SkeletonFactory]:
        return self._factories.get(name)

    def create(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return self.lookup(name)(*args, **kwargs)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def clear(self) -> None:
        self._factories.clear()
