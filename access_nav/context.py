"""Scene-scoped access to the game data provider."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Protocol

from .interfaces import UNAVAILABLE, EventStream, GameDataProvider, SnapshotResult

logger = logging.getLogger(__name__)


class Disposable(Protocol):
    def dispose(self) -> None:
        ...


class GameContext:
    """Explicit handle on live game services for the current scene.

    The surrounding application calls :meth:`invalidate` when a scene is torn
    down and :meth:`refresh` once the next one is ready. While invalid, every
    snapshot request returns ``UNAVAILABLE`` and nothing is cached across the
    boundary: scoped resources are disposed and close hooks run.
    """

    def __init__(self, provider: GameDataProvider, *, ready: bool = True) -> None:
        self._provider = provider
        self._ready = ready
        self.generation = 0
        self._scoped: List[Disposable] = []
        self._close_hooks: List[Callable[[], None]] = []

    @property
    def ready(self) -> bool:
        return self._ready

    def fetch_snapshot(self, kind: str, ident: Any = None) -> SnapshotResult:
        if not self._ready:
            return UNAVAILABLE
        return self._provider.fetch_snapshot(kind, ident)

    def fetch_events(self, kind: str) -> EventStream:
        return self._provider.fetch_events(kind)

    def scope(self, resource: Disposable) -> Disposable:
        """Dispose ``resource`` at the next scene boundary."""
        self._scoped.append(resource)
        return resource

    def on_invalidate(self, hook: Callable[[], None]) -> None:
        """Run ``hook`` on every scene boundary (e.g. a navigator's close)."""
        self._close_hooks.append(hook)

    def invalidate(self) -> None:
        self._ready = False
        self.generation += 1
        for hook in self._close_hooks:
            hook()
        while self._scoped:
            self._scoped.pop().dispose()
        logger.info("Game context invalidated (generation %d)", self.generation)

    def refresh(self, provider: GameDataProvider | None = None) -> None:
        if provider is not None:
            self._provider = provider
        self._ready = True
        logger.info("Game context ready (generation %d)", self.generation)
