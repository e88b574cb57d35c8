"""Interface definitions to decouple the navigation core from the game."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Union, runtime_checkable

from .key_types import Key, Modifier


class _Unavailable:
    """Sentinel type returned by a provider while a scene is still loading."""

    _instance: "_Unavailable | None" = None

    def __new__(cls) -> "_Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = _Unavailable()

Snapshot = Mapping[str, Any]
SnapshotResult = Union[Snapshot, _Unavailable]
Unsubscribe = Callable[[], None]


@runtime_checkable
class KeyHandler(Protocol):
    """Object that can claim a keystroke from the dispatch chain."""

    def is_active(self) -> bool:
        """Cheap, side-effect free check whether the handler wants input."""
        ...

    def process_key(self, key: Key, modifiers: Modifier) -> bool:
        """Handle ``key``; return ``True`` if it was consumed."""
        ...


@runtime_checkable
class SpeechSink(Protocol):
    def say(self, text: str, interrupt: bool = True) -> None:
        ...


@runtime_checkable
class EventStream(Protocol):
    """Push stream of game events."""

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        ...


@runtime_checkable
class GameDataProvider(Protocol):
    """Live, possibly stale view of game entities."""

    def fetch_snapshot(self, kind: str, ident: Any = None) -> SnapshotResult:
        ...

    def fetch_events(self, kind: str) -> EventStream:
        ...
