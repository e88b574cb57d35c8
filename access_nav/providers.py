"""Game data providers usable without a live game: an in-memory one and a JSON world file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

from .interfaces import UNAVAILABLE, SnapshotResult, Unsubscribe

logger = logging.getLogger(__name__)


class EventStream:
    """Synchronous push stream; :meth:`emit` calls every subscriber in order."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._callbacks: List[Callable[[Any], None]] = []

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def emit(self, event: Any) -> None:
        for callback in list(self._callbacks):
            callback(event)


class StaticDataProvider:
    """Serve snapshots from a nested mapping.

    ``data[kind]`` is either the snapshot itself or, when ``ident`` is given,
    a mapping of ident → snapshot. Missing entries are reported as
    ``UNAVAILABLE`` rather than raising, matching a game that has not
    finished loading.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = dict(data or {})
        self._streams: Dict[str, EventStream] = {}

    def fetch_snapshot(self, kind: str, ident: Any = None) -> SnapshotResult:
        entry = self.data.get(kind)
        if entry is None:
            return UNAVAILABLE
        if ident is not None:
            entry = entry.get(str(ident)) if isinstance(entry, Mapping) else None
            if entry is None:
                return UNAVAILABLE
        return entry

    def fetch_events(self, kind: str) -> EventStream:
        if kind not in self._streams:
            self._streams[kind] = EventStream(kind)
        return self._streams[kind]


class JsonDataProvider(StaticDataProvider):
    """Load a recorded world from a JSON file, e.g. ``{"menu": {...}, "scan": {...}}``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(self._read())
        logger.info("Loaded world %s (%s)", self.path, ", ".join(sorted(self.data)))

    def _read(self) -> Dict[str, Any]:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"world file must contain a JSON object (got {type(data).__name__})")
        return data

    def reload(self) -> None:
        """Re-read the file; event streams and their subscribers are kept."""
        self.data = self._read()
