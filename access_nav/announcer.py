"""
access_nav/announcer.py
-----------------------

Turn a noisy stream of asynchronous game events into spoken announcements.

• Events arriving during the grace period after subscription are dropped
  (the burst a scene fires while it finishes loading).
• Each later event is reduced to a dedup key; keys already announced are
  dropped. The cache is FIFO-bounded.
• Public API:
      AnnouncementDeduplicator(speech, key_fn, formatter, *, grace_period, capacity)
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Callable, Deque, List, Set

from .interfaces import EventStream, SpeechSink, Unsubscribe
from .speech import clean_text

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 2.0
DEFAULT_CAPACITY = 100


class MalformedEventError(ValueError):
    """An event payload is missing the fields needed to announce it."""


# ------------------------------------------------------------------ #
# dedup cache
# ------------------------------------------------------------------ #
class DedupCache:
    """Set of announced keys with first-in-first-out eviction."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0 (got {capacity})")
        self.capacity = capacity
        self._keys: Set[str] = set()
        self._order: Deque[str] = deque()

    def add(self, key: str) -> bool:
        """Insert ``key``; ``False`` if it was already present."""
        if key in self._keys:
            return False
        self._keys.add(key)
        self._order.append(key)
        while len(self._order) > self.capacity:
            self._keys.discard(self._order.popleft())
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._order)

    def clear(self) -> None:
        self._keys.clear()
        self._order.clear()


# ------------------------------------------------------------------ #
# deduplicator
# ------------------------------------------------------------------ #
_MALFORMED = (MalformedEventError, KeyError, AttributeError, TypeError, ValueError)


class AnnouncementDeduplicator:
    """Filter one kind of game event and speak what gets through.

    Parameters
    ----------
    speech:
        Sink that receives the formatted announcement.
    key_fn:
        Reduces an event payload to its dedup key.
    formatter:
        Turns an event payload into the utterance.
    grace_period:
        Seconds after construction during which every event is dropped.
    capacity:
        Maximum number of remembered dedup keys.
    clock:
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        speech: SpeechSink,
        key_fn: Callable[[Any], str],
        formatter: Callable[[Any], str],
        *,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
        name: str = "events",
    ) -> None:
        self.speech = speech
        self.key_fn = key_fn
        self.formatter = formatter
        self.grace_period = grace_period
        self.name = name
        self.cache = DedupCache(capacity)
        self._clock = clock
        self._started_at = clock()
        self._unsubscribes: List[Unsubscribe] = []
        self._disposed = False

    # ---------------------------------------------------------- lifecycle
    def subscribe(self, stream: EventStream) -> None:
        if self._disposed:
            raise RuntimeError(f"{self.name} announcer is disposed")
        self._unsubscribes.append(stream.subscribe(self.handle))
        logger.debug("%s announcer subscribed", self.name)

    def dispose(self) -> None:
        """Unsubscribe from every stream and forget all announced keys."""
        while self._unsubscribes:
            self._unsubscribes.pop()()
        self.cache.clear()
        self._disposed = True
        logger.debug("%s announcer disposed", self.name)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __enter__(self) -> "AnnouncementDeduplicator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def in_grace_period(self) -> bool:
        return self._clock() - self._started_at < self.grace_period

    # ---------------------------------------------------------- events
    def handle(self, event: Any) -> bool:
        """Process one event; return ``True`` if it was announced."""
        if self._disposed or self.in_grace_period():
            return False

        try:
            key = self.key_fn(event)
        except _MALFORMED as exc:
            logger.warning("%s: dropping malformed event %r (%s)", self.name, event, exc)
            return False

        if key in self.cache:
            return False

        try:
            text = clean_text(self.formatter(event))
        except _MALFORMED as exc:
            logger.warning("%s: dropping malformed event %r (%s)", self.name, event, exc)
            return False

        self.cache.add(key)
        if text:
            self.speech.say(text, interrupt=False)
        return True


def require(event: Any, *fields: str) -> tuple:
    """Return ``event[field]`` for each field or raise :class:`MalformedEventError`."""
    values = []
    for field in fields:
        try:
            value = event[field]
        except (KeyError, TypeError, IndexError):
            raise MalformedEventError(f"event is missing {field!r}") from None
        if value is None:
            raise MalformedEventError(f"event field {field!r} is empty")
        values.append(value)
    return tuple(values)
