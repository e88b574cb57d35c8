"""Type-ahead search buffer used by the list-style handlers."""

from __future__ import annotations

import time
from typing import Callable, Optional

from .key_types import NAVIGATION_KEYS, Key

NameLookup = Callable[[int], Optional[str]]


class TypeAheadSearch:
    """Accumulate typed letters so a long list can be jumped by name.

    The buffer only ever empties on a navigation key, a backspace past its
    start, or an explicit :meth:`clear`; there is no idle timeout.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._buffer = ""
        self.last_modified: float | None = None

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def has_buffer(self) -> bool:
        return bool(self._buffer)

    def add_char(self, c: str) -> str:
        self._buffer += c.lower()
        self.last_modified = self._clock()
        return self._buffer

    def remove_char(self) -> bool:
        """Drop the last character; ``False`` if there was nothing to drop."""
        if not self._buffer:
            return False
        self._buffer = self._buffer[:-1]
        self.last_modified = self._clock()
        return True

    def clear(self) -> None:
        if self._buffer:
            self.last_modified = self._clock()
        self._buffer = ""

    def clear_on_navigation_key(self, key: Key) -> bool:
        if key in NAVIGATION_KEYS and self._buffer:
            self.clear()
            return True
        return False

    def find_match(self, count: int, name_lookup: NameLookup) -> int:
        """Return the lowest index whose name starts with the buffer, or -1."""
        if not self._buffer or count <= 0:
            return -1
        prefix = self._buffer.casefold()
        for i in range(count):
            name = name_lookup(i)
            if name and name.casefold().startswith(prefix):
                return i
        return -1
