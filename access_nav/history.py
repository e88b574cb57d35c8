"""Recent announcements and the panel that reads them back."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Deque, List

from .interfaces import SpeechSink
from .key_types import Key, Modifier
from .nav_utils import step_index
from .type_ahead import TypeAheadSearch

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 10


class AnnouncementHistory:
    """Bounded list of past announcements, newest first."""

    def __init__(self, size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._messages: Deque[str] = deque(maxlen=size)

    def add(self, message: str) -> None:
        if message:
            self._messages.appendleft(message)

    def messages(self) -> List[str]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)


class HistoryPanel:
    """Single-list handler over :class:`AnnouncementHistory`.

    Up/Down step, Home/End jump, letters search, Backspace edits the search,
    Esc or H closes. The messages are copied on open so new announcements
    don't shift the cursor while reading.
    """

    def __init__(
        self,
        history: AnnouncementHistory,
        speech: SpeechSink,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.history = history
        self.speech = speech
        self.search = TypeAheadSearch(clock)
        self.messages: List[str] = []
        self.index = 0
        self._open = False

    def is_active(self) -> bool:
        return self._open

    def open(self) -> None:
        if self._open:
            return
        self.messages = self.history.messages()
        self.index = 0
        self.search.clear()
        self._open = True
        if not self.messages:
            self.speech.say("Announcement history, empty")
        else:
            self.speech.say(f"Announcement history, {len(self.messages)} items. {self._line()}")

    def close(self, *, announce: bool = True) -> None:
        if not self._open:
            return
        self._open = False
        self.messages = []
        self.search.clear()
        if announce:
            self.speech.say("Announcement history closed")

    def process_key(self, key: Key, modifiers: Modifier) -> bool:
        if not self._open:
            return False
        self.search.clear_on_navigation_key(key)

        if key in (Key.esc, Key.h):
            self.close()
        elif not self.messages:
            self.speech.say("Announcement history, empty")
        elif key is Key.up:
            self.index = step_index(self.index, -1, len(self.messages))
            self.speech.say(self._line())
        elif key is Key.down:
            self.index = step_index(self.index, 1, len(self.messages))
            self.speech.say(self._line())
        elif key is Key.home:
            self.index = 0
            self.speech.say(self._line())
        elif key is Key.end:
            self.index = len(self.messages) - 1
            self.speech.say(self._line())
        elif key is Key.backspace:
            if self.search.remove_char():
                if self.search.has_buffer:
                    self._run_search()
                else:
                    self.speech.say("Search cleared")
        elif key.is_letter and modifiers.is_plain:
            self.search.add_char(key.value)
            self._run_search()
        return True

    def _line(self) -> str:
        return self.messages[self.index]

    def _run_search(self) -> None:
        match = self.search.find_match(len(self.messages), self.messages.__getitem__)
        if match < 0:
            self.speech.say(f"No match for {self.search.buffer}")
            return
        self.index = match
        self.speech.say(self._line())
