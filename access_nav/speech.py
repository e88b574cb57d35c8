"""Speech sinks: the screen reader bridge, a console fallback and a recorder."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .history import AnnouncementHistory
    from .interfaces import SpeechSink

logger = logging.getLogger(__name__)

_SPRITE_TAG = re.compile(r"<sprite\s+name=\"?([^\">]+)\"?\s*>", re.IGNORECASE)
_RICH_TEXT_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Strip game rich-text markup so the screen reader doesn't spell it out."""
    text = _SPRITE_TAG.sub(r" \1 ", text)
    text = _RICH_TEXT_TAG.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


class ScreenReaderSpeech:
    """Speak through the active screen reader via ``accessible_output2``."""

    def __init__(self, output: Any = None) -> None:
        if output is None:
            import accessible_output2.outputs.auto as ao

            output = ao.Auto()
            logger.info("Speech engine initialized")
        self._output = output

    def say(self, text: str, interrupt: bool = True) -> None:
        text = clean_text(text)
        if not text:
            return
        logger.debug("say: %s", text)
        try:
            self._output.speak(text, interrupt=interrupt)
        except Exception:
            # Speech is fire-and-forget; a failing backend must not stall input.
            logger.exception("Speech output failed for %r", text)


class ConsoleSpeech:
    """Print a single line per utterance, suitable for a terminal screen reader."""

    def say(self, text: str, interrupt: bool = True) -> None:
        text = clean_text(text)
        if text:
            print(text, flush=True)


class RecordingSpeech:
    """Forward to ``inner`` and remember every utterance in ``history``."""

    def __init__(self, inner: "SpeechSink", history: "AnnouncementHistory") -> None:
        self.inner = inner
        self.history = history

    def say(self, text: str, interrupt: bool = True) -> None:
        text = clean_text(text)
        if not text:
            return
        self.history.add(text)
        self.inner.say(text, interrupt=interrupt)
