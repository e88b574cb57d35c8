"""Keyboard feed: pynput listener thread → single-threaded tick loop."""

from __future__ import annotations

import logging
import threading
from functools import partial
from queue import Empty, SimpleQueue
from typing import Any, Callable, Optional

from .dispatch import KeyDispatchChain
from .key_types import Key, Modifier
from .modifier_state import ModifierState

logger = logging.getLogger(__name__)

Task = Callable[[], Any]


def translate_key(raw: Any) -> Optional[Key]:
    """Map a ``pynput`` key object onto :class:`Key`; ``None`` if unsupported."""
    name = getattr(raw, "name", None)
    if isinstance(name, str):
        return Key.from_name(name)

    char = getattr(raw, "char", None)
    if char:
        if len(char) == 1 and ord(char) < 32:
            # Ctrl+letter arrives as a control character on some platforms
            char = chr(ord(char) + 96)
        return Key.from_name(char.lower())

    vk = getattr(raw, "vk", None)
    if isinstance(vk, int) and 65 <= vk <= 90:
        return Key.from_name(chr(vk).lower())
    return None


class TickLoop:
    """Run posted tasks one at a time on the thread that calls :meth:`drain`.

    Key events and game events are both posted here, so a dispatch and an
    announcement never interleave.
    """

    def __init__(self) -> None:
        self._queue: SimpleQueue[Task] = SimpleQueue()

    def post(self, task: Task) -> None:
        self._queue.put(task)

    def drain(self) -> int:
        """Run every queued task; return how many ran."""
        ran = 0
        while True:
            try:
                task = self._queue.get_nowait()
            except Empty:
                return ran
            try:
                task()
            except Exception:
                logger.exception("Task %r failed", task)
            ran += 1

    def run(self, stop: threading.Event, interval: float = 0.01) -> None:
        while not stop.is_set():
            self.drain()
            stop.wait(interval)
        self.drain()


class KeyboardInput:
    """Feed physical key presses into a :class:`KeyDispatchChain`.

    The pynput callbacks only record modifiers and enqueue; dispatch happens
    when the :class:`TickLoop` is drained.
    """

    def __init__(
        self,
        chain: KeyDispatchChain,
        loop: TickLoop,
        forward: Callable[[Key, Modifier], None] | None = None,
    ) -> None:
        self.chain = chain
        self.loop = loop
        self.forward = forward
        self.modifiers = ModifierState()
        self._listener: Any = None

    # listener thread
    def on_press(self, raw: Any) -> None:
        if self.modifiers.press(getattr(raw, "name", None)):
            return
        key = translate_key(raw)
        if key is None:
            return
        self.loop.post(partial(self.dispatch, key, self.modifiers.flags))

    def on_release(self, raw: Any) -> None:
        self.modifiers.release(getattr(raw, "name", None))

    # tick thread
    def dispatch(self, key: Key, modifiers: Modifier) -> bool:
        consumed = self.chain.dispatch(key, modifiers)
        if not consumed and self.forward is not None:
            self.forward(key, modifiers)
        return consumed

    def start(self) -> None:
        if self._listener is not None:
            return
        from pynput import keyboard

        self._listener = keyboard.Listener(on_press=self.on_press, on_release=self.on_release)
        self._listener.start()
        logger.info("Keyboard listener started")

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            self.modifiers.clear()
