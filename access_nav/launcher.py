"""Hotkeys that open the navigators; every other key goes to the game."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Mapping

from .bindings import KeyCombo, parse_combo
from .key_types import Key, Modifier

logger = logging.getLogger(__name__)

DEFAULT_LAUNCHER_BINDINGS: Dict[str, list[str]] = {
    "menu": ["f1"],
    "object_panel": ["f2"],
    "scanner": ["f3"],
    "history": ["alt+h"],
}


class HotkeyLauncher:
    """Lowest-priority handler: map hotkeys to ``open`` callables.

    Unlike the navigators this handler passes unknown keys through, since it
    is active whenever the game is and must not swallow game input.
    """

    def __init__(
        self,
        targets: Mapping[str, Callable[[], None]],
        bindings: Mapping[str, Iterable[str]] | None = None,
        is_ready: Callable[[], bool] = lambda: True,
    ) -> None:
        self._is_ready = is_ready
        self._targets: Dict[KeyCombo, tuple[str, Callable[[], None]]] = {}
        for name, combos in (bindings or DEFAULT_LAUNCHER_BINDINGS).items():
            if name not in targets:
                logger.warning("Launcher hotkey for unknown target %r ignored", name)
                continue
            for text in combos:
                self._targets[parse_combo(text)] = (name, targets[name])

    def is_active(self) -> bool:
        return self._is_ready()

    def process_key(self, key: Key, modifiers: Modifier) -> bool:
        target = self._targets.get(KeyCombo(key, modifiers))
        if target is None:
            return False
        name, open_fn = target
        logger.debug("Launching %s", name)
        open_fn()
        return True
