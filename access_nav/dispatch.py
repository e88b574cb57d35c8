"""Route each keystroke to the first handler that wants it."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence, Tuple

from .interfaces import KeyHandler
from .key_types import Key, Modifier

logger = logging.getLogger(__name__)


class KeyDispatchChain:
    """Ordered, immutable list of handlers, highest priority first.

    A key goes to every *active* handler in turn until one returns ``True``.
    If none does, :meth:`dispatch` returns ``False`` and the caller forwards
    the key to the game untouched.
    """

    def __init__(self, handlers: Iterable[KeyHandler]) -> None:
        self._handlers: Tuple[KeyHandler, ...] = tuple(handlers)

    @classmethod
    def from_registry(
        cls, registry: Mapping[str, KeyHandler], order: Sequence[str]
    ) -> "KeyDispatchChain":
        missing = [name for name in order if name not in registry]
        if missing:
            raise KeyError(f"unknown handler(s) in priority order: {', '.join(missing)}")
        unused = sorted(set(registry) - set(order))
        if unused:
            logger.warning("Handlers not in priority order, never dispatched: %s", ", ".join(unused))
        return cls(registry[name] for name in order)

    @property
    def handlers(self) -> Tuple[KeyHandler, ...]:
        return self._handlers

    def active_handlers(self) -> list[KeyHandler]:
        return [h for h in self._handlers if self._is_active(h)]

    def dispatch(self, key: Key, modifiers: Modifier = Modifier.NONE) -> bool:
        """Offer ``key`` down the chain; ``True`` means it was consumed."""
        for handler in self._handlers:
            if not self._is_active(handler):
                continue
            try:
                consumed = handler.process_key(key, modifiers)
            except Exception:
                # Eat the keystroke rather than leak it into the game.
                logger.exception(
                    "%s failed on %s (%s); treating key as consumed",
                    type(handler).__name__, key.value, modifiers,
                )
                return True
            if consumed:
                logger.debug("%s consumed by %s", key.value, type(handler).__name__)
                return True
        logger.debug("%s not consumed, forwarding to game", key.value)
        return False

    @staticmethod
    def _is_active(handler: KeyHandler) -> bool:
        try:
            return bool(handler.is_active())
        except Exception:
            logger.exception("%s.is_active() failed; skipping", type(handler).__name__)
            return False
