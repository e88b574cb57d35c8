"""Wire the handlers, the dispatch chain and the event announcers together."""

from __future__ import annotations

import logging
import re
import time
from string import Formatter
from typing import Any, Callable, Dict, List, Mapping

from .announcer import AnnouncementDeduplicator, require
from .bindings import navigator_bindings, scanner_bindings
from .config import NavConfig
from .context import GameContext
from .dispatch import KeyDispatchChain
from .history import AnnouncementHistory, HistoryPanel
from .interfaces import UNAVAILABLE, GameDataProvider, KeyHandler, SpeechSink
from .launcher import HotkeyLauncher
from .navigator import TreeNavigator
from .scanner import MapCursor, SpatialScanner
from .speech import RecordingSpeech

logger = logging.getLogger(__name__)


def template(fmt: str) -> Callable[[Any], str]:
    """``str.format`` over an event mapping.

    Every field the template names must be present and not ``None``,
    otherwise :class:`MalformedEventError` is raised.
    """
    names = []
    for _, field_name, _, _ in Formatter().parse(fmt):
        if field_name:
            root = re.split(r"[.\[]", field_name, maxsplit=1)[0]
            if root not in names:
                names.append(root)

    def _render(event: Any) -> str:
        return fmt.format_map(dict(zip(names, require(event, *names))))

    return _render


class Application:
    """Everything one game session needs, built from a :class:`NavConfig`."""

    def __init__(
        self,
        provider: GameDataProvider,
        speech: SpeechSink,
        config: NavConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or NavConfig()
        self.speech = speech
        self.clock = clock
        self.context = GameContext(provider)
        self.history = AnnouncementHistory(self.config.history_size)
        self.cursor = MapCursor()

        nav_keys = navigator_bindings(self.config.navigator_keys)
        self.menu = TreeNavigator(
            self.context, "menu", None, speech,
            levels=2, bindings=nav_keys, name="Menu", empty_message="Menu empty", clock=clock,
        )
        self.object_panel = TreeNavigator(
            self.context, "objects", self.selected_object, speech,
            levels=self.config.object_panel_levels, bindings=nav_keys,
            name="Object panel", empty_message="Nothing selected", clock=clock,
        )
        self.scanner = SpatialScanner(
            self.context, self.cursor, speech, bindings=scanner_bindings(self.config.scanner_keys),
        )
        self.history_panel = HistoryPanel(self.history, speech, clock)
        self.launcher = HotkeyLauncher(
            {
                "menu": self.menu.open,
                "object_panel": self.object_panel.open,
                "scanner": self.open_scanner,
                "history": self.history_panel.open,
            },
            self.config.launcher_keys,
            is_ready=lambda: self.context.ready,
        )

        self.registry: Dict[str, KeyHandler] = {
            "history": self.history_panel,
            "object_panel": self.object_panel,
            "menu": self.menu,
            "scanner": self.scanner,
            "launcher": self.launcher,
        }
        self.chain = KeyDispatchChain.from_registry(self.registry, self.config.handler_order)
        self.announcers: List[AnnouncementDeduplicator] = []
        self.context.on_invalidate(self._close_all)

    # ------------------------------------------------------------ data
    def selected_object(self) -> Any:
        selection = self.context.fetch_snapshot("selection")
        if selection is UNAVAILABLE or not isinstance(selection, Mapping):
            return None
        return selection.get("object")

    def sync_cursor(self) -> None:
        cursor = self.context.fetch_snapshot("cursor")
        if isinstance(cursor, Mapping):
            self.cursor.move_to((float(cursor.get("x", 0)), float(cursor.get("y", 0))))

    def open_scanner(self) -> None:
        if not self.scanner.is_open:
            self.sync_cursor()
        self.scanner.open()

    # ------------------------------------------------------------ scenes
    def enter_scene(self, provider: GameDataProvider | None = None) -> None:
        """Mark the context ready and subscribe the event announcers."""
        self.context.refresh(provider)
        self.sync_cursor()
        self.subscribe_announcers()

    def leave_scene(self) -> None:
        self.context.invalidate()
        self.announcers = []

    def subscribe_announcers(self) -> None:
        recorder = RecordingSpeech(self.speech, self.history)
        for kind, templates in self.config.announcers.items():
            try:
                key_fn, formatter = template(templates["key"]), template(templates["text"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Announcer %r needs valid 'key' and 'text' templates; skipped", kind)
                continue
            announcer = AnnouncementDeduplicator(
                recorder, key_fn, formatter,
                grace_period=self.config.grace_period,
                capacity=self.config.cache_capacity,
                clock=self.clock,
                name=kind,
            )
            announcer.subscribe(self.context.fetch_events(kind))
            self.context.scope(announcer)
            self.announcers.append(announcer)
        logger.info("Subscribed %d announcer(s)", len(self.announcers))

    def _close_all(self) -> None:
        self.history_panel.close(announce=False)
        self.object_panel.close(announce=False)
        self.menu.close(announce=False)
        self.scanner.close(announce=False)

    # ------------------------------------------------------------ input
    def handle_key(self, key: Any, modifiers: Any) -> bool:
        return self.chain.dispatch(key, modifiers)
