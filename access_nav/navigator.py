"""
access_nav/navigator.py
-----------------------

Generic cursor over 2 to 4 nested levels of named items.

A menu is two levels (category → item); an object panel is up to four
(section → item → sub-item → sub-sub-item) and may expose fewer levels for a
particular object. Subclasses only describe the data through a handful of
hooks; the key handling, wrapping, type-ahead and open/close lifecycle live
here.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from .bindings import KeyBindings, navigator_bindings
from .interfaces import UNAVAILABLE, SpeechSink
from .key_types import Key, Modifier, NavAction
from .nav_utils import EMPTY_INDEX, step_index
from .type_ahead import NameLookup, TypeAheadSearch

logger = logging.getLogger(__name__)

Path = Tuple[int, ...]

MIN_LEVELS = 2
MAX_LEVELS = 4


class LoadState(Enum):
    UNINITIALIZED = auto()
    LOADING = auto()
    READY = auto()
    UNAVAILABLE = auto()


@dataclass
class Level:
    """One level of the cursor stack. ``index`` is -1 exactly when empty."""

    count: int
    index: int = EMPTY_INDEX
    name_lookup: Optional[NameLookup] = None

    @classmethod
    def entered(cls, count: int, name_lookup: Optional[NameLookup] = None) -> "Level":
        count = max(count, 0)
        return cls(count, 0 if count else EMPTY_INDEX, name_lookup)

    @property
    def empty(self) -> bool:
        return self.count == 0


@dataclass
class NavigatorState:
    levels: List[Level] = field(default_factory=list)

    @property
    def depth(self) -> int:
        """Zero-based index of the level the cursor is on (-1 before loading)."""
        return len(self.levels) - 1

    @property
    def current(self) -> Level:
        return self.levels[-1]

    @property
    def path(self) -> Path:
        return tuple(level.index for level in self.levels)

    def push(self, level: Level) -> None:
        self.levels.append(level)

    def pop(self) -> Level:
        return self.levels.pop()

    def reset(self) -> None:
        self.levels.clear()


class HierarchicalNavigator:
    """Key handler implementing the N-level category/item cursor.

    Subclasses override :meth:`refresh`, :meth:`clear_data`,
    :meth:`item_count` and :meth:`item_name`; :meth:`describe`,
    :meth:`has_child_level` and :meth:`activate` are optional.
    """

    empty_message = "No items"
    no_items_message = "No items in this category"

    def __init__(
        self,
        speech: SpeechSink,
        *,
        levels: int = MIN_LEVELS,
        bindings: KeyBindings[NavAction] | None = None,
        name: str = "Menu",
        empty_message: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not MIN_LEVELS <= levels <= MAX_LEVELS:
            raise ValueError(f"levels must be between {MIN_LEVELS} and {MAX_LEVELS} (got {levels})")
        self.speech = speech
        self.levels = levels
        self.bindings = bindings or navigator_bindings()
        self.name = name
        if empty_message is not None:
            self.empty_message = empty_message
        self.state = NavigatorState()
        self.search = TypeAheadSearch(clock)
        self.load_state = LoadState.UNINITIALIZED
        self._open = False

    # ------------------------------------------------------------ hooks
    def refresh(self) -> bool:
        """Load data from the game; ``False`` if it is unavailable."""
        return True

    def clear_data(self) -> None:
        """Drop whatever :meth:`refresh` loaded."""

    def item_count(self, path: Path) -> int:
        """Number of children under ``path`` (``()`` is the top level)."""
        raise NotImplementedError

    def item_name(self, path: Path) -> str | None:
        return None

    def describe(self, path: Path) -> str:
        return self.item_name(path) or ""

    def has_child_level(self, path: Path) -> bool:
        return True

    def activate(self, path: Path) -> None:
        """Enter pressed on an item with no level below it."""
        self._announce_current()

    @property
    def title(self) -> str:
        return self.name

    # ------------------------------------------------------------ lifecycle
    def is_active(self) -> bool:
        return self._open

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if self._open:
            return
        self._open = True
        self.search.clear()
        self._ensure_loaded()
        logger.info("%s opened (%s)", self.name, self.load_state.name.lower())
        if self.state.current.empty:
            self.speech.say(f"{self.title}, {self.empty_message}")
        else:
            self.speech.say(f"{self.title}, {self.describe(self.state.path)}")

    def close(self, *, clear: bool = True, announce: bool = True) -> None:
        """Close the navigator; ``clear=False`` keeps the loaded data and cursor."""
        if not self._open:
            return
        self._open = False
        self.search.clear()
        if clear:
            self.invalidate()
        if announce:
            self.speech.say(f"{self.name} closed")
        logger.info("%s closed", self.name)

    def invalidate(self) -> None:
        """Forget loaded data so the next interaction reloads it."""
        self.clear_data()
        self.state.reset()
        self.load_state = LoadState.UNINITIALIZED

    def _ensure_loaded(self) -> None:
        if self.load_state in (LoadState.READY, LoadState.UNAVAILABLE):
            return
        self.load_state = LoadState.LOADING
        try:
            available = self.refresh()
        except Exception:
            logger.exception("%s: refresh failed; opening empty", self.name)
            self.clear_data()
            available = False
        self.state.reset()
        if available:
            self.load_state = LoadState.READY
            self.state.push(self._enter_level(()))
        else:
            self.load_state = LoadState.UNAVAILABLE
            self.state.push(Level.entered(0))
            logger.info("%s: game data unavailable", self.name)

    def _enter_level(self, parent: Path) -> Level:
        return Level.entered(
            self.item_count(parent),
            lambda i, parent=parent: self.item_name(parent + (i,)),
        )

    # ------------------------------------------------------------ keys
    def process_key(self, key: Key, modifiers: Modifier) -> bool:
        if not self._open:
            return False
        self._ensure_loaded()
        self.search.clear_on_navigation_key(key)

        action = self.bindings.resolve(key, modifiers)
        if action is None:
            if key.is_letter and modifiers.is_plain:
                self._search_char(key.value)
            # consume everything else while open
            return True

        if action is NavAction.up:
            self.move(-1)
        elif action is NavAction.down:
            self.move(1)
        elif action is NavAction.first:
            self.jump(0)
        elif action is NavAction.last:
            self.jump(-1)
        elif action is NavAction.enter:
            self.enter()
        elif action is NavAction.backspace:
            self._search_backspace()
        elif action in (NavAction.back, NavAction.escape):
            return self.back()
        return True

    # ------------------------------------------------------------ navigation
    def move(self, delta: int) -> None:
        level = self.state.current
        if level.empty:
            self._announce_current()
            return
        level.index = step_index(level.index, delta, level.count)
        self._announce_current()

    def jump(self, index: int) -> None:
        level = self.state.current
        if not level.empty:
            level.index = index % level.count
        self._announce_current()

    def enter(self) -> None:
        level = self.state.current
        if level.empty:
            self._announce_current()
            return
        path = self.state.path
        if self.state.depth + 1 < self.levels and self.has_child_level(path):
            self.state.push(self._enter_level(path))
            self._announce_current()
        else:
            self.activate(path)

    def back(self) -> bool:
        """Go up one level; at the top, close and let the key through."""
        if self.state.depth > 0:
            self.state.pop()
            self.search.clear()
            self._announce_current()
            return True
        self.close()
        return False

    # ------------------------------------------------------------ type-ahead
    def _search_char(self, c: str) -> None:
        self.search.add_char(c)
        self._run_search()

    def _search_backspace(self) -> None:
        if not self.search.remove_char():
            return
        if not self.search.has_buffer:
            self.speech.say("Search cleared")
            return
        self._run_search()

    def _run_search(self) -> None:
        level = self.state.current
        match = -1
        if level.name_lookup is not None:
            match = self.search.find_match(level.count, level.name_lookup)
        if match < 0:
            self.speech.say(f"No match for {self.search.buffer}")
            logger.debug("%s search %r found no match", self.name, self.search.buffer)
            return
        level.index = match
        logger.debug("%s search %r matched index %d", self.name, self.search.buffer, match)
        self._announce_current()

    # ------------------------------------------------------------ speech
    def _announce_current(self) -> None:
        level = self.state.current
        if level.empty:
            self.speech.say(self.empty_message if self.state.depth == 0 else self.no_items_message)
        else:
            self.speech.say(self.describe(self.state.path))


# ---------------------------------------------------------------------- #
# snapshot-backed navigator
# ---------------------------------------------------------------------- #
@dataclass
class TreeNode:
    """``children is None`` means the node has no level below it at all."""

    name: str
    value: str | None = None
    children: Optional[List["TreeNode"]] = None

    @property
    def label(self) -> str:
        return f"{self.name}, {self.value}" if self.value not in (None, "") else self.name


def parse_tree(items: Sequence[Any]) -> List[TreeNode]:
    """Build :class:`TreeNode` objects from ``{"name", "value", "items"}`` dicts.

    Plain strings are accepted as leaf nodes; entries without a name are
    skipped.
    """
    nodes: List[TreeNode] = []
    for raw in items:
        if isinstance(raw, str):
            nodes.append(TreeNode(raw))
            continue
        if not isinstance(raw, Mapping) or not raw.get("name"):
            logger.warning("Skipping malformed tree entry %r", raw)
            continue
        children = raw.get("items")
        value = raw.get("value")
        nodes.append(
            TreeNode(
                str(raw["name"]),
                None if value is None else str(value),
                None if children is None else parse_tree(children),
            )
        )
    return nodes


class TreeNavigator(HierarchicalNavigator):
    """Navigator over a nested snapshot read from the game context.

    Used for menus (``levels=2``) and object panels (``levels`` up to 4).
    ``ident`` may be a callable so the object is looked up at refresh time.
    """

    def __init__(
        self,
        context: Any,
        kind: str,
        ident: Any,
        speech: SpeechSink,
        *,
        on_activate: Callable[[TreeNode, Path], None] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(speech, **kwargs)
        self.context = context
        self.kind = kind
        self.ident = ident
        self.on_activate = on_activate
        self.roots: List[TreeNode] = []
        self._title: str | None = None

    @property
    def title(self) -> str:
        return self._title or self.name

    def refresh(self) -> bool:
        if callable(self.ident):
            ident = self.ident()
            if ident is None:
                # nothing selected
                self.roots = []
                return False
        else:
            ident = self.ident
        snapshot = self.context.fetch_snapshot(self.kind, ident)
        if snapshot is UNAVAILABLE or snapshot is None:
            self.roots = []
            return False
        self._title = snapshot.get("title")
        self.roots = parse_tree(snapshot.get("items", []))
        logger.debug("%s loaded %d top-level entries", self.name, len(self.roots))
        return True

    def clear_data(self) -> None:
        self.roots = []
        self._title = None

    def node(self, path: Path) -> TreeNode:
        nodes = self.roots
        node = None
        for index in path:
            node = nodes[index]
            nodes = node.children or []
        if node is None:
            raise IndexError("empty path has no node")
        return node

    def item_count(self, path: Path) -> int:
        if not path:
            return len(self.roots)
        return len(self.node(path).children or [])

    def item_name(self, path: Path) -> str | None:
        return self.node(path).name

    def describe(self, path: Path) -> str:
        return self.node(path).label

    def has_child_level(self, path: Path) -> bool:
        return self.node(path).children is not None

    def activate(self, path: Path) -> None:
        if self.on_activate is not None:
            self.on_activate(self.node(path), path)
        else:
            super().activate(path)
