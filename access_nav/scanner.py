"""
access_nav/scanner.py
---------------------

Map scanner: a fixed four-level catalog (category → subcategory → group →
item) whose leaf items are ordered by distance from the map cursor.

The catalog is rebuilt from a fresh snapshot on every open and every
explicit rescan; nothing is patched incrementally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .bindings import KeyBindings, scanner_bindings
from .interfaces import UNAVAILABLE, SpeechSink
from .key_types import Key, Modifier, ScanAction
from .nav_utils import Position, clamp_index, compass_direction, euclidean_distance, step_index

logger = logging.getLogger(__name__)

DEFAULT_SUBCATEGORY = "All"


# ------------------------------------------------------------------ #
# catalog
# ------------------------------------------------------------------ #
@dataclass
class ScannedItem:
    name: str
    position: Position
    distance: float
    order: int  # insertion order within the snapshot, the tie-breaker


@dataclass
class ItemGroup:
    name: str
    items: List[ScannedItem] = field(default_factory=list)

    @property
    def nearest(self) -> float:
        return self.items[0].distance if self.items else float("inf")


@dataclass
class Subcategory:
    name: str
    groups: List[ItemGroup] = field(default_factory=list)


@dataclass
class Category:
    name: str
    subcategories: List[Subcategory] = field(default_factory=list)


@dataclass
class ScanCatalog:
    categories: List[Category]
    reference: Position

    def item_total(self) -> int:
        return sum(
            len(group.items)
            for cat in self.categories
            for sub in cat.subcategories
            for group in sub.groups
        )


def _position(raw: Any) -> Position:
    if isinstance(raw, Mapping):
        return float(raw["x"]), float(raw["y"])
    x, y = raw
    return float(x), float(y)


def _records(snapshot: Mapping[str, Any], key: str) -> Sequence[Any]:
    records = snapshot.get(key) or []
    if not isinstance(records, (list, tuple)):
        logger.warning("Ignoring scan %s: expected a list, got %r", key, records)
        return []
    return records


def build_catalog(
    snapshot: Mapping[str, Any],
    reference: Position,
    *,
    exclude_reference: bool = True,
) -> ScanCatalog:
    """Project a scan snapshot into a :class:`ScanCatalog`.

    ``snapshot["entities"]`` is a list of ``{"name", "category",
    "subcategory"?, "group"?, "position"}`` records; the optional
    ``snapshot["categories"]`` skeleton (``[{"name", "subcategories"}]``)
    fixes the category order and lets empty categories exist.
    """
    # category -> subcategory -> group -> [(order, name, position)]
    tree: Dict[str, Dict[str, Dict[str, List[Tuple[int, str, Position]]]]] = {}

    for cat in _records(snapshot, "categories"):
        if not isinstance(cat, Mapping) or not cat.get("name"):
            logger.warning("Skipping malformed scan category %r", cat)
            continue
        subs = tree.setdefault(str(cat["name"]), {})
        sub_names = cat.get("subcategories") or []
        if not isinstance(sub_names, (list, tuple)):
            logger.warning("Ignoring malformed subcategories of %r: %r", cat["name"], sub_names)
            sub_names = []
        for sub in sub_names:
            subs.setdefault(str(sub), {})

    for order, entity in enumerate(_records(snapshot, "entities")):
        try:
            name = str(entity["name"])
            category = str(entity["category"])
            position = _position(entity["position"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed scan entity %r (%s)", entity, exc)
            continue
        subcategory = str(entity.get("subcategory") or DEFAULT_SUBCATEGORY)
        group = str(entity.get("group") or name)
        (
            tree.setdefault(category, {})
            .setdefault(subcategory, {})
            .setdefault(group, [])
            .append((order, name, position))
        )

    rx, ry = float(reference[0]), float(reference[1])
    categories: List[Category] = []
    for cat_name, subs in tree.items():
        subcategories: List[Subcategory] = []
        for sub_name, groups in subs.items():
            built = [
                g for g in (_build_group(name, entries, rx, ry, exclude_reference)
                            for name, entries in groups.items())
                if g.items
            ]
            # nearest group first; sorted() is stable so ties keep insertion order
            subcategories.append(Subcategory(sub_name, sorted(built, key=lambda g: g.nearest)))
        categories.append(Category(cat_name, subcategories))
    return ScanCatalog(categories, (rx, ry))


def _build_group(
    name: str,
    entries: Sequence[Tuple[int, str, Position]],
    rx: float,
    ry: float,
    exclude_reference: bool,
) -> ItemGroup:
    positions = np.array([pos for _, _, pos in entries], dtype=float).reshape(-1, 2)
    distances = np.hypot(positions[:, 0] - rx, positions[:, 1] - ry)
    keep = np.flatnonzero(distances > 0) if exclude_reference else np.arange(len(entries))
    ranked = keep[np.argsort(distances[keep], kind="stable")]
    return ItemGroup(
        name,
        [
            ScannedItem(entries[i][1], entries[i][2], float(distances[i]), entries[i][0])
            for i in ranked
        ],
    )


# ------------------------------------------------------------------ #
# cursor
# ------------------------------------------------------------------ #
@dataclass
class MapCursor:
    """The navigation cursor the scanner measures from."""

    x: float = 0
    y: float = 0

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    def move_to(self, position: Position) -> None:
        self.x, self.y = position


def format_distance(distance: float) -> str:
    rounded = round(distance, 1)
    text = str(int(rounded)) if rounded == int(rounded) else f"{rounded:.1f}"
    return f"{text} tile" if text == "1" else f"{text} tiles"


# ------------------------------------------------------------------ #
# handler
# ------------------------------------------------------------------ #
class SpatialScanner:
    """Key handler stepping through the scan catalog."""

    def __init__(
        self,
        context: Any,
        cursor: MapCursor,
        speech: SpeechSink,
        *,
        bindings: KeyBindings[ScanAction] | None = None,
        kind: str = "scan",
        name: str = "Scanner",
        exclude_reference: bool = True,
    ) -> None:
        self.context = context
        self.cursor = cursor
        self.speech = speech
        self.bindings = bindings or scanner_bindings()
        self.kind = kind
        self.name = name
        self.exclude_reference = exclude_reference

        self.catalog: Optional[ScanCatalog] = None
        self.category_index = 0
        self.subcategory_index = 0
        self.group_index = 0
        self.item_index = 0
        self._open = False

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
        self.category_index = self.subcategory_index = self.group_index = self.item_index = 0
        if self.rebuild():
            self._announce_from_category()
        logger.info("%s opened", self.name)

    def close(self, *, announce: bool = True) -> None:
        if not self._open:
            return
        self._open = False
        self.catalog = None
        if announce:
            self.speech.say(f"{self.name} closed")
        logger.info("%s closed", self.name)

    def rebuild(self, reference: Position | None = None) -> bool:
        """Replace the catalog from a fresh snapshot; ``False`` if unavailable.

        Items are measured from ``reference``, the map cursor by default.
        """
        if reference is None:
            reference = self.cursor.position
        snapshot = self.context.fetch_snapshot(self.kind, None)
        if snapshot is UNAVAILABLE or not isinstance(snapshot, Mapping):
            self.catalog = ScanCatalog([], reference)
            self.category_index = self.subcategory_index = self.group_index = self.item_index = 0
            self.speech.say(f"{self.name} unavailable")
            return False
        self.catalog = build_catalog(snapshot, reference, exclude_reference=self.exclude_reference)
        self._clamp()
        logger.debug(
            "%s rebuilt: %d categories, %d items from %s",
            self.name, len(self.catalog.categories), self.catalog.item_total(), reference,
        )
        return True

    # ------------------------------------------------------------ selection
    def current_category(self) -> Category | None:
        cats = self.catalog.categories if self.catalog else []
        return cats[self.category_index] if cats else None

    def current_subcategory(self) -> Subcategory | None:
        cat = self.current_category()
        if cat is None or not cat.subcategories:
            return None
        return cat.subcategories[self.subcategory_index]

    def current_group(self) -> ItemGroup | None:
        sub = self.current_subcategory()
        if sub is None or not sub.groups:
            return None
        return sub.groups[self.group_index]

    def current_item(self) -> ScannedItem | None:
        group = self.current_group()
        if group is None or not group.items:
            return None
        return group.items[self.item_index]

    def _clamp(self) -> None:
        cats = self.catalog.categories if self.catalog else []
        self.category_index = max(clamp_index(self.category_index, len(cats)), 0)
        cat = self.current_category()
        subs = cat.subcategories if cat else []
        self.subcategory_index = max(clamp_index(self.subcategory_index, len(subs)), 0)
        sub = self.current_subcategory()
        groups = sub.groups if sub else []
        self.group_index = max(clamp_index(self.group_index, len(groups)), 0)
        group = self.current_group()
        items = group.items if group else []
        self.item_index = max(clamp_index(self.item_index, len(items)), 0)

    # ------------------------------------------------------------ navigation
    def change_category(self, delta: int) -> None:
        count = len(self.catalog.categories) if self.catalog else 0
        if count == 0:
            self._announce_empty()
            return
        self.category_index = step_index(self.category_index, delta, count)
        self.subcategory_index = self.group_index = self.item_index = 0
        self._announce_from_category()

    def change_subcategory(self, delta: int) -> None:
        cat = self.current_category()
        if cat is None or not cat.subcategories:
            self.speech.say("No subcategories")
            return
        self.subcategory_index = step_index(self.subcategory_index, delta, len(cat.subcategories))
        self.group_index = self.item_index = 0
        self._announce_from_subcategory()

    def change_group(self, delta: int) -> None:
        sub = self.current_subcategory()
        if sub is None or not sub.groups:
            self._announce_empty()
            return
        self.group_index = step_index(self.group_index, delta, len(sub.groups))
        self.item_index = 0
        self._announce_item()

    def change_item(self, delta: int) -> None:
        group = self.current_group()
        if group is None or not group.items:
            self._announce_empty()
            return
        self.item_index = step_index(self.item_index, delta, len(group.items))
        self._announce_item()

    def move_cursor_to_item(self) -> None:
        item = self.current_item()
        if item is None:
            self._announce_empty()
            return
        self.cursor.move_to(item.position)
        self.speech.say(f"Moved to {item.name}")

    def announce_distance(self) -> None:
        item = self.current_item()
        if item is None:
            self._announce_empty()
            return
        here = self.cursor.position
        distance = euclidean_distance(here, item.position)
        if distance == 0:
            self.speech.say("here")
            return
        direction = compass_direction(item.position[0] - here[0], item.position[1] - here[1])
        self.speech.say(f"{format_distance(distance)} {direction}")

    # ------------------------------------------------------------ keys
    def process_key(self, key: Key, modifiers: Modifier) -> bool:
        if not self._open:
            return False
        action = self.bindings.resolve(key, modifiers)
        if action is None:
            return True

        if action is ScanAction.close:
            self.close()
            return False
        if action is ScanAction.rescan:
            if self.rebuild():
                self._announce_from_category()
            return True

        step = {
            ScanAction.prev_category: (self.change_category, -1),
            ScanAction.next_category: (self.change_category, 1),
            ScanAction.prev_subcategory: (self.change_subcategory, -1),
            ScanAction.next_subcategory: (self.change_subcategory, 1),
            ScanAction.prev_group: (self.change_group, -1),
            ScanAction.next_group: (self.change_group, 1),
            ScanAction.prev_item: (self.change_item, -1),
            ScanAction.next_item: (self.change_item, 1),
        }.get(action)
        if step is not None:
            fn, delta = step
            fn(delta)
        elif action is ScanAction.move_cursor:
            self.move_cursor_to_item()
        elif action is ScanAction.announce_distance:
            self.announce_distance()
        return True

    # ------------------------------------------------------------ speech
    def _position_text(self) -> str | None:
        group = self.current_group()
        if group is None or not group.items:
            return None
        return f"{group.name}, {self.item_index + 1} of {len(group.items)}"

    def _announce_item(self) -> None:
        text = self._position_text()
        if text is None:
            self._announce_empty()
        else:
            self.speech.say(text)

    def _announce_from_subcategory(self) -> None:
        sub = self.current_subcategory()
        text = self._position_text()
        self.speech.say(f"{sub.name}, {text}" if text else f"{sub.name}, none")

    def _announce_from_category(self) -> None:
        cat = self.current_category()
        if cat is None:
            self._announce_empty()
            return
        sub = self.current_subcategory()
        text = self._position_text()
        if sub is None or text is None:
            self.speech.say(f"{cat.name}, none")
        else:
            self.speech.say(f"{cat.name}, {sub.name}, {text}")

    def _announce_empty(self) -> None:
        cat = self.current_category()
        self.speech.say(f"No {cat.name.lower()}" if cat else "No items")
