from __future__ import annotations

from enum import Enum, Flag, auto
from string import ascii_lowercase


class Key(str, Enum):
    """Physical keys understood by the handlers.

    Values match the ``pynput.keyboard.Key`` member names so raw events can be
    translated by name; letters and digits use their character.
    """

    def _generate_next_value_(name, *_):
        return name

    # navigation
    up        = auto()
    down      = auto()
    left      = auto()
    right     = auto()
    page_up   = auto()
    page_down = auto()
    home      = auto()
    end       = auto()
    esc       = auto()

    # editing / activation
    enter     = auto()
    backspace = auto()
    space     = auto()
    tab       = auto()
    delete    = auto()
    insert    = auto()

    f1  = auto();  f2  = auto();  f3  = auto();  f4  = auto()
    f5  = auto();  f6  = auto();  f7  = auto();  f8  = auto()
    f9  = auto();  f10 = auto();  f11 = auto();  f12 = auto()

    a = auto(); b = auto(); c = auto(); d = auto(); e = auto(); f = auto()
    g = auto(); h = auto(); i = auto(); j = auto(); k = auto(); l = auto()
    m = auto(); n = auto(); o = auto(); p = auto(); q = auto(); r = auto()
    s = auto(); t = auto(); u = auto(); v = auto(); w = auto(); x = auto()
    y = auto(); z = auto()

    digit_0 = "0"; digit_1 = "1"; digit_2 = "2"; digit_3 = "3"; digit_4 = "4"
    digit_5 = "5"; digit_6 = "6"; digit_7 = "7"; digit_8 = "8"; digit_9 = "9"

    @property
    def is_letter(self) -> bool:
        return len(self.value) == 1 and self.value in ascii_lowercase

    @classmethod
    def from_name(cls, name: str) -> "Key | None":
        """Look up a key by value (``"page_up"``, ``"a"``, ``"7"``), case-insensitive."""
        try:
            return cls(name.lower())
        except ValueError:
            return None


class Modifier(Flag):
    NONE  = 0
    CTRL  = auto()
    ALT   = auto()
    SHIFT = auto()

    @property
    def is_plain(self) -> bool:
        """True when neither Ctrl nor Alt is held (Shift alone still types)."""
        return not (self & (Modifier.CTRL | Modifier.ALT))


# Keys that reset type-ahead search.
NAVIGATION_KEYS = frozenset({
    Key.up, Key.down, Key.left, Key.right,
    Key.page_up, Key.page_down, Key.home, Key.end, Key.esc,
})


class NavAction(str, Enum):
    """Logical actions of a hierarchical navigator."""

    def _generate_next_value_(name, *_):
        return name

    up        = auto()
    down      = auto()
    first     = auto()
    last      = auto()
    enter     = auto()
    back      = auto()
    escape    = auto()
    backspace = auto()


class ScanAction(str, Enum):
    """Logical actions of the spatial scanner."""

    def _generate_next_value_(name, *_):
        return name

    prev_category    = auto()
    next_category    = auto()
    prev_subcategory = auto()
    next_subcategory = auto()
    prev_group       = auto()
    next_group       = auto()
    prev_item        = auto()
    next_item        = auto()
    move_cursor      = auto()
    announce_distance = auto()
    rescan           = auto()
    close            = auto()
