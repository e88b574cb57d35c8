"""Key combos and the per-handler tables mapping them to logical actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Iterable, Mapping, Type, TypeVar

from .key_types import Key, Modifier, NavAction, ScanAction

A = TypeVar("A")

_MODIFIER_NAMES = {
    "ctrl": Modifier.CTRL,
    "control": Modifier.CTRL,
    "alt": Modifier.ALT,
    "shift": Modifier.SHIFT,
}


@dataclass(frozen=True)
class KeyCombo:
    key: Key
    modifiers: Modifier = Modifier.NONE

    def __str__(self) -> str:
        parts = [
            name for name, flag in (("ctrl", Modifier.CTRL), ("alt", Modifier.ALT), ("shift", Modifier.SHIFT))
            if flag in self.modifiers
        ]
        parts.append(self.key.value)
        return "+".join(parts)


def parse_combo(text: str) -> KeyCombo:
    """Parse ``"ctrl+page_up"`` style strings into a :class:`KeyCombo`."""
    parts = [p.strip().lower() for p in text.split("+")]
    if not parts or not parts[-1]:
        raise ValueError(f"empty key combo (got {text!r})")
    mods = Modifier.NONE
    for part in parts[:-1]:
        try:
            mods |= _MODIFIER_NAMES[part]
        except KeyError:
            raise ValueError(f"unknown modifier {part!r} in combo {text!r}") from None
    key = Key.from_name(parts[-1])
    if key is None:
        raise ValueError(f"unknown key {parts[-1]!r} in combo {text!r}")
    return KeyCombo(key, mods)


class KeyBindings(Generic[A]):
    """Exact-match lookup from a key combo to a logical action."""

    def __init__(self, table: Mapping[A, Iterable[str | KeyCombo]]) -> None:
        self._lookup: Dict[KeyCombo, A] = {}
        for action, combos in table.items():
            for combo in combos:
                if isinstance(combo, str):
                    combo = parse_combo(combo)
                if combo in self._lookup and self._lookup[combo] != action:
                    raise ValueError(
                        f"{combo} is bound to both {self._lookup[combo]} and {action}"
                    )
                self._lookup[combo] = action

    @classmethod
    def from_config(
        cls,
        action_type: Type[A],
        defaults: Mapping[A, Iterable[str]],
        overrides: Mapping[str, Iterable[str]] | None = None,
    ) -> "KeyBindings[A]":
        """Merge string-keyed overrides from the config file over ``defaults``."""
        table: Dict[A, Iterable[str]] = dict(defaults)
        for name, combos in (overrides or {}).items():
            try:
                action = action_type(name)  # type: ignore[call-arg]
            except ValueError:
                raise ValueError(f"unknown action {name!r} for {action_type.__name__}") from None
            table[action] = list(combos)
        return cls(table)

    def resolve(self, key: Key, modifiers: Modifier = Modifier.NONE) -> A | None:
        return self._lookup.get(KeyCombo(key, modifiers))

    def combos_for(self, action: A) -> list[KeyCombo]:
        return [combo for combo, bound in self._lookup.items() if bound == action]


DEFAULT_NAVIGATOR_BINDINGS: Dict[NavAction, list[str]] = {
    NavAction.up: ["up"],
    NavAction.down: ["down"],
    NavAction.first: ["home"],
    NavAction.last: ["end"],
    NavAction.enter: ["enter", "right"],
    NavAction.back: ["left"],
    NavAction.escape: ["esc"],
    NavAction.backspace: ["backspace"],
}

DEFAULT_SCANNER_BINDINGS: Dict[ScanAction, list[str]] = {
    ScanAction.prev_category: ["ctrl+page_up"],
    ScanAction.next_category: ["ctrl+page_down"],
    ScanAction.prev_subcategory: ["shift+page_up"],
    ScanAction.next_subcategory: ["shift+page_down"],
    ScanAction.prev_group: ["page_up"],
    ScanAction.next_group: ["page_down"],
    ScanAction.prev_item: ["alt+page_up"],
    ScanAction.next_item: ["alt+page_down"],
    ScanAction.move_cursor: ["home"],
    ScanAction.announce_distance: ["end"],
    ScanAction.rescan: ["ctrl+r"],
    ScanAction.close: ["esc"],
}


def navigator_bindings(overrides: Mapping[str, Iterable[str]] | None = None) -> KeyBindings[NavAction]:
    return KeyBindings.from_config(NavAction, DEFAULT_NAVIGATOR_BINDINGS, overrides)


def scanner_bindings(overrides: Mapping[str, Iterable[str]] | None = None) -> KeyBindings[ScanAction]:
    return KeyBindings.from_config(ScanAction, DEFAULT_SCANNER_BINDINGS, overrides)
