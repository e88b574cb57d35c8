from __future__ import annotations

from dataclasses import dataclass, field

from .key_types import Modifier

# pynput key names → modifier flag
_MODIFIER_KEYS = {
    "ctrl": Modifier.CTRL, "ctrl_l": Modifier.CTRL, "ctrl_r": Modifier.CTRL,
    "alt": Modifier.ALT, "alt_l": Modifier.ALT, "alt_r": Modifier.ALT, "alt_gr": Modifier.ALT,
    "shift": Modifier.SHIFT, "shift_l": Modifier.SHIFT, "shift_r": Modifier.SHIFT,
}


@dataclass
class ModifierState:
    """Which modifier keys are physically held, fed from press/release events."""

    _held: set[str] = field(default_factory=set)

    @staticmethod
    def is_modifier(name: str | None) -> bool:
        return name in _MODIFIER_KEYS

    def press(self, name: str) -> bool:
        """Record a press; return True if ``name`` was a modifier."""
        if name not in _MODIFIER_KEYS:
            return False
        self._held.add(name)
        return True

    def release(self, name: str) -> bool:
        if name not in _MODIFIER_KEYS:
            return False
        self._held.discard(name)
        return True

    def clear(self) -> None:
        self._held.clear()

    @property
    def flags(self) -> Modifier:
        mods = Modifier.NONE
        for name in self._held:
            mods |= _MODIFIER_KEYS[name]
        return mods
