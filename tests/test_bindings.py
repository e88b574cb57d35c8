import pytest

from access_nav.bindings import (
    KeyBindings,
    KeyCombo,
    navigator_bindings,
    parse_combo,
    scanner_bindings,
)
from access_nav.key_types import Key, Modifier, NavAction, ScanAction


def test_parse_combo():
    assert parse_combo("ctrl+page_up") == KeyCombo(Key.page_up, Modifier.CTRL)
    assert parse_combo(" Alt + Shift + H ") == KeyCombo(Key.h, Modifier.ALT | Modifier.SHIFT)
    assert parse_combo("7") == KeyCombo(Key.digit_7)
    assert str(KeyCombo(Key.r, Modifier.SHIFT | Modifier.CTRL)) == "ctrl+shift+r"


@pytest.mark.parametrize("text", ["", "ctrl+", "hyper+a", "ctrl+nokey"])
def test_parse_combo_rejects(text):
    with pytest.raises(ValueError):
        parse_combo(text)


def test_default_scanner_bindings():
    b = scanner_bindings()
    assert b.resolve(Key.page_up, Modifier.CTRL) is ScanAction.prev_category
    assert b.resolve(Key.page_down, Modifier.SHIFT) is ScanAction.next_subcategory
    assert b.resolve(Key.page_down) is ScanAction.next_group
    assert b.resolve(Key.page_up, Modifier.ALT) is ScanAction.prev_item
    assert b.resolve(Key.page_up, Modifier.CTRL | Modifier.ALT) is None


def test_navigator_right_and_enter_share_action():
    b = navigator_bindings()
    assert b.resolve(Key.right) is NavAction.enter
    assert b.resolve(Key.enter) is NavAction.enter
    assert set(b.combos_for(NavAction.enter)) == {KeyCombo(Key.right), KeyCombo(Key.enter)}


def test_overrides_replace_defaults():
    b = navigator_bindings({"up": ["w"], "down": ["s"]})
    assert b.resolve(Key.w) is NavAction.up
    assert b.resolve(Key.up) is None
    assert b.resolve(Key.left) is NavAction.back


def test_unknown_action_and_conflicts():
    with pytest.raises(ValueError):
        navigator_bindings({"fly": ["f"]})
    with pytest.raises(ValueError):
        KeyBindings({NavAction.up: ["a"], NavAction.down: ["a"]})
