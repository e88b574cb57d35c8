import logging
import threading
from types import SimpleNamespace

from access_nav.dispatch import KeyDispatchChain
from access_nav.input_source import KeyboardInput, TickLoop, translate_key
from access_nav.key_types import Key, Modifier
from access_nav.modifier_state import ModifierState


def test_translate_key_variants():
    assert translate_key(SimpleNamespace(name="page_up")) is Key.page_up
    assert translate_key(SimpleNamespace(name="media_play_pause")) is None
    assert translate_key(SimpleNamespace(char="Q")) is Key.q
    assert translate_key(SimpleNamespace(char="\x12")) is Key.r
    assert translate_key(SimpleNamespace(char=None, vk=72)) is Key.h
    assert translate_key(SimpleNamespace(char=None, vk=13)) is None
    assert translate_key(SimpleNamespace(char="5")) is Key.digit_5


def test_modifier_state():
    mods = ModifierState()
    assert mods.press("ctrl_l") is True
    assert mods.press("a") is False
    mods.press("shift_r")
    assert mods.flags == Modifier.CTRL | Modifier.SHIFT
    mods.release("ctrl_l")
    assert mods.flags == Modifier.SHIFT
    mods.clear()
    assert mods.flags == Modifier.NONE
    assert ModifierState.is_modifier("alt_gr")


def test_tick_loop_runs_tasks_in_order_and_survives_errors(caplog):
    loop = TickLoop()
    ran = []
    loop.post(lambda: ran.append(1))
    loop.post(lambda: 1 / 0)
    loop.post(lambda: ran.append(2))
    with caplog.at_level(logging.ERROR):
        assert loop.drain() == 3
    assert ran == [1, 2]
    assert "failed" in caplog.text
    assert loop.drain() == 0


def test_tick_loop_run_stops():
    loop = TickLoop()
    stop = threading.Event()
    ran = []
    loop.post(lambda: ran.append("a"))
    loop.post(stop.set)
    loop.run(stop, interval=0)
    assert ran == ["a"]


class Recorder:
    def __init__(self, result):
        self.result = result
        self.keys = []

    def is_active(self):
        return True

    def process_key(self, key, modifiers):
        self.keys.append((key, modifiers))
        return self.result


def test_keyboard_input_queues_until_drained():
    handler = Recorder(True)
    loop = TickLoop()
    kb = KeyboardInput(KeyDispatchChain([handler]), loop)
    kb.on_press(SimpleNamespace(name="ctrl_l"))
    kb.on_press(SimpleNamespace(name="page_down"))
    kb.on_release(SimpleNamespace(name="ctrl_l"))
    kb.on_press(SimpleNamespace(name="unknown_key"))
    assert handler.keys == []
    loop.drain()
    assert handler.keys == [(Key.page_down, Modifier.CTRL)]


def test_unconsumed_keys_are_forwarded():
    forwarded = []
    loop = TickLoop()
    kb = KeyboardInput(KeyDispatchChain([Recorder(False)]), loop, forward=lambda k, m: forwarded.append(k))
    kb.on_press(SimpleNamespace(char="x"))
    loop.drain()
    assert forwarded == [Key.x]
