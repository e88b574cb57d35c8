import pytest

from access_nav.announcer import MalformedEventError
from access_nav.app import Application, template
from access_nav.config import NavConfig
from access_nav.context import GameContext
from access_nav.interfaces import UNAVAILABLE
from access_nav.key_types import Key, Modifier
from access_nav.launcher import HotkeyLauncher
from access_nav.providers import StaticDataProvider

WORLD = {
    "menu": {"title": "Main menu", "items": [{"name": "Resources", "items": ["Wood"]}]},
    "objects": {"3": {"title": "Hut", "items": [{"name": "Residents", "items": ["Ada"]}]}},
    "selection": {"object": 3},
    "cursor": {"x": 0, "y": 0},
    "scan": {"entities": [{"name": "Oak", "category": "Resources", "position": [2, 0]}]},
}

PLAIN = Modifier.NONE


@pytest.fixture
def app(speech, clock):
    app = Application(StaticDataProvider(WORLD), speech, NavConfig(), clock=clock)
    app.enter_scene()
    return app


def test_template():
    render = template("{name} {reason} ({name})")
    assert render({"name": "Ada", "reason": "was born", "extra": 1}) == "Ada was born (Ada)"
    with pytest.raises(MalformedEventError):
        render({"name": "Ada"})
    with pytest.raises(MalformedEventError):
        render({"name": "Ada", "reason": None})
    with pytest.raises(MalformedEventError):
        render("not a mapping")
    assert template("{pos[x]}")({"pos": {"x": 4}}) == "4"


def test_launcher_opens_menu_and_game_keys_pass(app, speech):
    assert app.handle_key(Key.w, PLAIN) is False
    assert app.handle_key(Key.f1, PLAIN) is True
    assert speech.last == "Main menu, Resources"
    assert app.handle_key(Key.w, PLAIN) is True
    assert app.handle_key(Key.esc, PLAIN) is False
    assert speech.last == "Menu closed"


def test_open_menu_swallows_other_hotkeys(app, speech):
    app.handle_key(Key.f1, PLAIN)
    # the open menu swallows f2 before the launcher sees it
    assert app.handle_key(Key.f2, PLAIN) is True
    assert speech.last == "Main menu, Resources"
    assert app.handle_key(Key.esc, PLAIN) is False
    assert app.handle_key(Key.f2, PLAIN) is True
    assert speech.last == "Hut, Residents"
    app.handle_key(Key.right, PLAIN)
    assert speech.last == "Ada"


def test_scanner_starts_at_game_cursor(app, speech):
    app.handle_key(Key.f3, PLAIN)
    assert speech.last == "Resources, All, Oak, 1 of 1"
    app.handle_key(Key.end, PLAIN)
    assert speech.last == "2 tiles east"


def test_announcements_are_deduplicated_and_recorded(app, speech, clock):
    alerts = app.context.fetch_events("alerts")
    alerts.emit({"text": "Raid", "time": 1})
    assert speech.said == []
    clock.advance(2)
    alerts.emit({"text": "Raid", "time": 1})
    alerts.emit({"text": "Raid", "time": 1})
    alerts.emit({"oops": True})
    assert speech.said == ["Alert: Raid"]

    app.handle_key(Key.h, Modifier.ALT)
    assert speech.last == "Announcement history, 1 items. Alert: Raid"


def test_leave_scene_closes_and_unsubscribes(app, speech):
    app.handle_key(Key.f1, PLAIN)
    alerts = app.context.fetch_events("alerts")
    assert alerts.subscriber_count == 1
    app.leave_scene()
    assert alerts.subscriber_count == 0
    assert not app.menu.is_active()
    assert app.context.fetch_snapshot("menu") is UNAVAILABLE
    # launcher is inactive between scenes
    assert app.handle_key(Key.f1, PLAIN) is False

    app.enter_scene()
    assert alerts.subscriber_count == 1
    assert app.handle_key(Key.f1, PLAIN) is True


def test_bad_announcer_template_is_skipped(speech, caplog):
    cfg = NavConfig(announcers={"alerts": {"text": "x"}, "season": {"key": "{season}", "text": "{season}"}})
    app = Application(StaticDataProvider(WORLD), speech, cfg)
    app.enter_scene()
    assert [a.name for a in app.announcers] == ["season"]
    assert "skipped" in caplog.text


def test_context_invalidate_runs_hooks_and_disposes():
    closed, disposed = [], []
    ctx = GameContext(StaticDataProvider({"menu": {}}))
    ctx.on_invalidate(lambda: closed.append(True))
    ctx.scope(type("R", (), {"dispose": lambda self: disposed.append(True)})())
    ctx.invalidate()
    assert closed == [True] and disposed == [True]
    assert ctx.generation == 1
    assert not ctx.ready
    ctx.invalidate()
    assert disposed == [True]
    ctx.refresh(StaticDataProvider({"menu": {"items": []}}))
    assert ctx.fetch_snapshot("menu") == {"items": []}


def test_launcher_passes_unknown_keys():
    opened = []
    launcher = HotkeyLauncher({"menu": lambda: opened.append("menu")}, {"menu": ["f1"], "nope": ["f9"]})
    assert launcher.process_key(Key.f9, PLAIN) is False
    assert launcher.process_key(Key.f1, Modifier.CTRL) is False
    assert launcher.process_key(Key.f1, PLAIN) is True
    assert opened == ["menu"]


def test_broken_menu_snapshot_still_releases_keys(speech, caplog):
    app = Application(StaticDataProvider({"menu": {"items": 5}}), speech)
    app.enter_scene()
    assert app.handle_key(Key.f1, PLAIN) is True
    assert speech.last == "Menu, Menu empty"
    assert app.handle_key(Key.esc, PLAIN) is False
    assert not app.menu.is_active()
    assert app.handle_key(Key.space, PLAIN) is False
    assert "refresh failed" in caplog.text


def test_scene_change_closes_history_silently(app, speech):
    app.handle_key(Key.h, Modifier.ALT)
    assert app.history_panel.is_active()
    said = len(speech.said)
    app.leave_scene()
    assert not app.history_panel.is_active()
    assert len(speech.said) == said
