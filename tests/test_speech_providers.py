import json
import logging

import pytest

from access_nav.interfaces import UNAVAILABLE, GameDataProvider, SpeechSink
from access_nav.providers import JsonDataProvider, StaticDataProvider
from access_nav.speech import ConsoleSpeech, ScreenReaderSpeech, clean_text


class DummyOutput:
    def __init__(self, fail=False):
        self.spoken = []
        self.fail = fail

    def speak(self, text, interrupt=False):
        if self.fail:
            raise OSError("no screen reader")
        self.spoken.append((text, interrupt))


def test_clean_text():
    assert clean_text('<sprite name="wood"> x3') == "wood x3"
    assert clean_text("<color=#fff>Hot</color>\n  day") == "Hot day"
    assert clean_text("<b></b>") == ""


def test_screen_reader_speech_forwards_cleaned_text():
    out = DummyOutput()
    sink = ScreenReaderSpeech(out)
    sink.say("<i>Hello</i>")
    sink.say("", interrupt=False)
    sink.say("Later", interrupt=False)
    assert out.spoken == [("Hello", True), ("Later", False)]
    assert isinstance(sink, SpeechSink)


def test_screen_reader_failure_is_logged(caplog):
    sink = ScreenReaderSpeech(DummyOutput(fail=True))
    with caplog.at_level(logging.ERROR):
        sink.say("Hi")
    assert "Speech output failed" in caplog.text


def test_console_speech(capsys):
    ConsoleSpeech().say("<b>Hi</b>")
    ConsoleSpeech().say("   ")
    assert capsys.readouterr().out == "Hi\n"


def test_static_provider_snapshots():
    provider = StaticDataProvider({"menu": {"items": []}, "objects": {"4": {"title": "Well"}}})
    assert isinstance(provider, GameDataProvider)
    assert provider.fetch_snapshot("menu") == {"items": []}
    assert provider.fetch_snapshot("objects", 4) == {"title": "Well"}
    assert provider.fetch_snapshot("objects", 5) is UNAVAILABLE
    assert provider.fetch_snapshot("scan") is UNAVAILABLE
    assert not UNAVAILABLE


def test_event_streams_are_shared_per_kind():
    provider = StaticDataProvider()
    stream = provider.fetch_events("alerts")
    assert provider.fetch_events("alerts") is stream
    got = []
    unsubscribe = stream.subscribe(got.append)
    stream.emit(1)
    unsubscribe()
    unsubscribe()
    stream.emit(2)
    assert got == [1]


def test_json_provider(tmp_path):
    path = tmp_path / "world.json"
    path.write_text(json.dumps({"menu": {"items": ["A"]}}))
    provider = JsonDataProvider(path)
    assert provider.fetch_snapshot("menu") == {"items": ["A"]}
    path.write_text(json.dumps({"menu": {"items": ["B"]}}))
    provider.reload()
    assert provider.fetch_snapshot("menu") == {"items": ["B"]}

    path.write_text("[]")
    with pytest.raises(ValueError):
        JsonDataProvider(path)
