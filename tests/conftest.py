import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


class FakeSpeech:
    def __init__(self):
        self.said = []
        self.interrupts = []

    def say(self, text, interrupt=True):
        self.said.append(text)
        self.interrupts.append(interrupt)

    @property
    def last(self):
        return self.said[-1] if self.said else None


class ManualClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def speech():
    return FakeSpeech()


@pytest.fixture
def clock():
    return ManualClock()
