from access_nav.key_types import Key
from access_nav.type_ahead import TypeAheadSearch

NAMES = ["Alpha", "beta", "Bravo", "charlie"]


def lookup(i):
    return NAMES[i]


def test_find_match_prefers_lowest_index_case_insensitive(clock):
    search = TypeAheadSearch(clock)
    search.add_char("B")
    assert search.buffer == "b"
    assert search.find_match(len(NAMES), lookup) == 1
    search.add_char("r")
    assert search.find_match(len(NAMES), lookup) == 2


def test_no_match_and_empty_buffer(clock):
    search = TypeAheadSearch(clock)
    assert search.find_match(len(NAMES), lookup) == -1
    search.add_char("z")
    assert search.find_match(len(NAMES), lookup) == -1
    assert search.find_match(0, lookup) == -1


def test_none_names_are_skipped(clock):
    search = TypeAheadSearch(clock)
    search.add_char("c")
    assert search.find_match(3, lambda i: [None, None, "Cat"][i]) == 2


def test_remove_char(clock):
    search = TypeAheadSearch(clock)
    assert search.remove_char() is False
    search.add_char("a")
    search.add_char("b")
    assert search.remove_char() is True
    assert search.buffer == "a"
    assert search.remove_char() is True
    assert not search.has_buffer


def test_buffer_has_no_timeout(clock):
    search = TypeAheadSearch(clock)
    search.add_char("a")
    clock.advance(3600)
    search.add_char("l")
    assert search.buffer == "al"


def test_navigation_key_clears_buffer(clock):
    search = TypeAheadSearch(clock)
    search.add_char("a")
    assert search.clear_on_navigation_key(Key.a) is False
    assert search.clear_on_navigation_key(Key.down) is True
    assert search.buffer == ""
    assert search.clear_on_navigation_key(Key.down) is False


def test_last_modified_follows_clock(clock):
    search = TypeAheadSearch(clock)
    assert search.last_modified is None
    clock.advance(5)
    search.add_char("x")
    assert search.last_modified == 5
