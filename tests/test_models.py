"""Tests for trove data models and entry store lookups."""

from pathlib import Path

from trove.models import Entry, Trove, TroveConfig, parse_categories


def _trove(*entries: Entry) -> Trove:
    return Trove(
        config=TroveConfig(path="$HOME/dots/trove.conf", store_path="$HOME/dots/store"),
        entries=set(entries),
    )


def test_entry_equality_is_structural():
    a = Entry(name="vimrc", host_path="$HOME/.vimrc", categories=frozenset({"editor"}))
    b = Entry(name="vimrc", host_path="$HOME/.vimrc", categories=frozenset({"editor"}))
    c = Entry(name="vimrc", host_path="$HOME/.vimrc", categories=frozenset({"shell"}))
    assert a == b
    assert a != c
    assert len({a, b, c}) == 2


def test_find_by_name():
    vimrc = Entry(name="vimrc", host_path="$HOME/.vimrc")
    trove = _trove(vimrc, Entry(name="zshrc", host_path="$HOME/.zshrc"))

    assert trove.find_by_name("vimrc") == vimrc
    assert trove.find_by_name("bashrc") is None


def test_find_by_host_path_matches_store_location():
    vimrc = Entry(name="vimrc", host_path="$HOME/.vimrc")
    trove = _trove(vimrc)
    store = Path("/home/u/dots/store")

    assert trove.find_by_host_path(store / "vimrc", store) == vimrc
    # The recorded host path is not what this lookup compares against
    assert trove.find_by_host_path(Path("/home/u/.vimrc"), store) is None


def test_find_by_recorded_path():
    vimrc = Entry(name="vimrc", host_path="$HOME/.vimrc")
    trove = _trove(vimrc)
    assert trove.find_by_recorded_path("$HOME/.vimrc") == vimrc
    assert trove.find_by_recorded_path("$HOME/.zshrc") is None


def test_find_by_category():
    vimrc = Entry(name="vimrc", host_path="$HOME/.vimrc", categories=frozenset({"editor", "cli"}))
    zshrc = Entry(name="zshrc", host_path="$HOME/.zshrc", categories=frozenset({"shell", "cli"}))
    trove = _trove(vimrc, zshrc)

    assert trove.find_by_category("editor") == {vimrc}
    assert trove.find_by_category("cli") == {vimrc, zshrc}
    assert trove.find_by_category("gui") is None


def test_add_discard_and_ordering():
    trove = _trove()
    b = Entry(name="b", host_path="$HOME/b")
    a = Entry(name="a", host_path="$HOME/a")
    trove.add(b)
    trove.add(a)
    trove.add(a)
    assert [e.name for e in trove.sorted_entries()] == ["a", "b"]

    trove.discard(a)
    trove.discard(a)
    assert trove.entries == {b}


def test_parse_categories():
    assert parse_categories("editor,shell") == {"editor", "shell"}
    assert parse_categories("editor,,shell,") == {"editor", "shell"}
    assert parse_categories(" editor , shell ") == {"editor", "shell"}
    assert parse_categories("") == frozenset()
    assert parse_categories(None) == frozenset()
