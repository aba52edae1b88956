import getpass

import pytest

from sparkctl.destination import Destination


@pytest.fixture
def current_user(monkeypatch):
    monkeypatch.setattr(getpass, "getuser", lambda: "localuser")
    return "localuser"


def test_parse_with_username():
    dest = Destination.parse("alice@box")
    assert dest.username == "alice"
    assert dest.hostname == "box"


def test_parse_without_username():
    dest = Destination.parse("box")
    assert dest.username is None
    assert dest.hostname == "box"


@pytest.mark.parametrize("text", ["alice@box", "box"])
def test_str_round_trip(text):
    assert str(Destination.parse(text)) == text
    assert Destination.parse(str(Destination.parse(text))) == Destination.parse(text)


@pytest.mark.parametrize("text", ["", "@box", "alice@", "a b", "a@b@c"])
def test_parse_rejects_malformed(text):
    with pytest.raises(ValueError):
        Destination.parse(text)


def test_resolve_without_alias_uses_own_user():
    dest = Destination.parse("alice@box")
    assert dest.resolve_alias({}) == ("alice", "box")


def test_resolve_without_alias_falls_back_to_current_user(current_user):
    assert Destination.parse("box").resolve_alias({}) == (current_user, "box")


def test_resolve_alias_takes_alias_host_and_user():
    aliases = {"home": Destination.parse("bob@server")}
    assert Destination.parse("home").resolve_alias(aliases) == ("bob", "server")


def test_resolve_alias_prefers_given_user():
    aliases = {"home": Destination.parse("bob@server")}
    assert Destination.parse("alice@home").resolve_alias(aliases) == ("alice", "server")


def test_resolve_alias_without_any_user(current_user):
    aliases = {"home": Destination.parse("server")}
    assert Destination.parse("home").resolve_alias(aliases) == (current_user, "server")