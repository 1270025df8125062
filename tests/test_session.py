"""Tests for the session (cookie, token) state."""

from requests.structures import CaseInsensitiveDict

from hilink.session import TOKEN_HEADER, SessionState


def test_new_session_is_empty():
    state = SessionState()

    assert state.cookie is None
    assert state.token is None
    assert not state.started


def test_bootstrap_installs_cookie_and_token():
    state = SessionState()
    state.bootstrap("sess", "tok0")

    assert state.started
    assert (state.cookie, state.token) == ("sess", "tok0")


def test_observe_replaces_token():
    state = SessionState()
    state.bootstrap("sess", "tok0")

    assert state.observe(CaseInsensitiveDict({TOKEN_HEADER.lower(): "tok1"}))
    assert state.token == "tok1"
    assert state.cookie == "sess"


def test_observe_without_token_keeps_current():
    state = SessionState()
    state.bootstrap("sess", "tok0")

    assert not state.observe({"Content-Type": "text/xml"})
    assert not state.observe({TOKEN_HEADER: ""})
    assert state.token == "tok0"


def test_replace_supersedes_both():
    state = SessionState()
    state.bootstrap("sess", "tok0")
    state.replace("sess2", "login-tok")

    assert (state.cookie, state.token) == ("sess2", "login-tok")


def test_clear():
    state = SessionState()
    state.bootstrap("sess", "tok0")
    state.clear()

    assert not state.started


def test_observe_takes_cookie_set_by_response():
    state = SessionState()
    state.bootstrap("sess", "tok0")

    state.observe({TOKEN_HEADER: "tok1"}, "sess2")
    assert (state.cookie, state.token) == ("sess2", "tok1")

    state.observe({}, None)
    assert state.cookie == "sess2"
