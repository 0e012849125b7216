from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from kbroker.session import (
    KBS_SESSION_ID,
    Challenge,
    Request,
    SessionMap,
    SessionState,
    new_session,
)

REQ = "^0.1.0"


def make_session(timeout=5, version="0.1.0"):
    return new_session(Request(version=version, tee="sample"), timeout, Challenge(nonce="abc"), REQ)


def test_new_session_is_authed():
    request = Request(version="0.1.0", tee="sample")
    challenge = Challenge(nonce="abc")
    session = new_session(request, 5, challenge, REQ)
    assert session.state is SessionState.AUTHED
    assert session.request == request
    assert session.challenge == challenge
    assert len(session.id) == 32
    int(session.id, 16)


def test_timeout_is_minutes_from_now():
    before = datetime.now(timezone.utc)
    session = make_session(timeout=5)
    after = datetime.now(timezone.utc)
    assert before + timedelta(minutes=5) <= session.timeout <= after + timedelta(minutes=5)


def test_ids_are_unique():
    assert make_session().id != make_session().id or False
    ids = {make_session().id for _ in range(20)}
    assert len(ids) == 20


def test_invalid_version_string():
    with pytest.raises(ValueError):
        make_session(version="not-a-version")


def test_version_outside_requirement():
    with pytest.raises(ValueError, match="Invalid Request version 0.2.0"):
        make_session(version="0.2.0")


def test_comparison_requirement():
    session = new_session(Request(version="1.4.0", tee="sample"), 5, Challenge(nonce="n"), ">=1.0.0, <2.0.0")
    assert session.state is SessionState.AUTHED
    with pytest.raises(ValueError):
        new_session(Request(version="2.0.0", tee="sample"), 5, Challenge(nonce="n"), ">=1.0.0, <2.0.0")


def test_cookie():
    session = make_session()
    morsel = session.cookie()
    assert morsel.key == KBS_SESSION_ID
    assert morsel.value == session.id
    assert morsel["expires"] == format_datetime(session.timeout, usegmt=True)
    assert f"{KBS_SESSION_ID}={session.id}" in morsel.OutputString()


def test_is_expired():
    assert make_session(timeout=-1).is_expired() is True
    assert make_session(timeout=5).is_expired() is False


def test_attest_moves_state():
    session = make_session()
    session_id, timeout = session.id, session.timeout
    session.attest("{\"claims\": 1}", "token")
    assert session.state is SessionState.ATTESTED
    assert session.attestation_claims == "{\"claims\": 1}"
    assert session.token == "token"
    assert (session.id, session.timeout) == (session_id, timeout)
    with pytest.raises(RuntimeError):
        session.request
    with pytest.raises(RuntimeError):
        session.challenge


def test_attest_twice_keeps_first():
    session = make_session()
    session.attest("first", "token")
    session.attest("second", "token")
    assert session.attestation_claims == "first"


def test_session_map_insert_and_get():
    sessions = SessionMap()
    session = make_session()
    sessions.insert(session)
    assert sessions.get(session.id) is session
    assert sessions.get("missing") is None


def test_session_map_insert_keeps_existing():
    sessions = SessionMap()
    first = make_session()
    second = make_session()
    second.id = first.id
    sessions.insert(first)
    sessions.insert(second)
    assert sessions.get(first.id) is first
    assert len(sessions.sessions) == 1