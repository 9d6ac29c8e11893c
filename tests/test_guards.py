from datetime import datetime, timedelta, timezone

import jwt
import pytest

from core.config import settings
from core.errors import AuthorizationError
from core.logger import logger
from core.security import check_admin, check_authenticated, read_session_id, sign_session_id
from core.sessions import SessionEntry, SessionState, SessionStore
from models.session import SessionRecord
from conftest import make_user


def _entry(role="user", authenticated=True):
    return SessionEntry(
        user_id=1,
        username="someone",
        nickname="Someone",
        email="someone@example.com",
        role=role,
        is_authenticated=authenticated,
    )


# -----------------------------------------------------------------------------------
# Predicates
# -----------------------------------------------------------------------------------
@pytest.mark.parametrize("state, cause", [
    (None, "no_session"),
    (SessionState(id="s", user=None), "no_identity"),
    (SessionState(id="s", user=_entry(authenticated=False)), "not_authenticated"),
])
def test_check_authenticated_failures(state, cause):
    with pytest.raises(AuthorizationError) as exc_info:
        check_authenticated(state)
    assert exc_info.value.cause == cause
    assert exc_info.value.status_code == 401


def test_check_authenticated_returns_identity():
    entry = _entry()
    assert check_authenticated(SessionState(id="s", user=entry)) is entry


def test_check_admin_requires_admin_role():
    with pytest.raises(AuthorizationError) as exc_info:
        check_admin(SessionState(id="s", user=_entry(role="user")))
    assert exc_info.value.cause == "not_admin"
    assert exc_info.value.status_code == 401

    admin = _entry(role="admin")
    assert check_admin(SessionState(id="s", user=admin)) is admin


def test_check_admin_runs_authentication_first():
    with pytest.raises(AuthorizationError) as exc_info:
        check_admin(SessionState(id="s", user=_entry(role="admin", authenticated=False)))
    assert exc_info.value.cause == "not_authenticated"


# -----------------------------------------------------------------------------------
# Cookie signing
# -----------------------------------------------------------------------------------
def test_signed_session_id_round_trip():
    assert read_session_id(sign_session_id("abc")) == "abc"


def test_tampered_or_expired_cookie_reads_as_no_session():
    assert read_session_id("not-a-jwt") is None
    forged = jwt.encode({"sid": "abc"}, "some-other-key", algorithm="HS256")
    assert read_session_id(forged) is None
    expired = jwt.encode(
        {"sid": "abc", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.secret_key,
        algorithm="HS256",
    )
    assert read_session_id(expired) is None


# -----------------------------------------------------------------------------------
# Session store
# -----------------------------------------------------------------------------------
def test_store_create_get_set_destroy(db, plain_user):
    store = SessionStore(db, timedelta(hours=1))
    state = store.create()
    assert store.get(state.id).user is None

    entry = _entry()
    entry.user_id = plain_user.id
    store.set(state.id, entry)
    assert store.get(state.id).user == entry

    store.destroy(state.id)
    assert store.get(state.id) is None


def test_store_ignores_expired_sessions(db, plain_user):
    store = SessionStore(db, timedelta(hours=1))
    live = store.create(_entry())
    db.add(SessionRecord(id="stale", user_id=None, data=None,
                         expires_at=datetime.now(timezone.utc) - timedelta(minutes=5)))
    db.commit()

    assert store.get("stale") is None
    assert store.purge_expired() == 1
    assert store.get(live.id) is not None


def test_store_destroy_for_user(db, plain_user):
    store = SessionStore(db, timedelta(hours=1))
    entry = _entry()
    entry.user_id = plain_user.id
    first, second = store.create(entry), store.create(entry)

    assert store.destroy_for_user(plain_user.id) == 2
    assert store.get(first.id) is None
    assert store.get(second.id) is None


# -----------------------------------------------------------------------------------
# HTTP
# -----------------------------------------------------------------------------------
def test_admin_route_without_session_is_401(client):
    resp = client.get("/api/admin/users")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Authentication required"}


def test_admin_route_with_user_session_is_401(user_client):
    resp = user_client.get("/api/admin/users")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Admin access required"}


def test_garbage_cookie_is_401(client):
    client.cookies.set(settings.session_cookie_name, "garbage")
    assert client.get("/api/auth/me").status_code == 401


def test_guard_failure_does_not_run_handler(user_client, db):
    resp = user_client.post("/api/categories", json={"name": "Nope"})
    assert resp.status_code == 401
    assert user_client.get("/api/categories").json() == []


def test_request_log_uses_forwarded_client_ip(client, caplog):
    logger.addHandler(caplog.handler)
    try:
        client.get("/health", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    finally:
        logger.removeHandler(caplog.handler)
    assert any("GET /health" in m and "client=203.0.113.7" in m for m in caplog.messages)


# -----------------------------------------------------------------------------------
# Admin-only mutations
# -----------------------------------------------------------------------------------
_MUTATIONS = [
    ("post", "/api/admin/contents", {"title": "T", "category": "Movies"}),
    ("patch", "/api/admin/contents/1", {"title": "T2"}),
    ("delete", "/api/admin/contents/1", None),
    ("post", "/api/advertisements", {"title": "Ad", "link_url": "https://example.com"}),
    ("patch", "/api/advertisements/1", {"title": "Ad2"}),
    ("delete", "/api/advertisements/1", None),
    ("post", "/api/admin/users", {"username": "made", "password": "secret1",
                                  "nickname": "Made", "email": "made@example.com"}),
    ("patch", "/api/admin/users/{victim}", {"nickname": "Changed"}),
    ("delete", "/api/admin/users/{victim}", None),
]


@pytest.fixture
def victim(db):
    return make_user(db, "victim", "secret1")


@pytest.mark.parametrize("method, url, body", _MUTATIONS)
def test_mutations_reject_user_role(user_client, victim, method, url, body):
    kwargs = {"json": body} if body is not None else {}
    resp = getattr(user_client, method)(url.format(victim=victim.id), **kwargs)
    assert resp.status_code == 401


def test_mutations_accept_admin_role(admin_client, victim, media):
    for method, url, body in _MUTATIONS:
        kwargs = {"json": body} if body is not None else {}
        resp = getattr(admin_client, method)(url.format(victim=victim.id), **kwargs)
        assert resp.status_code in (200, 201), (method, url, resp.text)
