from fastapi.testclient import TestClient

from core.config import settings
from main import app
from models.audit_log import AuditLog
from models.session import SessionRecord
from conftest import ADMIN_PASSWORD, USER_PASSWORD, login, make_user


def test_login_sets_http_only_cookie_and_returns_identity(client, plain_user):
    resp = login(client, plain_user.username, USER_PASSWORD)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["user"] == {
        "userId": plain_user.id,
        "username": "viewer",
        "nickname": "Viewer",
        "email": "viewer@example.com",
        "role": "user",
        "isAuthenticated": True,
    }
    cookie = resp.headers["set-cookie"]
    assert cookie.startswith(f"{settings.session_cookie_name}=")
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()


def test_login_never_returns_the_password(client, plain_user):
    body = login(client, plain_user.username, USER_PASSWORD).json()
    assert "password" not in body["user"]


def test_wrong_password_and_unknown_user_look_the_same(client, plain_user):
    wrong = login(client, plain_user.username, "nope")
    unknown = login(client, "ghost", "nope")
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"detail": "Invalid username or password"}


def test_banned_user_is_told_the_reason(client, db):
    make_user(db, "spammer", "secret1", is_banned=True, ban_reason="spam")
    resp = login(client, "spammer", "secret1")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Account is banned. Reason: spam"}


def test_me_and_status(user_client, plain_user):
    me = user_client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["username"] == plain_user.username

    status = user_client.get("/api/auth/status").json()
    assert status["isAuthenticated"] is True
    assert status["user"]["role"] == "user"


def test_status_is_public(client):
    body = client.get("/api/auth/status").json()
    assert body == {"isAuthenticated": False, "user": None, "message": "Not authenticated"}


def test_logout_destroys_the_session(user_client, db):
    assert user_client.post("/api/auth/logout").status_code == 200
    assert db.query(SessionRecord).count() == 0
    assert user_client.get("/api/auth/me").status_code == 401


def test_logout_without_session_is_fine(client):
    assert client.post("/api/auth/logout").status_code == 200


def test_login_rotates_the_session_id(client, plain_user, db):
    login(client, plain_user.username, USER_PASSWORD)
    first = {r.id for r in db.query(SessionRecord).all()}
    login(client, plain_user.username, USER_PASSWORD)
    db.expire_all()
    second = {r.id for r in db.query(SessionRecord).all()}
    assert len(first) == len(second) == 1
    assert first != second


def test_login_is_audited(admin_user, db):
    with TestClient(app, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}) as c:
        login(c, admin_user.username, ADMIN_PASSWORD)
    log = db.query(AuditLog).filter(AuditLog.action == "user_login").one()
    assert log.actor_id == admin_user.id
    assert log.request_ip == "203.0.113.9"


def test_validation_errors_are_422(client):
    assert client.post("/api/auth/login", json={"username": ""}).status_code == 422
