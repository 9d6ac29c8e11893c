from fastapi.testclient import TestClient

from main import app
from core.security import verify_password
from models.audit_log import AuditLog
from models.session import SessionRecord
from models.user import User
from conftest import USER_PASSWORD, login, make_user

NEW_USER = {
    "username": "newbie",
    "password": "secret1",
    "nickname": "Newbie",
    "email": "newbie@example.com",
}


def test_create_user(admin_client, db):
    resp = admin_client.post("/api/admin/users", json=NEW_USER)
    assert resp.status_code == 201
    body = resp.json()
    assert body["username"] == "newbie"
    assert body["role"] == "user"
    assert body["is_banned"] is False
    assert "password" not in body

    stored = db.query(User).filter(User.username == "newbie").one()
    assert stored.password != "secret1"
    assert verify_password("secret1", stored.password)


def test_create_user_duplicate_username_is_409(admin_client, plain_user):
    resp = admin_client.post("/api/admin/users", json={**NEW_USER, "username": plain_user.username})
    assert resp.status_code == 409
    assert resp.json() == {"detail": "Username already exists"}


def test_create_user_validates_input(admin_client):
    assert admin_client.post("/api/admin/users", json={**NEW_USER, "email": "nope"}).status_code == 422
    assert admin_client.post("/api/admin/users", json={**NEW_USER, "password": "123"}).status_code == 422
    assert admin_client.post("/api/admin/users", json={**NEW_USER, "role": "root"}).status_code == 422


def test_list_users_paginates_and_searches(admin_client, db):
    for i in range(12):
        make_user(db, f"member{i:02d}", "secret1")

    page = admin_client.get("/api/admin/users", params={"page": 2, "limit": 5}).json()
    assert len(page["data"]) == 5
    assert page["pagination"] == {
        "page": 2, "limit": 5, "total": 13, "totalPages": 3, "hasNext": True, "hasPrev": True,
    }
    assert all("password" not in row for row in page["data"])

    found = admin_client.get("/api/admin/users", params={"search": "MEMBER1"}).json()
    assert sorted(row["username"] for row in found["data"]) == ["member10", "member11"]


def test_list_users_sorting(admin_client, db):
    make_user(db, "aaron", "secret1")
    make_user(db, "zoe", "secret1")
    rows = admin_client.get("/api/admin/users", params={"sortBy": "username", "sortOrder": "asc"}).json()["data"]
    names = [r["username"] for r in rows]
    assert names == sorted(names)


def test_get_missing_user_is_404(admin_client):
    resp = admin_client.get("/api/admin/users/999")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "User not found"}


def test_update_user_changes_only_given_fields(admin_client, plain_user, db):
    resp = admin_client.patch(f"/api/admin/users/{plain_user.id}", json={"nickname": "Renamed", "password": "newpass1"})
    assert resp.status_code == 200
    assert resp.json()["nickname"] == "Renamed"
    assert resp.json()["email"] == plain_user.email

    db.expire_all()
    stored = db.get(User, plain_user.id)
    assert verify_password("newpass1", stored.password)


def test_update_to_taken_email_is_409(admin_client, plain_user, admin_user):
    resp = admin_client.patch(f"/api/admin/users/{plain_user.id}", json={"email": admin_user.email})
    assert resp.status_code == 409


def test_admin_cannot_change_own_role(admin_client, admin_user):
    resp = admin_client.patch(f"/api/admin/users/{admin_user.id}", json={"role": "user"})
    assert resp.status_code == 400


def test_delete_user(admin_client, plain_user, db):
    user_id = plain_user.id
    resp = admin_client.delete(f"/api/admin/users/{user_id}")
    assert resp.status_code == 200
    db.expire_all()
    assert db.get(User, user_id) is None
    assert admin_client.delete(f"/api/admin/users/{user_id}").status_code == 404


def test_admin_cannot_delete_self(admin_client, admin_user):
    assert admin_client.delete(f"/api/admin/users/{admin_user.id}").status_code == 400


# -----------------------------------------------------------------------------------
# Ban / unban
# -----------------------------------------------------------------------------------
def test_ban_then_login_is_rejected_with_reason(admin_client, client, plain_user):
    resp = admin_client.patch(f"/api/admin/users/{plain_user.id}/ban",
                              json={"is_banned": True, "ban_reason": "spam"})
    assert resp.status_code == 200
    assert resp.json()["user"]["is_banned"] is True
    assert resp.json()["user"]["ban_reason"] == "spam"

    denied = login(client, plain_user.username, USER_PASSWORD)
    assert denied.status_code == 401
    assert "spam" in denied.json()["detail"]


def test_ban_ends_live_sessions(admin_client, user_client, plain_user, db):
    assert user_client.get("/api/auth/me").status_code == 200
    admin_client.patch(f"/api/admin/users/{plain_user.id}/ban", json={"is_banned": True, "ban_reason": "x"})

    assert db.query(SessionRecord).filter(SessionRecord.user_id == plain_user.id).count() == 0
    assert user_client.get("/api/auth/me").status_code == 401


def test_demoted_admin_loses_admin_access_at_once(admin_client, db):
    deputy = make_user(db, "deputy", "secret1", role="admin")
    with TestClient(app) as deputy_client:
        assert login(deputy_client, "deputy", "secret1").status_code == 200
        assert deputy_client.get("/api/admin/users").status_code == 200

        resp = admin_client.patch(f"/api/admin/users/{deputy.id}", json={"role": "user"})
        assert resp.json()["role"] == "user"

        assert deputy_client.get("/api/admin/users").status_code == 401
        me = deputy_client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["role"] == "user"


def test_profile_change_is_visible_in_live_session(admin_client, user_client, plain_user):
    admin_client.patch(f"/api/admin/users/{plain_user.id}", json={"nickname": "Renamed"})
    assert user_client.get("/api/auth/me").json()["user"]["nickname"] == "Renamed"


def test_unban_clears_reason(admin_client, client, db):
    banned = make_user(db, "banned", "secret1", is_banned=True, ban_reason="spam")

    resp = admin_client.patch(f"/api/admin/users/{banned.id}/unban")
    assert resp.status_code == 200
    assert resp.json()["user"]["is_banned"] is False
    assert resp.json()["user"]["ban_reason"] is None

    status = admin_client.get(f"/api/admin/users/{banned.id}/ban-status").json()
    assert status == {"userId": banned.id, "isBanned": False, "reason": None}
    assert login(client, "banned", "secret1").status_code == 200


def test_ban_with_false_also_clears_reason(admin_client, db):
    banned = make_user(db, "banned", "secret1", is_banned=True, ban_reason="spam")
    resp = admin_client.patch(f"/api/admin/users/{banned.id}/ban", json={"is_banned": False, "ban_reason": "ignored"})
    assert resp.json()["user"]["ban_reason"] is None


def test_ban_status_of_missing_user_is_404(admin_client):
    assert admin_client.get("/api/admin/users/999/ban-status").status_code == 404


def test_admin_cannot_ban_self(admin_client, admin_user):
    resp = admin_client.patch(f"/api/admin/users/{admin_user.id}/ban", json={"is_banned": True})
    assert resp.status_code == 400


def test_mutations_are_audited(admin_client, plain_user, admin_user, db):
    admin_client.patch(f"/api/admin/users/{plain_user.id}/ban", json={"is_banned": True, "ban_reason": "spam"})
    log = db.query(AuditLog).filter(AuditLog.action == "ban_user").one()
    assert log.actor_id == admin_user.id
    assert log.target_user_id == plain_user.id
    assert log.detail == "spam"
