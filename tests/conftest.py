# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
import os
import tempfile

import pytest

# -----------------------------------------------------------------------------------
# EARLY SETUP: settings are read at import time, so the environment must be in
# place before anything under backend/ is imported.
# -----------------------------------------------------------------------------------
_TMP_DIR = tempfile.mkdtemp(prefix="streamdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["COOKIE_SECURE"] = "false"
os.environ["API_PREFIX"] = "/api"
os.environ["BUNNY_CONTENT_IMAGE_ZONE"] = "content-zone"
os.environ["BUNNY_CONTENT_IMAGE_ACCESS_KEY"] = "content-key"
os.environ["BUNNY_ADVERTISEMENT_IMAGE_ZONE"] = "ad-zone"
os.environ["BUNNY_ADVERTISEMENT_IMAGE_ACCESS_KEY"] = "ad-key"
os.environ["BUNNY_VIDEO_LIBRARY_ID"] = "4242"
os.environ["BUNNY_VIDEO_API_KEY"] = "video-key"

# -----------------------------------------------------------------------------------
# IMPORTS after setup
# -----------------------------------------------------------------------------------
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from core.errors import UpstreamError  # noqa: E402
from core.media import cdn_url, get_media_client  # noqa: E402
from core.security import hash_password  # noqa: E402
from models.user import User  # noqa: E402

ADMIN_PASSWORD = "admin-pass"
USER_PASSWORD = "user-pass"


# -----------------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_user(db, username, password, role="user", is_banned=False, ban_reason=None):
    user = User(
        username=username,
        password=hash_password(password),
        nickname=username.title(),
        email=f"{username}@example.com",
        role=role,
        is_banned=is_banned,
        ban_reason=ban_reason,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin", ADMIN_PASSWORD, role="admin")


@pytest.fixture
def plain_user(db):
    return make_user(db, "viewer", USER_PASSWORD)


# -----------------------------------------------------------------------------------
# Media store double
# -----------------------------------------------------------------------------------
class FakeMedia:
    """Stands in for BunnyClient; records calls and can be told to fail."""

    def __init__(self):
        self.calls = []
        self.fail = False

    def _maybe_fail(self, what):
        if self.fail:
            raise UpstreamError(f"Media store rejected {what}: 500 Internal Server Error")

    def upload_image(self, zone, access_key, data, original_name):
        self.calls.append(("upload_image", zone, original_name, len(data)))
        self._maybe_fail("image upload")
        filename = f"1700000000000-{'a' * 32}.png"
        return {"url": cdn_url(zone, filename), "filename": filename}

    def delete_image(self, zone, access_key, filename):
        self.calls.append(("delete_image", zone, filename))
        self._maybe_fail("image delete")

    def upload_video(self, data, original_name):
        self.calls.append(("upload_video", original_name, len(data)))
        self._maybe_fail("video upload")
        return {"url": "https://iframe.mediadelivery.net/play/4242/guid-1", "guid": "guid-1"}

    def delete_video(self, guid):
        self.calls.append(("delete_video", guid))
        self._maybe_fail("video delete")


@pytest.fixture
def media():
    fake = FakeMedia()
    app.dependency_overrides[get_media_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_media_client, None)


# -----------------------------------------------------------------------------------
# HTTP clients (anonymous, user, admin)
# -----------------------------------------------------------------------------------
def login(client, username, password):
    return client.post("/api/auth/login", json={"username": username, "password": password})


@pytest.fixture
def client():
    """Anonymous client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_client(plain_user):
    with TestClient(app) as c:
        assert login(c, plain_user.username, USER_PASSWORD).status_code == 200
        yield c


@pytest.fixture
def admin_client(admin_user):
    with TestClient(app) as c:
        assert login(c, admin_user.username, ADMIN_PASSWORD).status_code == 200
        yield c
