# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user and a starter category tree.

Run once after the initial migration:
    alembic upgrade head
    python bin/seed.py

The admin account is read from FIRST_ADMIN_USERNAME / FIRST_ADMIN_PASSWORD /
FIRST_ADMIN_NICKNAME / FIRST_ADMIN_EMAIL in etc/app.conf.  The category tree
is only inserted into an empty ``categories`` table.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import settings          # noqa: E402
from core.security import hash_password   # noqa: E402
from database import SessionLocal         # noqa: E402
from models.category import Category      # noqa: E402
from models.user import User              # noqa: E402

# root name -> child names
DEFAULT_CATEGORIES = {
    "Movies": ["Action", "Comedy", "Drama"],
    "Series": ["Ongoing", "Completed"],
    "Clips": ["Trending", "Featured"],
}


def seed_admin(db) -> None:
    if not settings.first_admin_username or not settings.first_admin_password:
        print("[seed] FIRST_ADMIN_USERNAME or FIRST_ADMIN_PASSWORD not set in etc/app.conf – no admin created.")
        return

    existing = db.query(User).filter(User.username == settings.first_admin_username).first()
    if existing:
        print(f"[seed] Admin '{settings.first_admin_username}' already exists – skipping.")
        return

    email = settings.first_admin_email or f"{settings.first_admin_username}@localhost"
    db.add(User(
        username=settings.first_admin_username,
        password=hash_password(settings.first_admin_password),
        nickname=settings.first_admin_nickname,
        email=email,
        role="admin",
        is_banned=False,
    ))
    db.commit()
    print(f"[seed] Admin '{settings.first_admin_username}' created successfully.")


def seed_categories(db) -> None:
    if db.query(Category.id).first():
        print("[seed] Categories already present – skipping.")
        return

    for root_name, child_names in DEFAULT_CATEGORIES.items():
        root = Category(name=root_name)
        root.children = [Category(name=name) for name in child_names]
        db.add(root)
    db.commit()
    print(f"[seed] Created {len(DEFAULT_CATEGORIES)} root categories.")


def seed():
    db = SessionLocal()
    try:
        seed_admin(db)
        seed_categories(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
