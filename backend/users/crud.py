# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""User persistence: listing, CRUD, ban / unban and credential checks."""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import AuthorizationError, ConflictError, NotFoundError
from core.query import ListParams, paginate, search_clause
from core.security import hash_password, verify_password
from models.user import User
from users.schemas import CreateUserRequest, UpdateUserRequest

USER_SORT_FIELDS = (
    "id", "username", "nickname", "email", "role", "is_banned", "created_at", "updated_at",
)
USER_SEARCH_COLUMNS = (User.username, User.nickname, User.email)

# Same message for "no such user" and "wrong password"
_LOGIN_FAIL = "Invalid username or password"


def list_users(db: Session, params: ListParams) -> dict:
    query = db.query(User)
    clause = search_clause(USER_SEARCH_COLUMNS, params.search)
    if clause is not None:
        query = query.filter(clause)
    return paginate(query, User, params, USER_SORT_FIELDS)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def find_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def _assert_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    for column, value, label in ((User.username, username, "Username"), (User.email, email, "Email")):
        if value is None:
            continue
        query = db.query(User.id).filter(column == value)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError(f"{label} already exists")


def _flush(db: Session) -> None:
    # Catches the race the pre-checks cannot see
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Username or email already exists") from exc


def create_user(db: Session, body: CreateUserRequest) -> User:
    _assert_unique(db, body.username, body.email)
    user = User(
        username=body.username,
        password=hash_password(body.password),
        nickname=body.nickname,
        email=body.email,
        role=body.role,
        is_banned=False,
    )
    db.add(user)
    _flush(db)
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, body: UpdateUserRequest) -> User:
    user = get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    _assert_unique(db, changes.get("username"), changes.get("email"), exclude_id=user_id)

    if "password" in changes:
        changes["password"] = hash_password(changes["password"])
    for field, value in changes.items():
        setattr(user, field, value)

    _flush(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> str:
    """Hard delete.  Returns the username for the audit trail."""
    user = get_user(db, user_id)
    username = user.username
    db.delete(user)
    db.flush()
    return username


def set_ban(db: Session, user_id: int, is_banned: bool, reason: Optional[str] = None) -> User:
    user = get_user(db, user_id)
    user.is_banned = is_banned
    # An unbanned account never keeps a stale reason
    user.ban_reason = reason if is_banned else None
    db.flush()
    db.refresh(user)
    return user


def ban_status(db: Session, user_id: int) -> dict:
    user = get_user(db, user_id)
    return {"userId": user.id, "isBanned": user.is_banned, "reason": user.ban_reason or None}


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Check credentials and ban state.  Raises :class:`AuthorizationError`;
    a banned account's error message carries the ban reason.
    """
    user = find_by_username(db, username)
    if not user or not verify_password(password, user.password):
        raise AuthorizationError(_LOGIN_FAIL, cause="bad_credentials")

    if user.is_banned:
        message = "Account is banned"
        if user.ban_reason:
            message += f". Reason: {user.ban_reason}"
        raise AuthorizationError(message, cause="banned")

    return user
