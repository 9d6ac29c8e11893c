# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
User-management endpoints.

Every endpoint in this router is guarded by ``require_admin``.  A request
whose session belongs to a ``user`` role is rejected with 401 before any
business logic runs.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.errors import ValidationError
from core.query import ListParams, list_params
from core.security import get_session_store, require_admin
from core.sessions import SessionEntry, SessionStore
from users import crud
from users.schemas import (
    BanStatusResponse,
    BanUserRequest,
    CreateUserRequest,
    UpdateUserRequest,
    UserActionResponse,
    UserPage,
    UserRow,
)

router = APIRouter(prefix="/admin/users", tags=["users"])


# ---------------------------------------------------------------------------
# POST /admin/users  – create a new user
# ---------------------------------------------------------------------------


@router.post("", response_model=UserRow, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = crud.create_user(db, body)
    audit.record(db, request, admin.user_id, "create_user", target_user_id=user.id, detail=f"role={body.role}")
    db.commit()
    return user


# ---------------------------------------------------------------------------
# GET /admin/users  – paginated, searchable list
# ---------------------------------------------------------------------------


@router.get("", response_model=UserPage)
def list_users(
    params: ListParams = Depends(list_params),
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Search matches username, nickname and email.  Passwords are never returned."""
    return crud.list_users(db, params)


# ---------------------------------------------------------------------------
# GET /admin/users/{id}
# ---------------------------------------------------------------------------


@router.get("/{user_id}", response_model=UserRow)
def get_user(
    user_id: int,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.get_user(db, user_id)


# ---------------------------------------------------------------------------
# PATCH /admin/users/{id}  – partial update
# ---------------------------------------------------------------------------


@router.patch("/{user_id}", response_model=UserRow)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """
    Only the fields present in the body change.  A new password is hashed
    before it is stored.  Guard: an admin cannot change their own role.
    Live sessions of the user are rewritten with the new identity, so a
    role change applies on their next request.
    """
    if user_id == admin.user_id and body.role is not None and body.role != admin.role:
        raise ValidationError("Cannot change your own role")

    user = crud.update_user(db, user_id, body)
    store.update_for_user(SessionEntry.for_user(user))

    changed = sorted(body.model_dump(exclude_unset=True, exclude_none=True))
    detail = ", ".join("password=******" if f == "password" else f"{f}={getattr(user, f)}" for f in changed)
    audit.record(db, request, admin.user_id, "update_user", target_user_id=user_id, detail=detail or None)
    db.commit()
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# DELETE /admin/users/{id}  – permanent delete
# ---------------------------------------------------------------------------


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Guard: an admin cannot delete their own account."""
    if user_id == admin.user_id:
        raise ValidationError("Cannot delete yourself")

    store.destroy_for_user(user_id)
    username = crud.delete_user(db, user_id)
    audit.record(db, request, admin.user_id, "delete_user", detail=f"user_id={user_id}, username={username}")
    db.commit()

    return {"detail": "User deleted"}


# ---------------------------------------------------------------------------
# PATCH /admin/users/{id}/ban  – set ban state
# ---------------------------------------------------------------------------


@router.patch("/{user_id}/ban", response_model=UserActionResponse)
def ban_user(
    user_id: int,
    body: BanUserRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """
    Set ``is_banned`` / ``ban_reason``.  Banning also ends every live session
    of the target, so the ban takes effect without waiting for a logout.
    """
    if body.is_banned and user_id == admin.user_id:
        raise ValidationError("Cannot ban yourself")

    user = crud.set_ban(db, user_id, body.is_banned, body.ban_reason)
    if body.is_banned:
        store.destroy_for_user(user_id)

    action = "ban_user" if body.is_banned else "unban_user"
    audit.record(db, request, admin.user_id, action, target_user_id=user_id, detail=body.ban_reason)
    db.commit()
    db.refresh(user)

    message = "User banned" if body.is_banned else "User ban state updated"
    return UserActionResponse(message=message, user=user)


# ---------------------------------------------------------------------------
# PATCH /admin/users/{id}/unban
# ---------------------------------------------------------------------------


@router.patch("/{user_id}/unban", response_model=UserActionResponse)
def unban_user(
    user_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Clear the ban and its reason so the user can log in again."""
    user = crud.set_ban(db, user_id, False)
    audit.record(db, request, admin.user_id, "unban_user", target_user_id=user_id)
    db.commit()
    db.refresh(user)
    return UserActionResponse(message="User unbanned", user=user)


# ---------------------------------------------------------------------------
# GET /admin/users/{id}/ban-status
# ---------------------------------------------------------------------------


@router.get("/{user_id}/ban-status", response_model=BanStatusResponse)
def get_ban_status(
    user_id: int,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.ban_status(db, user_id)
