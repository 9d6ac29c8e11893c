# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, logout, current-user info, session status.

Security notes
--------------
* Login returns the *same* error message whether the username doesn't exist
  or the password is wrong.  This prevents user-enumeration attacks.  A
  banned account is told it is banned, with the reason.
* Login always issues a fresh session id; any session the browser already
  had is destroyed first (no session fixation).
* The cookie holds only the signed session id.  Identity lives server-side.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.config import settings
from core.errors import AuthorizationError
from core.logger import logger
from core.security import (
    get_client_ip,
    get_session_state,
    get_session_store,
    require_authenticated,
    sign_session_id,
)
from core.sessions import SessionEntry, SessionState, SessionStore
from auth.schemas import AuthStatusResponse, LoginRequest, SessionUserResponse
from users.crud import authenticate

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session_id(session_id),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.session_max_age_hours * 3600,
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=SessionUserResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    current: Optional[SessionState] = Depends(get_session_state),
):
    """Check credentials and ban state, then start a session."""
    try:
        user = authenticate(db, body.username, body.password)
    except AuthorizationError as exc:
        logger.warning(
            "Login failed for username=%s client=%s cause=%s",
            body.username, get_client_ip(request), exc.cause,
        )
        raise

    if current is not None:
        store.destroy(current.id)
    purged = store.purge_expired()
    if purged:
        logger.info("Purged %d expired session(s)", purged)

    entry = SessionEntry.for_user(user)
    state = store.create(entry)
    _set_session_cookie(response, state.id)

    audit.record(db, request, user.id, "user_login", target_user_id=user.id)
    db.commit()
    logger.info("User %s logged in (role=%s)", user.username, user.role)

    return SessionUserResponse(message="Login successful", user=entry)


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    response: Response,
    store: SessionStore = Depends(get_session_store),
    current: Optional[SessionState] = Depends(get_session_state),
):
    """Destroy the server-side session and clear the cookie.  Idempotent."""
    if current is not None:
        store.destroy(current.id)
    _clear_session_cookie(response)
    return {"message": "Logged out"}


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=SessionUserResponse)
def me(user: SessionEntry = Depends(require_authenticated)):
    """Return the session identity (no secrets)."""
    return SessionUserResponse(message="Current user", user=user)


# ---------------------------------------------------------------------------
# GET /auth/status
# ---------------------------------------------------------------------------


@router.get("/status", response_model=AuthStatusResponse)
def auth_status(current: Optional[SessionState] = Depends(get_session_state)):
    """Public: report whether the caller holds an authenticated session."""
    user = current.user if current is not None else None
    if user is not None and not user.is_authenticated:
        user = None
    return AuthStatusResponse(
        isAuthenticated=user is not None,
        user=user,
        message="Authenticated" if user is not None else "Not authenticated",
    )
