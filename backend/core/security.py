# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Central security module.  Password hashing, session-cookie signing and the
access guards live here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. Session-cookie signing                   (PyJWT / HS256)
3. Access guards                            (check_authenticated, check_admin)
4. FastAPI dependencies                     (require_authenticated, require_admin)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthorizationError
from core.logger import logger
from core.sessions import SessionEntry, SessionState, SessionStore
from database import get_db

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# The work factor comes from settings so the test-suite can run with a small
# one; production keeps the passlib default of 600 000 rounds.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plaintext password.  The salt is embedded in the returned string."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # Not a pbkdf2 hash at all – treat as a mismatch
        return False


# ---------------------------------------------------------------------------
# 2.  Session cookie – signed session id
# ---------------------------------------------------------------------------
# The cookie value is a JWT whose only claims are the session id and an
# expiry.  A tampered or expired cookie simply reads as "no session".
# ---------------------------------------------------------------------------

_SESSION_ALG = "HS256"


def sign_session_id(session_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.session_max_age_hours)
    return _jwt.encode({"sid": session_id, "exp": expire}, settings.secret_key, algorithm=_SESSION_ALG)


def read_session_id(token: str) -> Optional[str]:
    try:
        payload = _jwt.decode(token, settings.secret_key, algorithms=[_SESSION_ALG])
    except _jwt.InvalidTokenError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    """Dependency: a SessionStore bound to the request's DB session."""
    return SessionStore(db, timedelta(hours=settings.session_max_age_hours))


def get_session_state(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionState]:
    """Dependency: the caller's session, or None when there is none."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    session_id = read_session_id(token)
    if session_id is None:
        return None
    return store.get(session_id)


# ---------------------------------------------------------------------------
# 3.  Access guards
# ---------------------------------------------------------------------------
# Plain predicates over the session state.  Each distinct failure carries a
# cause for the logs; the client always sees a 401.
# ---------------------------------------------------------------------------

_AUTH_REQUIRED = "Authentication required"


def check_authenticated(state: Optional[SessionState]) -> SessionEntry:
    """Return the session identity or raise :class:`AuthorizationError`."""
    if state is None:
        raise AuthorizationError(_AUTH_REQUIRED, cause="no_session")
    if state.user is None:
        raise AuthorizationError(_AUTH_REQUIRED, cause="no_identity")
    if not state.user.is_authenticated:
        raise AuthorizationError(_AUTH_REQUIRED, cause="not_authenticated")
    return state.user


def check_admin(state: Optional[SessionState]) -> SessionEntry:
    """:func:`check_authenticated` plus ``role == 'admin'``."""
    user = check_authenticated(state)
    if user.role != "admin":
        raise AuthorizationError("Admin access required", cause="not_admin")
    return user


# ---------------------------------------------------------------------------
# 4.  FastAPI dependency guards
# ---------------------------------------------------------------------------


def _guard(check, request: Request, state: Optional[SessionState]) -> SessionEntry:
    try:
        return check(state)
    except AuthorizationError as exc:
        logger.warning(
            "Guard rejected %s %s | client=%s cause=%s",
            request.method,
            request.url.path,
            get_client_ip(request),
            exc.cause,
        )
        raise


def require_authenticated(
    request: Request,
    state: Optional[SessionState] = Depends(get_session_state),
) -> SessionEntry:
    """Dependency: any logged-in user."""
    return _guard(check_authenticated, request, state)


def require_admin(
    request: Request,
    state: Optional[SessionState] = Depends(get_session_state),
) -> SessionEntry:
    """Dependency: a logged-in user whose role is ``admin``."""
    return _guard(check_admin, request, state)


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For first (reverse proxy), then falls back to the
    socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, the first is the client
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
