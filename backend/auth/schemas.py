# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from core.sessions import SessionEntry


# -- Requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)


# -- Responses -------------------------------------------------------------
# ``user`` is the session entry itself: userId, username, nickname, email,
# role, isAuthenticated.  It never contains the password hash.


class SessionUserResponse(BaseModel):
    message: str
    user: Optional[SessionEntry] = None


class AuthStatusResponse(BaseModel):
    isAuthenticated: bool
    user: Optional[SessionEntry] = None
    message: str
