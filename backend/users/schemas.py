# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the user-management endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from core.query import Page

Role = Literal["admin", "user"]


# -- Requests --------------------------------------------------------------


class CreateUserRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    nickname: str = Field(min_length=1, max_length=100)
    email: EmailStr
    role: Role = "user"


class UpdateUserRequest(BaseModel):
    # Only the fields present in the body are changed
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    password: Optional[str] = Field(None, min_length=6)
    nickname: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None


class BanUserRequest(BaseModel):
    is_banned: bool
    ban_reason: Optional[str] = Field(None, max_length=1000)


# -- Responses -------------------------------------------------------------


class UserRow(BaseModel):
    id: int
    username: str
    nickname: str
    email: str
    role: str
    is_banned: bool
    ban_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


UserPage = Page[UserRow]


class UserActionResponse(BaseModel):
    message: str
    user: UserRow


class BanStatusResponse(BaseModel):
    userId: int
    isBanned: bool
    reason: Optional[str] = None
