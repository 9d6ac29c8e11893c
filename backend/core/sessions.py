# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Server-side session store.

The cookie carries only a signed session id (see ``core.security``).  The
identity record lives in the ``sessions`` table and is looked up per request,
so logging out or banning a user takes effect immediately.

A ``SessionStore`` is bound to one DB session and is handed to handlers via
``core.security.get_session_store``; nothing here is module-level state.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from core.logger import logger
from models.session import SessionRecord


class SessionEntry(BaseModel):
    """The identity stored for a logged-in browser session."""

    user_id: int = Field(alias="userId")
    username: str
    nickname: str
    email: str
    role: str
    is_authenticated: bool = Field(alias="isAuthenticated")

    model_config = {"populate_by_name": True}

    @classmethod
    def for_user(cls, user) -> "SessionEntry":
        return cls(
            user_id=user.id,
            username=user.username,
            nickname=user.nickname,
            email=user.email,
            role=user.role,
            is_authenticated=True,
        )


@dataclass
class SessionState:
    id: str
    user: Optional[SessionEntry]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    def __init__(self, db: Session, max_age: timedelta):
        self.db = db
        self.max_age = max_age

    def get(self, session_id: str) -> Optional[SessionState]:
        """Return the live session or None if it is unknown or expired."""
        record = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.id == session_id, SessionRecord.expires_at > _now())
            .first()
        )
        if record is None:
            return None

        user = None
        if record.data:
            try:
                user = SessionEntry.model_validate(record.data)
            except SchemaError:
                logger.warning("Session %s… holds malformed identity data", session_id[:8])
        return SessionState(id=record.id, user=user)

    def create(self, entry: Optional[SessionEntry] = None) -> SessionState:
        session_id = secrets.token_urlsafe(32)
        self.db.add(SessionRecord(
            id=session_id,
            user_id=entry.user_id if entry else None,
            data=entry.model_dump(by_alias=True) if entry else None,
            expires_at=_now() + self.max_age,
        ))
        self.db.commit()
        return SessionState(id=session_id, user=entry)

    def set(self, session_id: str, entry: Optional[SessionEntry]) -> None:
        """Replace the identity of an existing session and extend its lifetime."""
        record = self.db.query(SessionRecord).filter(SessionRecord.id == session_id).first()
        if record is None:
            return
        record.user_id = entry.user_id if entry else None
        record.data = entry.model_dump(by_alias=True) if entry else None
        record.expires_at = _now() + self.max_age
        self.db.commit()

    def destroy(self, session_id: str) -> None:
        self.db.query(SessionRecord).filter(SessionRecord.id == session_id).delete()
        self.db.commit()

    def update_for_user(self, entry: SessionEntry) -> int:
        """
        Rewrite the identity of every live session of ``entry.user_id``,
        keeping each session's expiry.  The caller commits.
        """
        records = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.user_id == entry.user_id, SessionRecord.expires_at > _now())
            .all()
        )
        for record in records:
            record.data = entry.model_dump(by_alias=True)
        self.db.flush()
        return len(records)

    def destroy_for_user(self, user_id: int) -> int:
        """
        Drop every session of *user_id* (ban, delete, role or identity change).
        Returns the count.  Runs inside the caller's transaction; the caller
        commits together with the change that made the sessions stale.
        """
        return (
            self.db.query(SessionRecord)
            .filter(SessionRecord.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def purge_expired(self) -> int:
        count = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.expires_at <= _now())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
