# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Audit-trail helper.  Adds the row to the session; the caller commits."""

from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from core.security import get_client_ip
from models.audit_log import AuditLog


def record(
    db: Session,
    request: Optional[Request],
    actor_id: Optional[int],
    action: str,
    target_user_id: Optional[int] = None,
    detail: Optional[str] = None,
) -> None:
    db.add(AuditLog(
        actor_id=actor_id,
        target_user_id=target_user_id,
        action=action,
        detail=detail,
        request_ip=get_client_ip(request) if request is not None else None,
    ))
