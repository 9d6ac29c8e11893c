# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic response models for the admin audit-log endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AuditLogRow(BaseModel):
    id: int
    actor_username: Optional[str] = None    # resolved from actor_id join
    target_username: Optional[str] = None   # resolved from target_user_id join
    action: str
    detail: Optional[str] = None
    request_ip: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogRow]
