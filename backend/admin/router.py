# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – audit trail browsing and export.

Every endpoint in this router is guarded by ``require_admin``.
"""

import io
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, aliased
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from database import get_db
from core.security import require_admin
from core.sessions import SessionEntry
from models.user import User
from models.audit_log import AuditLog
from admin.schemas import AuditLogListResponse, AuditLogRow

router = APIRouter(prefix="/admin/audit-logs", tags=["admin"])


def _audit_query(db: Session, usernames=None, since=None, until=None):
    """AuditLog rows joined to actor / target usernames, newest first."""
    Actor = aliased(User)
    Target = aliased(User)

    q = (
        db.query(AuditLog, Actor.username, Target.username)
        .outerjoin(Actor, AuditLog.actor_id == Actor.id)
        .outerjoin(Target, AuditLog.target_user_id == Target.id)
    )
    if usernames:
        q = q.filter(Actor.username.in_(usernames) | Target.username.in_(usernames))
    if since:
        q = q.filter(AuditLog.created_at >= since)
    if until:
        q = q.filter(AuditLog.created_at <= until)

    return q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())


# ---------------------------------------------------------------------------
# GET /admin/audit-logs  – filtered audit trail
# ---------------------------------------------------------------------------


@router.get("", response_model=AuditLogListResponse)
def list_audit_logs(
    usernames: Optional[List[str]] = Query(None, description="Filter by exact username(s) – repeated param"),
    since: Optional[datetime] = Query(None, description="ISO-8601 start of time window"),
    until: Optional[datetime] = Query(None, description="ISO-8601 end of time window"),
    limit: int = Query(200, ge=1, le=1000),
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Return audit log rows newest-first.  Supports optional filters:

    * ``usernames`` – match rows where *either* the actor or the target is
                      one of them.
    * ``since`` / ``until`` – ISO-8601 bounds on ``created_at``.
    * ``limit`` – max rows returned (default 200, cap 1000).
    """
    rows = _audit_query(db, usernames, since, until).limit(limit).all()
    return AuditLogListResponse(logs=[
        AuditLogRow(
            id=log.id,
            actor_username=actor,
            target_username=target,
            action=log.action,
            detail=log.detail,
            request_ip=log.request_ip,
            created_at=log.created_at,
        )
        for log, actor, target in rows
    ])


# ---------------------------------------------------------------------------
# GET /admin/audit-logs/export  – download audit logs as Excel
# ---------------------------------------------------------------------------

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="6C63FF", end_color="6C63FF", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

EXPORT_HEADERS = ["ID", "Time", "Actor", "Target", "Action", "Request IP", "Details"]
_COLUMN_WIDTHS = [8, 20, 20, 20, 28, 16, 50]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/export")
def export_audit_logs(
    usernames: Optional[List[str]] = Query(None),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Export the (filtered) audit trail as an Excel file."""
    rows = _audit_query(db, usernames, since, until).all()

    wb = Workbook()
    ws = wb.active
    ws.title = "Audit Logs"

    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    for log, actor, target in rows:
        ws.append([
            log.id,
            log.created_at.strftime("%Y-%m-%d %H:%M:%S") if log.created_at else "",
            actor or "",
            target or "",
            log.action,
            log.request_ip or "",
            log.detail or "",
        ])
        for cell in ws[ws.max_row]:
            cell.border = _THIN_BORDER

    for col_idx, width in enumerate(_COLUMN_WIDTHS, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    return StreamingResponse(
        buf,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="audit-logs.xlsx"'},
    )
