# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Content-management endpoints.

Everything here is admin-only.  Thumbnails and videos are streamed straight
through to Bunny; only the resulting URL / GUID is stored on the row.

Routes with a fixed first segment (``/stats``, ``/upload/...``,
``/files/...``, ``/video/...``) are declared before ``/{content_id}``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.config import settings
from core.errors import UpstreamError
from core.logger import logger
from core.media import (
    IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    VIDEO_TYPES,
    BunnyClient,
    cdn_url,
    get_media_client,
    read_upload,
)
from core.query import ListParams, list_params
from core.security import require_admin
from core.sessions import SessionEntry
from contents import crud
from contents.schemas import (
    ContentFilters,
    ContentPage,
    ContentRow,
    ContentStats,
    ContentStatus,
    CreateContentRequest,
    FileDeleteResponse,
    ImageUploadResponse,
    UpdateContentRequest,
    VideoUploadResponse,
)

router = APIRouter(prefix="/admin/contents", tags=["contents"])


def content_filters(
    category: Optional[str] = Query(None),
    sub_category: Optional[str] = Query(None),
    status: Optional[ContentStatus] = Query(None),
    is_visible: Optional[bool] = Query(None),
    is_popular: Optional[bool] = Query(None),
) -> ContentFilters:
    return ContentFilters(
        category=category or None,
        sub_category=sub_category or None,
        status=status,
        is_visible=is_visible,
        is_popular=is_popular,
    )


# ---------------------------------------------------------------------------
# Listing & stats
# ---------------------------------------------------------------------------


@router.get("", response_model=ContentPage)
def list_contents(
    params: ListParams = Depends(list_params),
    filters: ContentFilters = Depends(content_filters),
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Search matches title, description and tags; filters are exact matches."""
    return crud.list_contents(db, params, filters)


@router.get("/stats", response_model=ContentStats)
def content_stats(
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.get_stats(db)


# ---------------------------------------------------------------------------
# Media upload / delete
# ---------------------------------------------------------------------------


@router.post("/upload/thumbnail", response_model=ImageUploadResponse)
def upload_thumbnail(
    request: Request,
    file: Optional[UploadFile] = File(None),
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    """Image only (jpg, jpeg, png, gif, webp), 10 MB at most."""
    data = read_upload(file, IMAGE_TYPES, "image", max_bytes=MAX_IMAGE_BYTES)
    result = media.upload_image(
        settings.bunny_content_image_zone,
        settings.bunny_content_image_access_key,
        data,
        file.filename,
    )
    audit.record(db, request, admin.user_id, "upload_content_thumbnail", detail=result["filename"])
    db.commit()
    return result


@router.post("/upload/video", response_model=VideoUploadResponse)
def upload_video(
    request: Request,
    file: Optional[UploadFile] = File(None),
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    data = read_upload(file, VIDEO_TYPES, "video")
    result = media.upload_video(data, file.filename)
    audit.record(db, request, admin.user_id, "upload_content_video", detail=result["guid"])
    db.commit()
    return result


@router.delete("/files/{filename}", response_model=FileDeleteResponse)
def delete_thumbnail(
    filename: str,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    """
    Remove a thumbnail from the content zone.  Rows pointing at it lose their
    ``image_url`` only when the remote delete succeeded.
    """
    zone = settings.bunny_content_image_zone
    try:
        media.delete_image(zone, settings.bunny_content_image_access_key, filename)
    except UpstreamError as exc:
        logger.warning("Thumbnail %s not deleted: %s", filename, exc.message)
        return FileDeleteResponse(deleted=False, message=exc.message)

    cleared = crud.clear_image_url(db, cdn_url(zone, filename))
    audit.record(db, request, admin.user_id, "delete_content_thumbnail",
                 detail=f"filename={filename}, rows={cleared}")
    db.commit()
    return FileDeleteResponse(deleted=True, message="File deleted")


@router.delete("/video/{guid}", response_model=FileDeleteResponse)
def delete_video(
    guid: str,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    media: BunnyClient = Depends(get_media_client),
    db: Session = Depends(get_db),
):
    try:
        media.delete_video(guid)
    except UpstreamError as exc:
        logger.warning("Video %s not deleted: %s", guid, exc.message)
        return FileDeleteResponse(deleted=False, message=exc.message)

    cleared = crud.clear_video(db, guid)
    audit.record(db, request, admin.user_id, "delete_content_video", detail=f"guid={guid}, rows={cleared}")
    db.commit()
    return FileDeleteResponse(deleted=True, message="Video deleted")


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post("", response_model=ContentRow, status_code=status.HTTP_201_CREATED)
def create_content(
    body: CreateContentRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    content = crud.create_content(db, body)
    audit.record(db, request, admin.user_id, "create_content", detail=f"id={content.id}, title={content.title}")
    db.commit()
    db.refresh(content)
    return content


@router.get("/{content_id}", response_model=ContentRow)
def get_content(
    content_id: int,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return crud.get_content(db, content_id)


@router.patch("/{content_id}", response_model=ContentRow)
def update_content(
    content_id: int,
    body: UpdateContentRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    content = crud.update_content(db, content_id, body)
    changed = ", ".join(sorted(body.model_fields_set))
    audit.record(db, request, admin.user_id, "update_content", detail=f"id={content_id}, fields={changed}")
    db.commit()
    db.refresh(content)
    return content


@router.delete("/{content_id}", response_model=ContentRow)
def delete_content(
    content_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Soft delete: the row stays, with ``status = "deleted"``."""
    content = crud.soft_delete(db, content_id)
    audit.record(db, request, admin.user_id, "delete_content", detail=f"id={content_id}")
    db.commit()
    db.refresh(content)
    return content


@router.delete("/{content_id}/hard")
def hard_delete_content(
    content_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Remove the row permanently.  Media on Bunny is left alone."""
    title = crud.hard_delete(db, content_id)
    audit.record(db, request, admin.user_id, "hard_delete_content", detail=f"id={content_id}, title={title}")
    db.commit()
    return {"detail": "Content permanently deleted"}


@router.patch("/{content_id}/toggle-popular", response_model=ContentRow)
def toggle_popular(
    content_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    content = crud.toggle_popular(db, content_id)
    audit.record(db, request, admin.user_id, "toggle_content_popular",
                 detail=f"id={content_id}, is_popular={content.is_popular}")
    db.commit()
    db.refresh(content)
    return content


@router.patch("/{content_id}/toggle-visibility", response_model=ContentRow)
def toggle_visibility(
    content_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    content = crud.toggle_visibility(db, content_id)
    audit.record(db, request, admin.user_id, "toggle_content_visibility",
                 detail=f"id={content_id}, is_visible={content.is_visible}")
    db.commit()
    db.refresh(content)
    return content
